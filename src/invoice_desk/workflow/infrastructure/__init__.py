"""
Workflow Infrastructure Layer
=============================

Gateway implementations backed by the invoicing API client.
"""

from invoice_desk.workflow.infrastructure.external import InvoiceService, WorkflowService

__all__ = [
    "InvoiceService",
    "WorkflowService",
]
