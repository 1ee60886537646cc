"""
Workflow Application Layer
==========================

Contains:
- Services: orchestrate gateways and the SLA evaluator
- DTOs: request/response models and the upstream payload decoders

This layer depends on the domain layer and gateway interfaces,
but not on the concrete HTTP implementations.
"""

from invoice_desk.workflow.application.dto import (
    TransitionRequest,
    BulkTransitionRequest,
    SLAStatusResponse,
    AvailableTransitionResponse,
    HistoryEntryResponse,
    WorkflowPageResponse,
    TransitionResponse,
    BulkTransitionResponse,
    InvoiceSummaryResponse,
    InvoiceListResponse,
    decode_snapshot,
    decode_available_transitions,
    decode_history,
    unwrap_resource,
)
from invoice_desk.workflow.application.services import (
    WorkflowApplicationService,
    WorkflowView,
    InvoiceList,
    InvoiceRow,
    AppliedTransition,
    IInvoiceGateway,
    IWorkflowGateway,
)

__all__ = [
    # DTOs
    "TransitionRequest",
    "BulkTransitionRequest",
    "SLAStatusResponse",
    "AvailableTransitionResponse",
    "HistoryEntryResponse",
    "WorkflowPageResponse",
    "TransitionResponse",
    "BulkTransitionResponse",
    "InvoiceSummaryResponse",
    "InvoiceListResponse",
    # Decoders
    "decode_snapshot",
    "decode_available_transitions",
    "decode_history",
    "unwrap_resource",
    # Services
    "WorkflowApplicationService",
    "WorkflowView",
    "InvoiceList",
    "InvoiceRow",
    "AppliedTransition",
    # Gateway Interfaces
    "IInvoiceGateway",
    "IWorkflowGateway",
]
