"""
Workflow Interfaces Layer
=========================

FastAPI route handlers for invoice workflows. This is the outermost
layer - handles HTTP requests/responses and delegates to application
services.
"""

from invoice_desk.workflow.interfaces.controllers import workflow_router

__all__ = ["workflow_router"]
