"""
Workflow Controllers (API Routes)
=================================

FastAPI routes for invoice workflow and SLA tracking.

Controllers are thin: they extract the caller's token, take one "now" per
request and delegate to WorkflowApplicationService. Typed errors raised
below are turned into HTTP responses by application_exception_handler.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from invoice_desk.infrastructure.api_client import get_api_client
from invoice_desk.shared.infrastructure.logging import get_logger
from invoice_desk.workflow.application import (
    AvailableTransitionResponse,
    BulkTransitionRequest,
    BulkTransitionResponse,
    HistoryEntryResponse,
    InvoiceListResponse,
    InvoiceSummaryResponse,
    SLAStatusResponse,
    TransitionRequest,
    TransitionResponse,
    WorkflowApplicationService,
    WorkflowPageResponse,
)
from invoice_desk.workflow.infrastructure import InvoiceService, WorkflowService

logger = get_logger(__name__)
router = APIRouter(prefix="/invoices", tags=["Invoice Workflow"])


# ========== Example payloads for Swagger ==========

WORKFLOW_PAGE_EXAMPLE = {
    "invoice": {
        "id": 1,
        "invoice_number": "INV-001",
        "status": "pending_review",
        "workflow": {
            "entered_current_state_at": "2024-01-15T08:00:00Z",
            "sla_deadline": "2024-01-15T14:00:00Z"
        }
    },
    "sla": {
        "classification": "normal",
        "message": "Due in 4 hours",
        "progress_percent": 33,
        "display_hint": "green",
        "css_class": "text-green-600 bg-green-100",
        "icon": "clock",
        "time_in_current_state": "2 hours",
        "deadline_formatted": "Jan 15, 2024 at 02:00 PM",
        "deadline": "2024-01-15T14:00:00Z"
    },
    "history": [
        {"status": "draft", "comment": "Invoice created", "user_name": "Admin",
         "created_at": "2024-01-15T08:00:00Z"}
    ],
    "available_transitions": [
        {"name": "Approve Invoice", "target_state": "approved", "requires_comment": False}
    ]
}


# ========== Dependencies ==========

def get_token(authorization: Optional[str] = Header(None)) -> str:
    """Bearer token forwarded to the invoicing API. Never inspected here."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = authorization[7:].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_now() -> datetime:
    """Evaluation instant for the request; overridden in tests."""
    return datetime.now(timezone.utc)


def get_workflow_service() -> WorkflowApplicationService:
    """Get workflow application service bound to the shared API client."""
    api_client = get_api_client()
    invoice_service = InvoiceService(api_client)
    return WorkflowApplicationService(
        invoice_service,
        WorkflowService(api_client, invoice_service)
    )


# ========== Route Handlers ==========

@router.get(
    "",
    response_model=InvoiceListResponse,
    summary="List invoices with SLA badges",
)
async def list_invoices(
    page: Optional[int] = Query(None, ge=1, description="Page number"),
    per_page: Optional[int] = Query(None, ge=1, le=100, description="Results per page"),
    invoice_status: Optional[str] = Query(None, alias="status", description="Filter by invoice status"),
    token: str = Depends(get_token),
    now: datetime = Depends(get_now),
    service: WorkflowApplicationService = Depends(get_workflow_service)
):
    params = {
        key: value
        for key, value in {"page": page, "per_page": per_page, "status": invoice_status}.items()
        if value is not None
    }
    listing = await service.list_invoices(token, now, params)

    return InvoiceListResponse(
        invoices=[
            InvoiceSummaryResponse(
                id=row.invoice.get("id"),
                invoice_number=row.invoice.get("invoice_number"),
                status=row.invoice.get("status"),
                sla=SLAStatusResponse.from_domain(row.sla),
            )
            for row in listing.rows
        ],
        meta=listing.meta,
    )


@router.get(
    "/{invoice_id}/workflow",
    response_model=WorkflowPageResponse,
    summary="Get invoice workflow and SLA status",
    description="""
    Invoice workflow page data: the invoice, its SLA status, status history
    and the transitions allowed from the current state.

    **SLA classification**:
    - `none`: no deadline applies (gray)
    - `normal`: more than 2 hours left (green)
    - `warning`: deadline within 2 hours (yellow)
    - `overdue`: deadline passed (red)

    `sla` is null when the invoice has no workflow attached.
    """,
    responses={
        200: {
            "description": "Workflow page data",
            "content": {"application/json": {"example": WORKFLOW_PAGE_EXAMPLE}}
        },
        401: {"description": "Missing or rejected token"},
        404: {"description": "Invoice not found"}
    }
)
async def show_workflow(
    invoice_id: str,
    token: str = Depends(get_token),
    now: datetime = Depends(get_now),
    service: WorkflowApplicationService = Depends(get_workflow_service)
):
    view = await service.show(invoice_id, token, now)

    return WorkflowPageResponse(
        invoice=view.invoice,
        sla=SLAStatusResponse.from_domain(view.sla) if view.sla else None,
        history=[
            HistoryEntryResponse(
                status=entry.status,
                from_status=entry.from_status,
                comment=entry.comment,
                user_name=entry.user_name,
                created_at=entry.created_at,
            )
            for entry in view.history
        ],
        available_transitions=[
            AvailableTransitionResponse(
                name=transition.name,
                target_state=transition.target_state,
                requires_comment=transition.requires_comment,
                target_state_name=transition.target_state_name,
            )
            for transition in view.available_transitions
        ],
    )


@router.post(
    "/{invoice_id}/workflow/transition",
    response_model=TransitionResponse,
    summary="Apply a workflow transition",
    responses={
        422: {"description": "Transition rejected by the workflow service"},
        504: {"description": "Workflow service timed out"}
    }
)
async def transition_workflow(
    invoice_id: str,
    request: TransitionRequest,
    token: str = Depends(get_token),
    now: datetime = Depends(get_now),
    service: WorkflowApplicationService = Depends(get_workflow_service)
):
    applied = await service.transition(
        invoice_id,
        request.status,
        token,
        now,
        comment=request.comment
    )

    return TransitionResponse(
        success=applied.result.success,
        status=applied.result.status,
        message=f"Invoice status updated to {applied.result.status}",
        sla=SLAStatusResponse.from_domain(applied.sla) if applied.sla else None,
    )


@router.post(
    "/bulk_transition",
    response_model=BulkTransitionResponse,
    summary="Apply a workflow transition to several invoices",
)
async def bulk_transition(
    request: BulkTransitionRequest,
    token: str = Depends(get_token),
    service: WorkflowApplicationService = Depends(get_workflow_service)
):
    result = await service.bulk_transition(
        request.invoice_ids,
        request.status,
        token,
        comment=request.comment
    )

    return BulkTransitionResponse(
        updated_count=result.updated_count,
        status=result.status,
        message=f"{result.updated_count} invoices updated to {result.status}",
    )


# Export router for inclusion in main app
workflow_router = router
