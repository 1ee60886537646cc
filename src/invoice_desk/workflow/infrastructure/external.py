"""
Invoicing API Gateways
======================

Service objects wrapping the upstream invoicing API:
- InvoiceService: invoice reads
- WorkflowService: workflow history, available transitions and transitions

These are pass-throughs. Business rules about which transitions are valid
live upstream; failures surface as the typed exceptions raised by ApiClient
and are never retried here.
"""

from typing import Any, List, Optional

from invoice_desk.infrastructure.api_client import ApiClient
from invoice_desk.shared.infrastructure.logging import get_logger
from invoice_desk.workflow.application.dto import (
    decode_available_transitions,
    decode_history,
    decode_snapshot,
    unwrap_resource,
)
from invoice_desk.workflow.application.services import IInvoiceGateway, IWorkflowGateway
from invoice_desk.workflow.domain import (
    AvailableTransition,
    BulkTransitionResult,
    TransitionResult,
    WorkflowHistoryEntry,
)

logger = get_logger(__name__)


def _compact(values: dict) -> dict:
    return {key: value for key, value in values.items() if value is not None}


class InvoiceService(IInvoiceGateway):
    """Invoice reads needed by the workflow pages."""

    def __init__(self, api_client: ApiClient):
        self._api = api_client

    async def find(self, invoice_id: str, token: str) -> dict:
        payload = await self._api.get(f"/invoices/{invoice_id}", token=token)
        return unwrap_resource(payload)

    async def all(self, token: str, params: Optional[dict] = None) -> dict:
        """
        List invoices.

        Accepts `{"invoices": [...], "meta": {...}}`, JSON:API
        `{"data": [...], "meta": {...}}` or a bare list.
        """
        payload = await self._api.get("/invoices", token=token, params=params or {})

        if isinstance(payload, list):
            return {"invoices": [unwrap_resource(item) for item in payload], "meta": {}}
        if not isinstance(payload, dict):
            return {"invoices": [], "meta": {}}

        items = payload.get("invoices")
        if items is None:
            items = [unwrap_resource({"data": item}) for item in payload.get("data") or []]
        return {"invoices": items, "meta": payload.get("meta") or {}}


class WorkflowService(IWorkflowGateway):
    """Pass-through to the external workflow service."""

    def __init__(self, api_client: ApiClient, invoice_service: Optional[InvoiceService] = None):
        self._api = api_client
        self._invoices = invoice_service or InvoiceService(api_client)

    async def history(self, invoice_id: str, token: str) -> List[WorkflowHistoryEntry]:
        payload = await self._api.get(
            "/workflow_history",
            token=token,
            params={"invoice_id": invoice_id}
        )
        return decode_history(payload)

    async def available_transitions(self, invoice_id: str, token: str) -> List[AvailableTransition]:
        payload = await self._api.get(
            f"/invoices/{invoice_id}/workflow/available_transitions",
            token=token
        )
        return decode_available_transitions(payload)

    @staticmethod
    def transition_body(status: str, comment: Optional[str] = None) -> dict:
        """
        JSON:API body for a status change.

        A None comment is dropped; an empty string is sent as-is.
        """
        return {"data": {"attributes": _compact({"status": status, "comment": comment})}}

    async def transition(
        self,
        invoice_id: str,
        status: str,
        token: str,
        comment: Optional[str] = None
    ) -> TransitionResult:
        """
        Move an invoice to `status`.

        The updated workflow snapshot is taken from the response when the
        API includes it, otherwise the invoice is fetched again.

        Raises:
            ValidationError: Invalid transition for the current state
            AuthenticationError: Token rejected
            ApiTimeoutError: Upstream timeout
            ApiError: Any other upstream failure
        """
        payload = await self._api.patch(
            f"/invoices/{invoice_id}/status",
            token=token,
            body=self.transition_body(status, comment)
        )
        resource = unwrap_resource(payload)

        if "workflow" in resource:
            workflow: Any = resource["workflow"]
        else:
            logger.debug(
                "Transition response has no workflow, reloading invoice",
                extra={"invoice_id": invoice_id}
            )
            workflow = (await self._invoices.find(invoice_id, token)).get("workflow")

        return TransitionResult(
            success=True,
            status=resource.get("status") or status,
            new_snapshot=decode_snapshot(workflow),
        )

    async def bulk_transition(
        self,
        invoice_ids: List[str],
        status: str,
        token: str,
        comment: Optional[str] = None
    ) -> BulkTransitionResult:
        body = _compact({"invoice_ids": invoice_ids, "status": status, "comment": comment})
        payload = await self._api.post("/invoices/bulk_transition", token=token, body=body)

        updated = payload.get("updated_count", 0) if isinstance(payload, dict) else 0
        return BulkTransitionResult(
            status=status,
            updated_count=int(updated or 0),
            invoice_ids=list(invoice_ids),
        )
