"""
Workflow Application Services
=============================

Application services orchestrate the invoicing API gateways and the SLA
evaluator for the invoice workflow pages.

Following SOLID principles:
- Single Responsibility: gateways talk HTTP, the evaluator computes, this
  layer combines them
- Dependency Inversion: depend on gateway interfaces, not the HTTP client
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from invoice_desk.core import ApiError, ValidationException
from invoice_desk.shared.infrastructure.logging import get_logger, log_latency
from invoice_desk.workflow.application.dto import decode_snapshot
from invoice_desk.workflow.domain import (
    AvailableTransition,
    BulkTransitionResult,
    SLAEvaluator,
    SLAStatus,
    TransitionResult,
    WorkflowHistoryEntry,
)

logger = get_logger(__name__)


# ========== Gateway Interfaces (Dependency Inversion) ==========

class IInvoiceGateway(ABC):
    """Interface for invoice reads against the invoicing API."""

    @abstractmethod
    async def find(self, invoice_id: str, token: str) -> dict:
        """Get one invoice."""

    @abstractmethod
    async def all(self, token: str, params: Optional[dict] = None) -> dict:
        """List invoices as {"invoices": [...], "meta": {...}}."""


class IWorkflowGateway(ABC):
    """Interface for the external workflow service."""

    @abstractmethod
    async def history(self, invoice_id: str, token: str) -> List[WorkflowHistoryEntry]:
        """Get the status history of an invoice."""

    @abstractmethod
    async def available_transitions(self, invoice_id: str, token: str) -> List[AvailableTransition]:
        """Get transitions allowed from the invoice's current state."""

    @abstractmethod
    async def transition(
        self,
        invoice_id: str,
        status: str,
        token: str,
        comment: Optional[str] = None
    ) -> TransitionResult:
        """Apply a transition."""

    @abstractmethod
    async def bulk_transition(
        self,
        invoice_ids: List[str],
        status: str,
        token: str,
        comment: Optional[str] = None
    ) -> BulkTransitionResult:
        """Apply a transition to several invoices."""


# ========== Results ==========

@dataclass
class WorkflowView:
    """Data for the invoice workflow page."""
    invoice: dict
    sla: Optional[SLAStatus]
    history: List[WorkflowHistoryEntry] = field(default_factory=list)
    available_transitions: List[AvailableTransition] = field(default_factory=list)


@dataclass
class InvoiceRow:
    """Invoice list entry with its SLA badge."""
    invoice: dict
    sla: SLAStatus


@dataclass
class InvoiceList:
    rows: List[InvoiceRow]
    meta: dict


@dataclass
class AppliedTransition:
    """A transition together with the SLA re-evaluated on the new state."""
    result: TransitionResult
    sla: Optional[SLAStatus]


# ========== Application Services ==========

class WorkflowApplicationService:
    """
    Service behind the invoice workflow routes.

    Every method takes `now` explicitly so SLA output is reproducible.
    """

    def __init__(
        self,
        invoice_gateway: IInvoiceGateway,
        workflow_gateway: IWorkflowGateway
    ):
        self._invoices = invoice_gateway
        self._workflows = workflow_gateway

    @staticmethod
    def evaluate_invoice(invoice: dict, now: datetime) -> Optional[SLAStatus]:
        """
        Evaluate SLA for an invoice payload.

        Returns:
            SLAStatus, or None when the invoice has no workflow attached

        Raises:
            SnapshotParseError: If the embedded workflow is malformed
        """
        snapshot = decode_snapshot(invoice.get("workflow"))
        if snapshot is None:
            return None
        return SLAEvaluator.evaluate(snapshot, now)

    async def show(self, invoice_id: str, token: str, now: datetime) -> WorkflowView:
        """
        Load invoice, history, available transitions and SLA status.

        History is informational: if it cannot be loaded the page still
        renders with an empty history.
        """
        with log_latency(logger, "workflow_page_load", invoice_id=invoice_id):
            invoice = await self._invoices.find(invoice_id, token)

            try:
                history = await self._workflows.history(invoice_id, token)
            except ApiError as e:
                logger.error(
                    "Failed to load workflow history",
                    extra={"invoice_id": invoice_id, "error": str(e)}
                )
                history = []

            transitions = await self._workflows.available_transitions(invoice_id, token)

        return WorkflowView(
            invoice=invoice,
            sla=self.evaluate_invoice(invoice, now),
            history=history,
            available_transitions=transitions,
        )

    async def transition(
        self,
        invoice_id: str,
        status: str,
        token: str,
        now: datetime,
        comment: Optional[str] = None
    ) -> AppliedTransition:
        """Apply a transition and evaluate SLA on the returned snapshot."""
        result = await self._workflows.transition(invoice_id, status, token, comment=comment)

        logger.info(
            "Workflow transition applied",
            extra={"invoice_id": invoice_id, "status": result.status}
        )

        sla = SLAEvaluator.evaluate(result.new_snapshot, now) if result.new_snapshot else None
        return AppliedTransition(result=result, sla=sla)

    async def bulk_transition(
        self,
        invoice_ids: List[str],
        status: str,
        token: str,
        comment: Optional[str] = None
    ) -> BulkTransitionResult:
        """
        Transition several invoices.

        Raises:
            ValidationException: If no invoice was selected
        """
        if not invoice_ids:
            raise ValidationException("No invoices selected", {"invoice_ids": invoice_ids})

        result = await self._workflows.bulk_transition(invoice_ids, status, token, comment=comment)

        logger.info(
            "Bulk workflow transition applied",
            extra={"requested": len(invoice_ids), "updated_count": result.updated_count, "status": status}
        )
        return result

    async def list_invoices(
        self,
        token: str,
        now: datetime,
        params: Optional[dict] = None
    ) -> InvoiceList:
        """List invoices, each with its SLA badge."""
        payload = await self._invoices.all(token, params)

        rows = []
        for invoice in payload.get("invoices", []):
            sla = self.evaluate_invoice(invoice, now) or SLAEvaluator.evaluate(None, now)
            rows.append(InvoiceRow(invoice=invoice, sla=sla))

        return InvoiceList(rows=rows, meta=payload.get("meta", {}))

