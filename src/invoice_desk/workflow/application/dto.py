"""
Workflow Application DTOs
=========================

Data Transfer Objects for the workflow API layer, plus the decoders that
turn upstream JSON into domain objects.

The decoders are the boundary: malformed timestamps fail here with
SnapshotParseError and never reach the SLA evaluator.
"""

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from invoice_desk.core import ApiError, SnapshotParseError
from invoice_desk.workflow.domain import (
    AvailableTransition,
    SLAStatus,
    WorkflowHistoryEntry,
    WorkflowSnapshot,
)

# ========== Type Aliases for Literals ==========
SLAClassificationStr = Literal["none", "normal", "warning", "overdue"]
DisplayHintStr = Literal["green", "yellow", "red", "gray"]


# ========== Snapshot decoding ==========

def _normalize_timestamp(value: Any) -> Any:
    """Rewrite "2024-01-15 08:00:00 UTC" style strings into ISO-8601."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.upper().endswith(" UTC"):
        text = text[:-4].rstrip() + "+00:00"
    if len(text) > 10 and text[10] == " ":
        text = f"{text[:10]}T{text[11:]}"
    return text


def _ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Read naive values as UTC; keep any offset the upstream sent."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class WorkflowSnapshotPayload(BaseModel):
    """Wire shape of the `workflow` object embedded in invoices."""
    entered_current_state_at: datetime = Field(..., description="When the current state was entered")
    sla_deadline: Optional[datetime] = Field(None, description="Absolute SLA deadline")

    @field_validator("entered_current_state_at", "sla_deadline", mode="before")
    @classmethod
    def normalize_timestamp(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return _normalize_timestamp(v)

    @field_validator("entered_current_state_at", "sla_deadline")
    @classmethod
    def ensure_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _ensure_aware(v)

    def to_domain(self) -> WorkflowSnapshot:
        """Convert to domain entity."""
        return WorkflowSnapshot(
            entered_current_state_at=self.entered_current_state_at,
            sla_deadline=self.sla_deadline,
        )


def decode_snapshot(data: Any) -> Optional[WorkflowSnapshot]:
    """
    Decode an upstream workflow object.

    Args:
        data: The invoice's `workflow` value (dict or None)

    Returns:
        WorkflowSnapshot, or None when the invoice carries no workflow

    Raises:
        SnapshotParseError: If the payload is not an object or a timestamp
            is missing or unparsable
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise SnapshotParseError("workflow", data, "expected an object")

    try:
        return WorkflowSnapshotPayload.model_validate(data).to_domain()
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "workflow"
        raise SnapshotParseError(field, data.get(field), error.get("msg", "invalid value")) from e


# ========== Resource unwrapping ==========

def unwrap_resource(payload: Any) -> dict:
    """
    Flatten a JSON:API style `{"data": {"id", "attributes"}}` document.

    Plain objects are returned unchanged.
    """
    if not isinstance(payload, dict):
        return {}
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("attributes"), dict):
        return {"id": data.get("id"), **data["attributes"]}
    return payload


# ========== Transition / history decoding ==========

def _decode_transition(item: Any) -> AvailableTransition:
    if not isinstance(item, dict):
        raise ApiError(f"Malformed transition entry: {item!r}")

    to_state = item.get("to_state")
    if isinstance(to_state, dict) and to_state.get("code"):
        transition = item.get("transition") or {}
        return AvailableTransition(
            name=transition.get("description") or to_state.get("name") or to_state["code"],
            target_state=to_state["code"],
            requires_comment=bool(transition.get("requires_comment", False)),
            target_state_name=to_state.get("name"),
        )

    if item.get("status"):
        return AvailableTransition(
            name=item.get("label") or item["status"],
            target_state=item["status"],
            requires_comment=bool(item.get("requires_comment", False)),
        )

    raise ApiError(f"Malformed transition entry: {item!r}")


def decode_available_transitions(payload: Any) -> List[AvailableTransition]:
    """Decode either a bare list or `{"available_transitions": [...]}`."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("available_transitions", [])
    if not isinstance(payload, list):
        raise ApiError("Malformed available transitions payload")
    return [_decode_transition(item) for item in payload]


def decode_history(payload: Any) -> List[WorkflowHistoryEntry]:
    """Decode a history list, bare or wrapped in `history` / `data`."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("history") or payload.get("data") or []
    if not isinstance(payload, list):
        return []

    entries = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        entries.append(WorkflowHistoryEntry(
            status=item.get("to_status") or item.get("status"),
            from_status=item.get("from_status"),
            comment=item.get("comment"),
            user_name=item.get("user_name"),
            created_at=item.get("created_at"),
        ))
    return entries


# ========== Request DTOs ==========

class TransitionRequest(BaseModel):
    """Request to move an invoice to another workflow state."""
    status: str = Field(..., min_length=1, description="Target state code")
    comment: Optional[str] = Field(None, description="Optional comment; omitted upstream when null")


class BulkTransitionRequest(BaseModel):
    """Request to move several invoices at once."""
    invoice_ids: List[str] = Field(default_factory=list, description="Invoice ids to transition")
    status: str = Field(..., min_length=1, description="Target state code")
    comment: Optional[str] = None


# ========== Response DTOs ==========

class SLAStatusResponse(BaseModel):
    """SLA badge data for one invoice."""
    classification: SLAClassificationStr
    message: str
    progress_percent: int = Field(..., ge=0, le=100)
    display_hint: DisplayHintStr
    css_class: str
    icon: str
    time_in_current_state: str
    deadline_formatted: Optional[str] = None
    deadline: Optional[datetime] = None

    @classmethod
    def from_domain(cls, status: SLAStatus) -> "SLAStatusResponse":
        return cls(
            classification=status.classification.value,
            message=status.message,
            progress_percent=status.progress_percent,
            display_hint=status.display_hint.value,
            css_class=status.css_class,
            icon=status.icon,
            time_in_current_state=status.time_in_current_state,
            deadline_formatted=status.deadline_formatted,
            deadline=status.deadline,
        )


class AvailableTransitionResponse(BaseModel):
    name: str
    target_state: str
    requires_comment: bool = False
    target_state_name: Optional[str] = None


class HistoryEntryResponse(BaseModel):
    status: Optional[str] = None
    from_status: Optional[str] = None
    comment: Optional[str] = None
    user_name: Optional[str] = None
    created_at: Optional[str] = None


class WorkflowPageResponse(BaseModel):
    """Everything the invoice workflow page renders."""
    invoice: dict = Field(..., description="Invoice as returned by the invoicing API")
    sla: Optional[SLAStatusResponse] = Field(
        None, description="SLA status; absent when the invoice has no workflow"
    )
    history: List[HistoryEntryResponse] = Field(default_factory=list)
    available_transitions: List[AvailableTransitionResponse] = Field(default_factory=list)


class TransitionResponse(BaseModel):
    success: bool
    status: str
    message: str
    sla: Optional[SLAStatusResponse] = None


class BulkTransitionResponse(BaseModel):
    updated_count: int
    status: str
    message: str


class InvoiceSummaryResponse(BaseModel):
    """Invoice row with its SLA badge."""
    id: Any
    invoice_number: Optional[str] = None
    status: Optional[str] = None
    sla: SLAStatusResponse


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceSummaryResponse] = Field(default_factory=list)
    meta: dict = Field(default_factory=dict)
