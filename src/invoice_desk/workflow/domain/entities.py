"""
Workflow Domain Entities
========================

Pure Python domain objects for invoice workflow tracking.

Snapshots arrive from the invoicing API on every request and are never
mutated; SLA status is derived from them and discarded after rendering.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from invoice_desk.config import DisplayHint, SLAClassification


@dataclass(frozen=True)
class WorkflowSnapshot:
    """
    Point-in-time view of an invoice's workflow state.

    Timestamps are timezone-aware; building one from upstream JSON goes
    through the snapshot decoder, which is the only place raw payloads are
    interpreted.
    """

    entered_current_state_at: datetime
    sla_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class SLAStatus:
    """SLA evaluation of a snapshot at a given instant."""

    classification: SLAClassification
    message: str
    progress_percent: int
    display_hint: DisplayHint
    css_class: str
    icon: str
    time_in_current_state: str
    deadline_formatted: Optional[str] = None
    deadline: Optional[datetime] = None


@dataclass(frozen=True)
class AvailableTransition:
    """A transition the workflow service allows from the current state."""

    name: str
    target_state: str
    requires_comment: bool = False
    target_state_name: Optional[str] = None


@dataclass(frozen=True)
class WorkflowHistoryEntry:
    """One recorded status change of an invoice."""

    status: Optional[str]
    from_status: Optional[str] = None
    comment: Optional[str] = None
    user_name: Optional[str] = None
    created_at: Optional[str] = None


@dataclass
class TransitionResult:
    """
    Outcome of applying a transition.

    new_snapshot is None only when the invoice has no workflow attached
    after the transition.
    """

    success: bool
    status: str
    new_snapshot: Optional[WorkflowSnapshot] = None


@dataclass
class BulkTransitionResult:
    """Outcome of a bulk transition request."""

    status: str
    updated_count: int
    invoice_ids: List[str] = field(default_factory=list)
