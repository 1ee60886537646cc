"""
Workflow Domain Layer
=====================

Contains:
- Entities: WorkflowSnapshot, SLAStatus, AvailableTransition,
  WorkflowHistoryEntry, TransitionResult, BulkTransitionResult
- Domain Services: SLAEvaluator (stateless SLA calculations)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from invoice_desk.workflow.domain.entities import (
    WorkflowSnapshot,
    SLAStatus,
    AvailableTransition,
    WorkflowHistoryEntry,
    TransitionResult,
    BulkTransitionResult,
)
from invoice_desk.workflow.domain.value_objects import SLAEvaluator

__all__ = [
    # Entities
    "WorkflowSnapshot",
    "SLAStatus",
    "AvailableTransition",
    "WorkflowHistoryEntry",
    "TransitionResult",
    "BulkTransitionResult",
    # Domain Services
    "SLAEvaluator",
]
