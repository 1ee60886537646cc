"""
SLA Evaluation
==============

Pure functions mapping a workflow snapshot and an explicit "now" to SLA
classification, messages and progress.

Nothing here reads the clock: callers pass `now`, so every result is a
deterministic function of (now, entered_current_state_at, sla_deadline)
and safe to compute concurrently.
"""

import math
from datetime import datetime, timedelta
from typing import Optional, Union

from invoice_desk.config import SLA_WARNING_WINDOW, DisplayHint, SLAClassification
from invoice_desk.workflow.domain.entities import SLAStatus, WorkflowSnapshot

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

DEADLINE_FORMAT = "%b %d, %Y at %I:%M %p"

DISPLAY_HINTS = {
    SLAClassification.NONE: DisplayHint.GRAY,
    SLAClassification.NORMAL: DisplayHint.GREEN,
    SLAClassification.WARNING: DisplayHint.YELLOW,
    SLAClassification.OVERDUE: DisplayHint.RED,
}

CSS_CLASSES = {
    DisplayHint.GRAY: "text-gray-500 bg-gray-100",
    DisplayHint.GREEN: "text-green-600 bg-green-100",
    DisplayHint.YELLOW: "text-yellow-600 bg-yellow-100",
    DisplayHint.RED: "text-red-600 bg-red-100",
}

ICONS = {
    SLAClassification.NONE: "clock",
    SLAClassification.NORMAL: "clock",
    SLAClassification.WARNING: "exclamation-circle",
    SLAClassification.OVERDUE: "exclamation-triangle",
}


def _pluralize(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


class SLAEvaluator:
    """
    Pure functions for SLA calculations.

    Stateless utility class: all SLA display logic in one place.
    """

    @staticmethod
    def classify(
        snapshot: Optional[WorkflowSnapshot],
        now: datetime,
        warning_window: timedelta = SLA_WARNING_WINDOW
    ) -> SLAClassification:
        """
        Classify SLA health.

        Args:
            snapshot: Workflow snapshot, or None when the invoice has no workflow
            now: Evaluation instant
            warning_window: Lead time before the deadline flagged as at risk

        Returns:
            SLAClassification
        """
        if snapshot is None or snapshot.sla_deadline is None:
            return SLAClassification.NONE

        deadline = snapshot.sla_deadline
        if now > deadline:
            return SLAClassification.OVERDUE
        if now > deadline - warning_window:
            return SLAClassification.WARNING
        return SLAClassification.NORMAL

    @staticmethod
    def status_text(snapshot: Optional[WorkflowSnapshot], now: datetime) -> str:
        """Human readable remaining / overdue time."""
        classification = SLAEvaluator.classify(snapshot, now)
        if classification == SLAClassification.NONE:
            return "No SLA"

        deadline = snapshot.sla_deadline
        if classification == SLAClassification.OVERDUE:
            return f"Overdue by {SLAEvaluator.format_duration((now - deadline).total_seconds())}"
        return f"Due in {SLAEvaluator.format_duration((deadline - now).total_seconds())}"

    @staticmethod
    def progress_percent(snapshot: Optional[WorkflowSnapshot], now: datetime) -> int:
        """
        Share of the SLA window already consumed, 0-100.

        A deadline at or before the entry time leaves no window to consume
        and is reported as fully elapsed (100).
        """
        if SLAEvaluator.classify(snapshot, now) == SLAClassification.NONE:
            return 0

        entered_at = snapshot.entered_current_state_at
        total = (snapshot.sla_deadline - entered_at).total_seconds()
        elapsed = (now - entered_at).total_seconds()

        if total <= 0 or elapsed >= total:
            return 100

        # Round half away from zero
        percentage = math.floor(elapsed / total * 100 + 0.5)
        return max(0, min(percentage, 100))

    @staticmethod
    def format_duration(duration: Union[float, int, timedelta]) -> str:
        """
        Format a duration as at most two non-zero units.

        Examples:
            93600 -> "1 day, 2 hours"
            30 -> "Less than 1 minute"
            -600 -> "0 minutes"
        """
        seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        if seconds <= 0:
            return "0 minutes"

        days = int(seconds // SECONDS_PER_DAY)
        hours = int(seconds % SECONDS_PER_DAY // SECONDS_PER_HOUR)
        minutes = int(seconds % SECONDS_PER_HOUR // SECONDS_PER_MINUTE)

        parts = []
        if days >= 1:
            parts.append(_pluralize(days, "day"))
        if hours >= 1:
            parts.append(_pluralize(hours, "hour"))
        if minutes >= 1:
            parts.append(_pluralize(minutes, "minute"))

        if not parts:
            return "Less than 1 minute"

        return ", ".join(parts[:2])

    @staticmethod
    def deadline_formatted(snapshot: Optional[WorkflowSnapshot]) -> Optional[str]:
        """Deadline as e.g. "Jan 15, 2024 at 02:00 PM", or None without SLA."""
        if snapshot is None or snapshot.sla_deadline is None:
            return None
        return snapshot.sla_deadline.strftime(DEADLINE_FORMAT)

    @staticmethod
    def time_in_current_state(snapshot: Optional[WorkflowSnapshot], now: datetime) -> str:
        if snapshot is None:
            return "Unknown"
        return SLAEvaluator.format_duration((now - snapshot.entered_current_state_at).total_seconds())

    @staticmethod
    def time_until_deadline(snapshot: Optional[WorkflowSnapshot], now: datetime) -> str:
        if snapshot is None or snapshot.sla_deadline is None:
            return "No deadline"
        seconds = (snapshot.sla_deadline - now).total_seconds()
        if seconds < 0:
            return "Overdue"
        return SLAEvaluator.format_duration(seconds)

    @staticmethod
    def time_since_deadline(snapshot: Optional[WorkflowSnapshot], now: datetime) -> str:
        if snapshot is None or snapshot.sla_deadline is None:
            return "No deadline"
        seconds = (now - snapshot.sla_deadline).total_seconds()
        if seconds < 0:
            return "Not overdue"
        return SLAEvaluator.format_duration(seconds)

    @staticmethod
    def display_hint(classification: SLAClassification) -> DisplayHint:
        return DISPLAY_HINTS[classification]

    @staticmethod
    def css_class(classification: SLAClassification) -> str:
        return CSS_CLASSES[DISPLAY_HINTS[classification]]

    @staticmethod
    def icon(classification: SLAClassification) -> str:
        return ICONS[classification]

    @staticmethod
    def evaluate(snapshot: Optional[WorkflowSnapshot], now: datetime) -> SLAStatus:
        """
        Compute the full SLA status for rendering.

        Args:
            snapshot: Workflow snapshot, or None when the invoice has no workflow
            now: Evaluation instant

        Returns:
            SLAStatus
        """
        classification = SLAEvaluator.classify(snapshot, now)
        return SLAStatus(
            classification=classification,
            message=SLAEvaluator.status_text(snapshot, now),
            progress_percent=SLAEvaluator.progress_percent(snapshot, now),
            display_hint=SLAEvaluator.display_hint(classification),
            css_class=SLAEvaluator.css_class(classification),
            icon=SLAEvaluator.icon(classification),
            time_in_current_state=SLAEvaluator.time_in_current_state(snapshot, now),
            deadline_formatted=SLAEvaluator.deadline_formatted(snapshot),
            deadline=snapshot.sla_deadline if snapshot else None,
        )
