"""Tests for SLAEvaluator."""

from datetime import datetime, timedelta, timezone

import pytest

from invoice_desk.config import SLA_WARNING_WINDOW, DisplayHint, SLAClassification
from invoice_desk.workflow.application import SLAStatusResponse, decode_snapshot
from invoice_desk.workflow.domain import SLAEvaluator, WorkflowSnapshot

UTC = timezone.utc


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


class TestClassify:
    """Test SLA classification."""

    def test_no_deadline_is_none(self, workflow_without_sla: dict, now: datetime):
        snapshot = decode_snapshot(workflow_without_sla)
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.NONE
        assert SLAEvaluator.progress_percent(snapshot, now) == 0
        assert SLAEvaluator.status_text(snapshot, now) == "No SLA"

    def test_missing_snapshot_is_none(self, now: datetime):
        assert SLAEvaluator.classify(None, now) == SLAClassification.NONE
        assert SLAEvaluator.status_text(None, now) == "No SLA"
        assert SLAEvaluator.progress_percent(None, now) == 0

    def test_overdue(self, overdue_workflow: dict, now: datetime):
        snapshot = decode_snapshot(overdue_workflow)
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.OVERDUE
        assert SLAEvaluator.progress_percent(snapshot, now) == 100
        assert "Overdue by 1 hour" in SLAEvaluator.status_text(snapshot, now)

    def test_warning_thirty_minutes_left(self, warning_workflow: dict, now: datetime):
        snapshot = decode_snapshot(warning_workflow)
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.WARNING
        assert "Due in 30 minute" in SLAEvaluator.status_text(snapshot, now)

    def test_warning_ninety_minutes_left(self, now: datetime):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=at(11, 30))
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.WARNING
        assert SLAEvaluator.css_class(SLAClassification.WARNING) == "text-yellow-600 bg-yellow-100"

    def test_normal(self, workflow_with_sla: dict, now: datetime):
        snapshot = decode_snapshot(workflow_with_sla)
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.NORMAL
        assert SLAEvaluator.status_text(snapshot, now) == "Due in 2 hours"

    def test_deadline_equal_to_now_is_warning(self, now: datetime):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=now)
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.WARNING

    def test_exactly_at_warning_boundary_is_normal(self, now: datetime):
        snapshot = WorkflowSnapshot(
            entered_current_state_at=at(8),
            sla_deadline=now + SLA_WARNING_WINDOW
        )
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.NORMAL
        assert SLAEvaluator.classify(snapshot, now + timedelta(seconds=1)) == SLAClassification.WARNING

    def test_one_second_past_deadline_is_overdue(self, now: datetime):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=now)
        later = now + timedelta(seconds=1)
        assert SLAEvaluator.classify(snapshot, later) == SLAClassification.OVERDUE
        assert SLAEvaluator.status_text(snapshot, later) == "Overdue by Less than 1 minute"

    def test_upstream_overdue_flag_is_not_trusted(self, now: datetime):
        snapshot = decode_snapshot({
            "entered_current_state_at": "2024-01-15T08:00:00Z",
            "sla_deadline": "2024-01-15T14:00:00Z",
            "is_overdue": True,
        })
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.NORMAL


class TestProgress:
    """Test SLA progress percentage."""

    def test_halfway(self, workflow_with_sla: dict, now: datetime):
        snapshot = decode_snapshot(workflow_with_sla)
        assert SLAEvaluator.progress_percent(snapshot, now) == 50

    def test_rounds_half_up(self):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=at(16))
        # 1 hour of 8 -> 12.5%
        assert SLAEvaluator.progress_percent(snapshot, at(9)) == 13

    def test_before_entry_clamps_to_zero(self):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=at(12))
        assert SLAEvaluator.progress_percent(snapshot, at(7)) == 0

    @pytest.mark.parametrize("deadline", [at(8), at(6)])
    def test_non_positive_window_is_fully_elapsed(self, deadline: datetime):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=deadline)
        assert SLAEvaluator.progress_percent(snapshot, at(5)) == 100


class TestFormatDuration:
    """Test duration formatting."""

    @pytest.mark.parametrize(
        "duration, expected",
        [
            (timedelta(days=1, hours=2), "1 day, 2 hours"),
            (timedelta(hours=2, minutes=30), "2 hours, 30 minutes"),
            (timedelta(minutes=45), "45 minutes"),
            (timedelta(seconds=30), "Less than 1 minute"),
            (timedelta(minutes=-10), "0 minutes"),
            (0, "0 minutes"),
        ],
    )
    def test_known_durations(self, duration, expected: str):
        assert SLAEvaluator.format_duration(duration) == expected

    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (86400, "1 day"),
            (2 * 86400, "2 days"),
            (3600, "1 hour"),
            (7200, "2 hours"),
            (60, "1 minute"),
            (120, "2 minutes"),
        ],
    )
    def test_pluralization(self, seconds: int, expected: str):
        assert SLAEvaluator.format_duration(seconds) == expected

    def test_keeps_only_first_two_parts(self):
        duration = timedelta(days=1, hours=2, minutes=5)
        assert SLAEvaluator.format_duration(duration) == "1 day, 2 hours"

    def test_skips_zero_parts(self):
        assert SLAEvaluator.format_duration(timedelta(days=3, minutes=7)) == "3 days, 7 minutes"

    def test_floors_fractional_units(self):
        assert SLAEvaluator.format_duration(119.9) == "1 minute"


class TestDisplay:
    """Test deadline formatting and badge lookups."""

    def test_deadline_formatted_noon(self):
        snapshot = decode_snapshot({
            "entered_current_state_at": "2024-01-15T08:00:00Z",
            "sla_deadline": "2024-01-15T12:00:00Z",
        })
        assert SLAEvaluator.deadline_formatted(snapshot) == "Jan 15, 2024 at 12:00 PM"

    def test_deadline_formatted_afternoon(self):
        snapshot = WorkflowSnapshot(entered_current_state_at=at(8), sla_deadline=at(14))
        assert SLAEvaluator.deadline_formatted(snapshot) == "Jan 15, 2024 at 02:00 PM"

    def test_deadline_formatted_keeps_upstream_offset(self, now: datetime):
        snapshot = decode_snapshot({
            "entered_current_state_at": "2024-01-15T08:00:00+01:00",
            "sla_deadline": "2024-01-15T14:00:00+01:00",
        })

        assert SLAEvaluator.deadline_formatted(snapshot) == "Jan 15, 2024 at 02:00 PM"
        # 14:00+01:00 is 13:00 UTC, three hours after now
        assert SLAEvaluator.classify(snapshot, now) == SLAClassification.NORMAL
        assert SLAEvaluator.status_text(snapshot, now) == "Due in 3 hours"
        assert SLAEvaluator.time_in_current_state(snapshot, now) == "3 hours"

    def test_deadline_formatted_without_sla(self, workflow_without_sla: dict):
        assert SLAEvaluator.deadline_formatted(decode_snapshot(workflow_without_sla)) is None

    @pytest.mark.parametrize(
        "classification, hint, css, icon",
        [
            (SLAClassification.NONE, DisplayHint.GRAY, "text-gray-500 bg-gray-100", "clock"),
            (SLAClassification.NORMAL, DisplayHint.GREEN, "text-green-600 bg-green-100", "clock"),
            (SLAClassification.WARNING, DisplayHint.YELLOW, "text-yellow-600 bg-yellow-100", "exclamation-circle"),
            (SLAClassification.OVERDUE, DisplayHint.RED, "text-red-600 bg-red-100", "exclamation-triangle"),
        ],
    )
    def test_badges(self, classification, hint, css, icon):
        assert SLAEvaluator.display_hint(classification) == hint
        assert SLAEvaluator.css_class(classification) == css
        assert SLAEvaluator.icon(classification) == icon

    def test_time_in_current_state(self, workflow_with_sla: dict, now: datetime):
        assert SLAEvaluator.time_in_current_state(decode_snapshot(workflow_with_sla), now) == "2 hours"
        assert SLAEvaluator.time_in_current_state(None, now) == "Unknown"

    def test_time_until_and_since_deadline(
        self, overdue_workflow: dict, workflow_with_sla: dict, now: datetime
    ):
        overdue = decode_snapshot(overdue_workflow)
        normal = decode_snapshot(workflow_with_sla)

        assert SLAEvaluator.time_until_deadline(overdue, now) == "Overdue"
        assert SLAEvaluator.time_since_deadline(overdue, now) == "1 hour"
        assert SLAEvaluator.time_until_deadline(normal, now) == "2 hours"
        assert SLAEvaluator.time_since_deadline(normal, now) == "Not overdue"
        assert SLAEvaluator.time_until_deadline(None, now) == "No deadline"


class TestEvaluate:
    """Test the bundled SLA status."""

    def test_normal_status(self, now: datetime):
        snapshot = decode_snapshot({
            "entered_current_state_at": "2024-01-15T08:00:00Z",
            "sla_deadline": "2024-01-15T14:00:00Z",
        })
        status = SLAEvaluator.evaluate(snapshot, now)

        assert status.classification == SLAClassification.NORMAL
        assert status.message == "Due in 4 hours"
        assert status.display_hint == DisplayHint.GREEN
        assert status.progress_percent == 33
        assert status.time_in_current_state == "2 hours"
        assert status.deadline_formatted == "Jan 15, 2024 at 02:00 PM"

    def test_none_status(self, now: datetime):
        status = SLAEvaluator.evaluate(None, now)

        assert status.classification == SLAClassification.NONE
        assert status.message == "No SLA"
        assert status.display_hint == DisplayHint.GRAY
        assert status.deadline is None
        assert status.deadline_formatted is None

    def test_response_model(self, overdue_workflow: dict, now: datetime):
        status = SLAEvaluator.evaluate(decode_snapshot(overdue_workflow), now)
        data = SLAStatusResponse.from_domain(status).model_dump()

        assert data["classification"] == "overdue"
        assert data["display_hint"] == "red"
        assert data["progress_percent"] == 100
        assert data["deadline"] == datetime(2024, 1, 15, 9, 0, tzinfo=UTC)

    def test_repeated_evaluation_follows_now(self, warning_workflow: dict, now: datetime):
        snapshot = decode_snapshot(warning_workflow)

        assert SLAEvaluator.evaluate(snapshot, now).classification == SLAClassification.WARNING
        later = now + timedelta(hours=1)
        assert SLAEvaluator.evaluate(snapshot, later).classification == SLAClassification.OVERDUE
        assert SLAEvaluator.evaluate(snapshot, now).classification == SLAClassification.WARNING
