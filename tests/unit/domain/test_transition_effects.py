"""Unit tests for lifecycle side effects."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.services.transition_effects import (
    apply_transition,
    transition_changes,
)
from tests.helpers.governance_factory import make_meeting

S = MeetingStatus
NOW = datetime(2026, 3, 14, 18, 30, tzinfo=timezone.utc)
EARLIER = NOW - timedelta(hours=2)


class TestTransitionChanges:
    """Test the field changes applied by each transition."""

    def test_freeze_records_actor(self) -> None:
        meeting = make_meeting(status=S.SCHEDULED)
        updated = apply_transition(meeting, S.FROZEN, "operator", NOW)
        assert updated.status is S.FROZEN
        assert updated.frozen_at == NOW
        assert updated.frozen_by == "operator"

    def test_unfreeze_clears_freeze_fields(self) -> None:
        meeting = make_meeting(status=S.FROZEN, frozen_at=EARLIER, frozen_by="operator")
        updated = apply_transition(meeting, S.SCHEDULED, "president", NOW)
        assert updated.frozen_at is None
        assert updated.frozen_by is None

    def test_open_sets_start_once(self) -> None:
        meeting = make_meeting(status=S.PAUSED, started_at=EARLIER, paused_at=EARLIER, paused_by="x")
        updated = apply_transition(meeting, S.LIVE, "president", NOW)
        assert updated.started_at == EARLIER
        assert updated.paused_at is None
        assert updated.opened_by == "president"

    def test_open_pulls_future_schedule_to_now(self) -> None:
        meeting = make_meeting(status=S.FROZEN, scheduled_at=NOW + timedelta(days=1))
        changes = transition_changes(meeting, S.LIVE, "president", NOW)
        assert changes["scheduled_at"] == NOW
        assert changes["started_at"] == NOW

    def test_open_keeps_past_schedule(self) -> None:
        meeting = make_meeting(status=S.FROZEN, scheduled_at=EARLIER)
        assert "scheduled_at" not in transition_changes(meeting, S.LIVE, "president", NOW)

    def test_close_clears_current_motion(self) -> None:
        meeting = make_meeting(status=S.LIVE, current_motion_id=uuid4())
        updated = apply_transition(meeting, S.CLOSED, "president", NOW)
        assert updated.current_motion_id is None
        assert updated.ended_at == NOW
        assert updated.closed_by == "president"

    def test_validation_timestamp_is_never_overwritten(self) -> None:
        meeting = make_meeting(status=S.CLOSED, validated_at=EARLIER, validated_by="first")
        changes = transition_changes(meeting, S.VALIDATED, "second", NOW)
        assert changes == {"status": S.VALIDATED}

    def test_archive(self) -> None:
        meeting = make_meeting(status=S.VALIDATED)
        updated = apply_transition(meeting, S.ARCHIVED, "admin", NOW)
        assert updated.archived_at == NOW
        assert updated.is_archived

    def test_archived_meeting_cannot_change(self) -> None:
        archived = replace(make_meeting(), status=S.ARCHIVED, archived_at=NOW)
        with pytest.raises(ValueError, match="archived"):
            apply_transition(archived, S.VALIDATED, "admin", NOW)
