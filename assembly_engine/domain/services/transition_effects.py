"""Field changes applied to a meeting when it enters a new status."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from assembly_engine.domain.models.meeting import Meeting, MeetingStatus

S = MeetingStatus


def transition_changes(
    meeting: Meeting,
    to_status: MeetingStatus,
    actor: str,
    now: datetime,
) -> dict[str, Any]:
    """Return the fields to write when ``meeting`` moves to ``to_status``.

    Timestamps that record a first occurrence (started_at, ended_at,
    validated_at) are never overwritten.
    """
    changes: dict[str, Any] = {"status": to_status}
    from_status = meeting.status

    if to_status is S.FROZEN:
        changes.update(frozen_at=now, frozen_by=actor)

    elif to_status is S.SCHEDULED and from_status is S.FROZEN:
        changes.update(frozen_at=None, frozen_by=None)

    elif to_status is S.LIVE:
        if meeting.started_at is None:
            changes["started_at"] = now
        if meeting.scheduled_at is None or meeting.scheduled_at > now:
            changes["scheduled_at"] = now
        changes["opened_by"] = actor
        if from_status is S.PAUSED:
            changes.update(paused_at=None, paused_by=None)

    elif to_status is S.PAUSED:
        changes.update(paused_at=now, paused_by=actor)

    elif to_status is S.CLOSED:
        if meeting.ended_at is None:
            changes["ended_at"] = now
        changes.update(closed_by=actor, current_motion_id=None)
        if from_status is S.PAUSED:
            changes.update(paused_at=None, paused_by=None)

    elif to_status is S.VALIDATED:
        if meeting.validated_at is None:
            changes.update(validated_at=now, validated_by=actor)

    elif to_status is S.ARCHIVED:
        changes.update(archived_at=now, archived_by=actor)

    return changes


def apply_transition(
    meeting: Meeting,
    to_status: MeetingStatus,
    actor: str,
    now: datetime,
) -> Meeting:
    return meeting.with_changes(**transition_changes(meeting, to_status, actor, now))
