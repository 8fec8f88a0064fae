"""Meeting aggregate root and its lifecycle status."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class MeetingStatus(str, Enum):
    """Lifecycle states of a meeting.

    draft -> scheduled -> frozen -> live <-> paused -> closed -> validated
    -> archived. Archived is terminal.
    """

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    FROZEN = "frozen"
    LIVE = "live"
    PAUSED = "paused"
    CLOSED = "closed"
    VALIDATED = "validated"
    ARCHIVED = "archived"

    def is_terminal(self) -> bool:
        return self is MeetingStatus.ARCHIVED

    @property
    def results_locked(self) -> bool:
        """True once attendance and delegations may no longer change."""
        return self in (MeetingStatus.VALIDATED, MeetingStatus.ARCHIVED)


@dataclass(frozen=True, eq=True)
class Meeting:
    """A deliberative assembly meeting.

    Timestamp and actor fields are written only by lifecycle side effects.
    Once ``archived_at`` is set no field may change.
    """

    id: UUID
    tenant_id: UUID
    title: str
    status: MeetingStatus = MeetingStatus.DRAFT
    president_name: str | None = None
    convocation_no: int = 1
    quorum_policy_id: UUID | None = None
    vote_policy_id: UUID | None = None
    current_motion_id: UUID | None = None
    scheduled_at: datetime | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    frozen_at: datetime | None = None
    frozen_by: str | None = None
    opened_by: str | None = None
    paused_at: datetime | None = None
    paused_by: str | None = None
    closed_by: str | None = None
    validated_at: datetime | None = None
    validated_by: str | None = None
    archived_at: datetime | None = None
    archived_by: str | None = None

    def __post_init__(self) -> None:
        if self.convocation_no not in (1, 2):
            raise ValueError(f"convocation_no must be 1 or 2, got {self.convocation_no}")

    @property
    def has_president(self) -> bool:
        return bool(self.president_name and self.president_name.strip())

    @property
    def is_archived(self) -> bool:
        return self.status is MeetingStatus.ARCHIVED or self.archived_at is not None

    def with_changes(self, **changes: Any) -> Meeting:
        """Return a copy with ``changes`` applied.

        Raises:
            ValueError: If the meeting is archived.
        """
        if self.is_archived:
            raise ValueError(f"Meeting {self.id} is archived and cannot change")
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, UUID):
                data[key] = str(value)
            elif isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, Enum):
                data[key] = value.value
        return data
