"""Meeting lifecycle audit events.

Emitted after the transaction that applied the change has committed. A
rolled back transition emits nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from assembly_engine.domain.models.workflow import LaunchOutcome, TransitionOutcome

MEETING_TRANSITIONED_EVENT_TYPE: str = "meeting.transition"
MEETING_LAUNCHED_EVENT_TYPE: str = "meeting.launch"


@dataclass(frozen=True, eq=True)
class MeetingTransitionedPayload:
    """Payload for a single lifecycle transition.

    When ``forced`` is True, ``overridden_issues`` lists the blocking
    issue codes an administrator chose to override.
    """

    meeting_id: UUID
    from_status: str
    to_status: str
    actor: str
    occurred_at: datetime
    forced: bool = False
    overridden_issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_outcome(cls, outcome: TransitionOutcome) -> MeetingTransitionedPayload:
        return cls(
            meeting_id=outcome.meeting_id,
            from_status=outcome.from_status.value,
            to_status=outcome.to_status.value,
            actor=outcome.actor,
            occurred_at=outcome.at,
            forced=outcome.forced,
            overridden_issues=tuple(i.code for i in outcome.overridden_issues),
            warnings=tuple(w.code for w in outcome.warnings),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            "forced": self.forced,
            "overridden_issues": list(self.overridden_issues),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True, eq=True)
class MeetingLaunchedPayload:
    meeting_id: UUID
    from_status: str
    to_status: str
    path: tuple[str, ...]
    actor: str
    occurred_at: datetime
    forced: bool = False
    overridden_issues: tuple[str, ...] = ()

    @classmethod
    def from_outcome(cls, outcome: LaunchOutcome) -> MeetingLaunchedPayload:
        overridden = sorted({i.code for hop in outcome.hops for i in hop.overridden_issues})
        return cls(
            meeting_id=outcome.meeting_id,
            from_status=outcome.from_status.value,
            to_status=outcome.to_status.value,
            path=tuple(s.value for s in outcome.path),
            actor=outcome.actor,
            occurred_at=outcome.at,
            forced=outcome.forced,
            overridden_issues=tuple(overridden),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "path": list(self.path),
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            "forced": self.forced,
            "overridden_issues": list(self.overridden_issues),
        }
