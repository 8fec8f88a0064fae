"""Motion, ballot, proxy and attendance audit events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from assembly_engine.domain.models.tally import OfficialResult

MOTION_OPENED_EVENT_TYPE: str = "motion.opened"
MOTION_CLOSED_EVENT_TYPE: str = "motion.closed"
MOTION_CANCELLED_EVENT_TYPE: str = "motion.cancelled"
MOTION_CONSOLIDATED_EVENT_TYPE: str = "motion.result.consolidated"
MANUAL_TALLY_RECORDED_EVENT_TYPE: str = "motion.manual_tally.recorded"
BALLOT_CAST_EVENT_TYPE: str = "ballot.cast"
PROXY_UPSERTED_EVENT_TYPE: str = "proxy.upserted"
PROXY_REVOKED_EVENT_TYPE: str = "proxy.revoked"
ATTENDANCE_RECORDED_EVENT_TYPE: str = "attendance.recorded"


@dataclass(frozen=True, eq=True)
class MotionConsolidatedPayload:
    """Payload recorded when an official result is written onto a motion."""

    meeting_id: UUID
    result: OfficialResult
    actor: str
    consolidated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            **self.result.to_dict(),
            "actor": self.actor,
            "consolidated_at": self.consolidated_at.isoformat(),
        }
