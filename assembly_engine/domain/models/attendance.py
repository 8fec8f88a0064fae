"""Attendance records captured at check-in."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class AttendanceMode(str, Enum):
    PRESENT = "present"
    REMOTE = "remote"
    PROXY = "proxy"
    EXCUSED = "excused"
    ABSENT = "absent"

    @property
    def is_direct(self) -> bool:
        """True when the member takes part personally (in the room or remote)."""
        return self in (AttendanceMode.PRESENT, AttendanceMode.REMOTE)


@dataclass(frozen=True, eq=True)
class Attendance:
    """One member's attendance for one meeting.

    ``voting_power`` is a snapshot taken at check-in so later edits to the
    member do not change the weight used in this meeting.
    ``present_from_at`` is when the member actually arrived; motions opened
    before that instant do not count them for quorum.
    """

    meeting_id: UUID
    member_id: UUID
    tenant_id: UUID
    mode: AttendanceMode
    voting_power: float = 1.0
    present_from_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.voting_power < 0:
            raise ValueError(f"voting_power must be >= 0, got {self.voting_power}")

    def arrived_after(self, instant: datetime | None) -> bool:
        if instant is None or self.present_from_at is None:
            return False
        return self.present_from_at > instant
