"""Point-in-time view of a meeting used by the readiness rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import UUID

from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.ballot import Ballot
from assembly_engine.domain.models.eligibility import EligiblePool
from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.proxy_resolution import ProxyResolution
from assembly_engine.domain.models.quorum import QuorumResult


@dataclass(frozen=True)
class MeetingSnapshot:
    """Everything the readiness rules read, loaded inside one transaction."""

    meeting: Meeting
    motions: tuple[Motion, ...]
    attendance: tuple[Attendance, ...]
    resolution: ProxyResolution
    pool: EligiblePool
    quorum: QuorumResult
    ballots_by_motion: Mapping[UUID, tuple[Ballot, ...]] = field(default_factory=dict)

    @property
    def open_motions(self) -> tuple[Motion, ...]:
        return tuple(m for m in self.motions if m.is_open)

    @property
    def closed_motions(self) -> tuple[Motion, ...]:
        return tuple(m for m in self.motions if m.is_closed and not m.is_cancelled)
