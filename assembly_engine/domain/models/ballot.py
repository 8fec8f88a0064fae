"""Ballots cast on a motion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class BallotChoice(str, Enum):
    FOR = "for"
    AGAINST = "against"
    ABSTAIN = "abstain"
    NSP = "nsp"  # "does not take part": counted as a ballot, never as weight


class BallotSource(str, Enum):
    TABLET = "tablet"
    MANUAL = "manual"


@dataclass(frozen=True, eq=True)
class Ballot:
    """One ballot, unique per (motion_id, member_id).

    ``member_id`` is the member whose vote this is. When a receiver votes
    on behalf of a giver, ``member_id`` is the giver and
    ``proxy_source_member_id`` is the receiver who cast it. ``weight`` is
    captured at cast time and never recomputed.
    """

    id: UUID
    tenant_id: UUID
    meeting_id: UUID
    motion_id: UUID
    member_id: UUID
    choice: BallotChoice
    weight: float
    cast_at: datetime
    source: BallotSource = BallotSource.TABLET
    proxy_source_member_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"weight must be >= 0, got {self.weight}")

    @property
    def is_proxy_vote(self) -> bool:
        return self.proxy_source_member_id is not None

    @property
    def key(self) -> tuple[UUID, UUID]:
        return (self.motion_id, self.member_id)
