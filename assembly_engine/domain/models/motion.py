"""Agenda motion and its official result fields."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from assembly_engine.domain.models.tally import (
    Decision,
    ManualTally,
    OfficialResult,
    OfficialSource,
)


@dataclass(frozen=True, eq=True)
class Motion:
    """A motion put to the vote during a meeting.

    ``official_*`` fields, ``decision`` and ``result_hash`` are written
    only by an explicit consolidation pass. ``manual_*`` fields hold an
    operator-entered count when electronic voting was not usable.
    """

    id: UUID
    tenant_id: UUID
    meeting_id: UUID
    title: str
    description: str = ""
    secret: bool = False
    position: int = 0
    vote_policy_id: UUID | None = None
    quorum_policy_id: UUID | None = None
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    manual_for: float | None = None
    manual_against: float | None = None
    manual_abstain: float | None = None
    manual_total: float | None = None
    manual_justification: str | None = None
    official_for: float | None = None
    official_against: float | None = None
    official_abstain: float | None = None
    official_total: float | None = None
    official_source: OfficialSource | None = None
    decision: Decision = Decision.PENDING
    decision_reason: str | None = None
    result_hash: str | None = None
    consolidated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.closed_at is not None:
            if self.opened_at is None:
                raise ValueError(f"Motion {self.id} cannot be closed before it is opened")
            if self.closed_at < self.opened_at:
                raise ValueError(f"Motion {self.id} closed_at precedes opened_at")

    @property
    def is_open(self) -> bool:
        return self.opened_at is not None and self.closed_at is None

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def is_cancelled(self) -> bool:
        return self.decision is Decision.CANCELLED

    @property
    def manual_tally(self) -> ManualTally | None:
        if self.manual_total is None:
            return None
        return ManualTally(
            for_weight=self.manual_for or 0.0,
            against_weight=self.manual_against or 0.0,
            abstain_weight=self.manual_abstain or 0.0,
            total=self.manual_total,
        )

    @property
    def has_consistent_manual_tally(self) -> bool:
        manual = self.manual_tally
        return manual is not None and manual.is_consistent

    @property
    def official_result(self) -> OfficialResult | None:
        if self.official_source is None or self.consolidated_at is None:
            return None
        return OfficialResult(
            motion_id=self.id,
            source=self.official_source,
            for_weight=self.official_for or 0.0,
            against_weight=self.official_against or 0.0,
            abstain_weight=self.official_abstain or 0.0,
            total=self.official_total or 0.0,
            decision=self.decision,
            reason=self.decision_reason or "",
            result_hash=self.result_hash or "",
        )

    def with_official_result(self, result: OfficialResult, at: datetime) -> Motion:
        return replace(
            self,
            official_for=result.for_weight,
            official_against=result.against_weight,
            official_abstain=result.abstain_weight,
            official_total=result.total,
            official_source=result.source,
            decision=result.decision,
            decision_reason=result.reason,
            result_hash=result.result_hash,
            consolidated_at=at,
        )

    def with_manual_tally(self, tally: ManualTally, justification: str) -> Motion:
        return replace(
            self,
            manual_for=tally.for_weight,
            manual_against=tally.against_weight,
            manual_abstain=tally.abstain_weight,
            manual_total=tally.total,
            manual_justification=justification,
        )
