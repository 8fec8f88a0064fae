"""Tally, manual count and decision value objects."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID

import blake3

from assembly_engine.domain.models.quorum import QuorumResult

# Weights are floats; sums are compared with this tolerance.
WEIGHT_EPSILON = 1e-9


class Decision(str, Enum):
    ADOPTED = "adopted"
    REJECTED = "rejected"
    NO_QUORUM = "no_quorum"
    NO_VOTES = "no_votes"
    NO_POLICY = "no_policy"
    CANCELLED = "cancelled"
    PENDING = "pending"


class OfficialSource(str, Enum):
    EVOTE = "evote"
    MANUAL = "manual"


@dataclass(frozen=True, eq=True)
class ManualTally:
    """Operator-entered count, used when electronic voting is unavailable."""

    for_weight: float
    against_weight: float
    abstain_weight: float
    total: float

    def problems(self) -> list[str]:
        """Return every reason this count is not usable, empty if consistent."""
        found: list[str] = []
        parts = (self.for_weight, self.against_weight, self.abstain_weight)
        if self.total <= 0:
            found.append("total must be greater than zero")
        if any(p < 0 for p in parts):
            found.append("counts must not be negative")
        if any(p > self.total + WEIGHT_EPSILON for p in parts):
            found.append("no count may exceed the total")
        if abs(sum(parts) - self.total) > WEIGHT_EPSILON:
            found.append("for + against + abstain must equal the total")
        return found

    @property
    def is_consistent(self) -> bool:
        return not self.problems()


@dataclass(frozen=True, eq=True)
class TallyBreakdown:
    """Weighted totals for one motion.

    ``nsp_count`` ballots are counted as participation but carry no weight.
    ``excluded_ballot_ids`` lists ballots dropped because their member is
    no longer eligible.
    """

    for_weight: float = 0.0
    against_weight: float = 0.0
    abstain_weight: float = 0.0
    for_count: int = 0
    against_count: int = 0
    abstain_count: int = 0
    nsp_count: int = 0
    excluded_ballot_ids: tuple[UUID, ...] = ()

    @property
    def ballot_count(self) -> int:
        return self.for_count + self.against_count + self.abstain_count + self.nsp_count

    @property
    def expressed_weight(self) -> float:
        return self.for_weight + self.against_weight + self.abstain_weight

    @property
    def total_weight(self) -> float:
        return self.expressed_weight

    @classmethod
    def from_manual(cls, manual: ManualTally) -> TallyBreakdown:
        return cls(
            for_weight=manual.for_weight,
            against_weight=manual.against_weight,
            abstain_weight=manual.abstain_weight,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "for": {"count": self.for_count, "weight": self.for_weight},
            "against": {"count": self.against_count, "weight": self.against_weight},
            "abstain": {"count": self.abstain_count, "weight": self.abstain_weight},
            "nsp": {"count": self.nsp_count, "weight": 0.0},
            "excluded_ballot_ids": [str(b) for b in self.excluded_ballot_ids],
        }


@dataclass(frozen=True, eq=True)
class DecisionResult:
    """Outcome of applying quorum and majority rules to one breakdown."""

    decision: Decision
    reason: str
    breakdown: TallyBreakdown
    source: OfficialSource
    quorum: QuorumResult | None = None
    vote_policy_id: UUID | None = None
    majority_base: str | None = None
    base_total: float = 0.0
    for_ratio: float = 0.0
    threshold: float | None = None
    against_for_threshold: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.decision.value,
            "reason": self.reason,
            "source": self.source.value,
            "breakdown": self.breakdown.to_dict(),
            "quorum": self.quorum.to_dict() if self.quorum else None,
            "majority": {
                "vote_policy_id": str(self.vote_policy_id) if self.vote_policy_id else None,
                "base": self.majority_base,
                "base_total": self.base_total,
                "ratio": self.for_ratio,
                "threshold": self.threshold,
                "against_for_threshold": self.against_for_threshold,
            },
        }


@dataclass(frozen=True, eq=True)
class OfficialResult:
    """The consolidated, frozen result written onto a motion."""

    motion_id: UUID
    source: OfficialSource
    for_weight: float
    against_weight: float
    abstain_weight: float
    total: float
    decision: Decision
    reason: str
    result_hash: str = field(default="")

    def __post_init__(self) -> None:
        if not self.result_hash:
            object.__setattr__(self, "result_hash", self.compute_hash())

    def canonical_payload(self) -> bytes:
        """Deterministic serialization used for hashing."""
        payload = {
            "motion_id": str(self.motion_id),
            "source": self.source.value,
            "for": round(self.for_weight, 6),
            "against": round(self.against_weight, 6),
            "abstain": round(self.abstain_weight, 6),
            "total": round(self.total, 6),
            "decision": self.decision.value,
            "reason": self.reason,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def compute_hash(self) -> str:
        return blake3.blake3(self.canonical_payload()).hexdigest()

    @classmethod
    def from_decision(cls, motion_id: UUID, result: DecisionResult) -> OfficialResult:
        b = result.breakdown
        return cls(
            motion_id=motion_id,
            source=result.source,
            for_weight=b.for_weight,
            against_weight=b.against_weight,
            abstain_weight=b.abstain_weight,
            total=b.total_weight,
            decision=result.decision,
            reason=result.reason,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "motion_id": str(self.motion_id),
            "source": self.source.value,
            "for": self.for_weight,
            "against": self.against_weight,
            "abstain": self.abstain_weight,
            "total": self.total,
            "decision": self.decision.value,
            "reason": self.reason,
            "result_hash": self.result_hash,
        }
