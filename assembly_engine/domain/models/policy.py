"""Quorum and vote (majority) policies.

Policies are reference data. The engine never mutates them; a policy that
needs to change is superseded by a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class QuorumMode(str, Enum):
    SINGLE = "single"
    DOUBLE_CALL = "double_call"  # second convocation uses the second pair
    DOUBLE = "double"  # both conditions must hold


class QuorumDenominator(str, Enum):
    ELIGIBLE_MEMBERS = "eligible_members"
    ELIGIBLE_WEIGHT = "eligible_weight"
    PRESENT_WEIGHT = "present_weight"

    @property
    def counts_heads(self) -> bool:
        return self is QuorumDenominator.ELIGIBLE_MEMBERS


class MajorityBase(str, Enum):
    EXPRESSED = "expressed"
    TOTAL_ELIGIBLE = "total_eligible"
    PRESENT = "present"


def _check_ratio(name: str, value: float | None) -> None:
    if value is not None and not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")


@dataclass(frozen=True, eq=True)
class QuorumPolicy:
    """Minimum participation required before a vote is valid.

    Attributes:
        threshold: Ratio required on the first pair.
        denominator: Unit and pool of the first pair.
        threshold_call2: DOUBLE_CALL only, ratio used on the second
            convocation.
        denominator2: Second pair denominator (DOUBLE_CALL second
            convocation, or the second DOUBLE condition).
        threshold2: DOUBLE only, ratio of the second condition.
        include_proxies: Count represented givers as present.
        count_remote: Count remote attendees as present.
    """

    id: UUID
    tenant_id: UUID
    name: str
    threshold: float
    mode: QuorumMode = QuorumMode.SINGLE
    denominator: QuorumDenominator = QuorumDenominator.ELIGIBLE_MEMBERS
    threshold_call2: float | None = None
    denominator2: QuorumDenominator | None = None
    threshold2: float | None = None
    include_proxies: bool = True
    count_remote: bool = True

    def __post_init__(self) -> None:
        _check_ratio("threshold", self.threshold)
        _check_ratio("threshold_call2", self.threshold_call2)
        _check_ratio("threshold2", self.threshold2)
        if self.mode is QuorumMode.DOUBLE and (
            self.denominator2 is None or self.threshold2 is None
        ):
            raise ValueError("double quorum requires denominator2 and threshold2")


@dataclass(frozen=True, eq=True)
class VotePolicy:
    """Majority rule applied to a motion's tally.

    ``abstention_as_against`` moves abstentions to the against side for
    the threshold comparison. The breakdown still reports them separately.
    """

    id: UUID
    tenant_id: UUID
    name: str
    threshold: float
    base: MajorityBase = MajorityBase.EXPRESSED
    abstention_as_against: bool = False

    def __post_init__(self) -> None:
        _check_ratio("threshold", self.threshold)
