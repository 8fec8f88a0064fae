"""Eligible voting pool for a meeting."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from uuid import UUID


class EligibilityBasis(str, Enum):
    """Where the eligible pool comes from.

    ACTIVE_MEMBERS: every active member of the tenant.
    RECORDED_ATTENDANCE: active members with an attendance row.
    RECORDED_ATTENDANCE_OR_ACTIVE: attendance rows when any exist,
        otherwise every active member. The fallback is flagged on the
        resulting pool.
    """

    ACTIVE_MEMBERS = "active_members"
    RECORDED_ATTENDANCE = "recorded_attendance"
    RECORDED_ATTENDANCE_OR_ACTIVE = "recorded_attendance_or_active"


@dataclass(frozen=True)
class EligiblePool:
    basis: EligibilityBasis
    weights: Mapping[UUID, float] = field(default_factory=dict)
    fallback_used: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def member_ids(self) -> frozenset[UUID]:
        return frozenset(self.weights)

    @property
    def count(self) -> int:
        return len(self.weights)

    @property
    def total_weight(self) -> float:
        return sum(self.weights.values())

    def __contains__(self, member_id: object) -> bool:
        return member_id in self.weights
