"""Eligible pool construction.

Which members are entitled to vote is an explicit policy choice
(EligibilityBasis), never an implicit fallback.
"""

from __future__ import annotations

from collections.abc import Iterable

from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.eligibility import EligibilityBasis, EligiblePool
from assembly_engine.domain.models.member import Member


def build_eligible_pool(
    basis: EligibilityBasis,
    members: Iterable[Member],
    attendance: Iterable[Attendance],
) -> EligiblePool:
    """Compute the eligible pool for a meeting.

    Only active members are ever eligible. With ACTIVE_MEMBERS the member's
    current voting power is used; with the attendance bases the snapshot
    taken at check-in is used.
    """
    active = {m.id: m for m in members if m.is_active}
    recorded = {a.member_id: a.voting_power for a in attendance if a.member_id in active}

    if basis is EligibilityBasis.ACTIVE_MEMBERS:
        return EligiblePool(basis=basis, weights={i: m.voting_power for i, m in active.items()})
    if basis is EligibilityBasis.RECORDED_ATTENDANCE:
        return EligiblePool(basis=basis, weights=recorded)
    if recorded:
        return EligiblePool(basis=basis, weights=recorded)
    return EligiblePool(
        basis=basis,
        weights={i: m.voting_power for i, m in active.items()},
        fallback_used=True,
    )
