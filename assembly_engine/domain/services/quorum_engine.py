"""Quorum engine.

Decides whether a meeting, or a single motion, has reached quorum under a
QuorumPolicy. Counting rules:

- members attending in person always count;
- remote attendees count only when the policy sets ``count_remote``;
- represented givers count only when the policy sets ``include_proxies``
  and their receiver counts;
- for a motion, members who arrived after the motion opened do not count.

Only members of the eligible pool are counted. With zero eligible the
ratio is 0 and quorum is never met.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.eligibility import EligiblePool
from assembly_engine.domain.models.policy import QuorumDenominator, QuorumMode, QuorumPolicy
from assembly_engine.domain.models.proxy_resolution import (
    ParticipationStatus,
    ProxyResolution,
)
from assembly_engine.domain.models.quorum import QuorumCondition, QuorumResult
from assembly_engine.domain.models.tally import WEIGHT_EPSILON


@dataclass(frozen=True)
class _Headcount:
    members: int
    weight: float
    present_weight: float
    modes: tuple[str, ...]


def _count_present(
    policy: QuorumPolicy,
    resolution: ProxyResolution,
    pool: EligiblePool,
    attendance: Iterable[Attendance],
    cutoff: datetime | None,
) -> _Headcount:
    arrivals = {a.member_id: a for a in attendance}

    def late(member_id: UUID) -> bool:
        row = arrivals.get(member_id)
        return row is not None and row.arrived_after(cutoff)

    def direct_counts(member_id: UUID) -> bool:
        participation = resolution.get(member_id)
        if participation is None or not participation.is_present_directly:
            return False
        if participation.remote and not policy.count_remote:
            return False
        return not late(member_id)

    counted: set[UUID] = set()
    present: set[UUID] = set()
    for member_id in pool.member_ids:
        participation = resolution.get(member_id)
        if participation is None:
            continue
        if participation.is_present_directly:
            present.add(member_id)
            if direct_counts(member_id):
                counted.add(member_id)
        elif participation.status is ParticipationStatus.REPRESENTED:
            present.add(member_id)
            receiver = participation.represented_by
            if policy.include_proxies and receiver is not None and direct_counts(receiver):
                counted.add(member_id)

    modes = ["present"]
    if policy.count_remote:
        modes.append("remote")
    if policy.include_proxies:
        modes.append("proxy")
    return _Headcount(
        members=len(counted),
        weight=sum(pool.weights[m] for m in counted),
        present_weight=sum(pool.weights[m] for m in present),
        modes=tuple(modes),
    )


def _condition(
    denominator: QuorumDenominator,
    threshold: float,
    headcount: _Headcount,
    pool: EligiblePool,
) -> QuorumCondition:
    if denominator is QuorumDenominator.ELIGIBLE_MEMBERS:
        numerator, total = float(headcount.members), float(pool.count)
    elif denominator is QuorumDenominator.ELIGIBLE_WEIGHT:
        numerator, total = headcount.weight, pool.total_weight
    else:
        numerator, total = headcount.weight, headcount.present_weight

    if total <= 0:
        return QuorumCondition(
            basis=denominator.value,
            threshold=threshold,
            numerator=numerator,
            denominator=0.0,
            ratio=0.0,
            met=False,
        )
    ratio = numerator / total
    return QuorumCondition(
        basis=denominator.value,
        threshold=threshold,
        numerator=numerator,
        denominator=total,
        ratio=ratio,
        met=ratio + WEIGHT_EPSILON >= threshold,
    )


def _justification(
    policy: QuorumPolicy,
    convocation_no: int,
    headcount: _Headcount,
    primary: QuorumCondition,
    secondary: QuorumCondition | None,
    met: bool,
    cutoff: datetime | None,
) -> str:
    def describe(c: QuorumCondition) -> str:
        return (
            f"{c.numerator:g}/{c.denominator:g} {c.basis} = {c.ratio:.2%} "
            f"(threshold {c.threshold:.2%})"
        )

    parts = [
        f"Quorum '{policy.name}' ({policy.mode.value}, call {convocation_no}): "
        f"{'met' if met else 'not met'}.",
        f"Primary: {describe(primary)}.",
    ]
    if secondary is not None:
        parts.append(f"Secondary: {describe(secondary)}.")
    parts.append(f"Counted modes: {', '.join(headcount.modes)}.")
    if cutoff is not None:
        parts.append(f"Arrivals after {cutoff.isoformat()} excluded.")
    return " ".join(parts)


def compute_quorum(
    policy: QuorumPolicy | None,
    convocation_no: int,
    resolution: ProxyResolution,
    pool: EligiblePool,
    attendance: Iterable[Attendance] = (),
    motion_opened_at: datetime | None = None,
) -> QuorumResult:
    """Evaluate quorum.

    Args:
        policy: Applicable policy, None when nothing is configured.
        convocation_no: 1 or 2. Selects the second pair for DOUBLE_CALL.
        resolution: Fresh proxy resolution for the meeting.
        pool: Eligible pool.
        attendance: Attendance rows, used for the late-arrival rule.
        motion_opened_at: Set for a motion quorum; members arriving
            later are not counted.

    Returns:
        QuorumResult. ``applied`` is False and ``met`` None without policy.
    """
    if policy is None:
        return QuorumResult.not_applied(convocation_no)

    headcount = _count_present(policy, resolution, pool, attendance, motion_opened_at)

    denominator, threshold = policy.denominator, policy.threshold
    if policy.mode is QuorumMode.DOUBLE_CALL and convocation_no == 2:
        denominator = policy.denominator2 or policy.denominator
        if policy.threshold_call2 is not None:
            threshold = policy.threshold_call2

    primary = _condition(denominator, threshold, headcount, pool)
    secondary = None
    met = primary.met
    if policy.mode is QuorumMode.DOUBLE:
        # Both second-pair fields are guaranteed by QuorumPolicy validation.
        secondary = _condition(
            policy.denominator2,  # type: ignore[arg-type]
            policy.threshold2,  # type: ignore[arg-type]
            headcount,
            pool,
        )
        met = primary.met and secondary.met

    return QuorumResult(
        applied=True,
        met=met,
        ratio=primary.ratio,
        numerator=primary.numerator,
        eligible=primary.denominator,
        threshold=primary.threshold,
        justification=_justification(
            policy, convocation_no, headcount, primary, secondary, met, motion_opened_at
        ),
        policy_id=policy.id,
        convocation_no=convocation_no,
        primary=primary,
        secondary=secondary,
        present_members=headcount.members,
        present_weight=headcount.present_weight,
        late_cutoff_applied=motion_opened_at is not None,
    )


def present_weight(resolution: ProxyResolution, pool: EligiblePool) -> float:
    """Eligible weight present in any form: in person, remote or represented."""
    total = 0.0
    for member_id, weight in pool.weights.items():
        participation = resolution.get(member_id)
        if participation is None:
            continue
        if participation.is_present_directly or (
            participation.status is ParticipationStatus.REPRESENTED
        ):
            total += weight
    return total
