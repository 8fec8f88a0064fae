"""Decision engine: weighted tally and majority rule for one motion.

Rule order is fixed: quorum, then votes, then policy, then threshold.

1. quorum evaluated and not met -> no_quorum
2. no eligible ballot and no consistent manual count -> no_votes
3. no vote policy -> no_policy
4. adopted iff for / base >= threshold, else rejected
"""

from __future__ import annotations

from collections.abc import Iterable

from assembly_engine.domain.models.ballot import Ballot, BallotChoice
from assembly_engine.domain.models.eligibility import EligiblePool
from assembly_engine.domain.models.policy import MajorityBase, VotePolicy
from assembly_engine.domain.models.proxy_resolution import ProxyResolution
from assembly_engine.domain.models.quorum import QuorumResult
from assembly_engine.domain.models.tally import (
    WEIGHT_EPSILON,
    Decision,
    DecisionResult,
    ManualTally,
    OfficialSource,
    TallyBreakdown,
)


def is_ballot_eligible(ballot: Ballot, resolution: ProxyResolution, pool: EligiblePool) -> bool:
    """A ballot counts if its member is eligible and any proxy it relied on still holds.

    Direct ballots stand once cast, even if the voter left afterwards.
    """
    if ballot.member_id not in pool:
        return False
    if ballot.proxy_source_member_id is None:
        return True
    return resolution.receiver_for(ballot.member_id) == ballot.proxy_source_member_id


def tally_ballots(
    ballots: Iterable[Ballot],
    resolution: ProxyResolution,
    pool: EligiblePool,
) -> TallyBreakdown:
    """Sum cast-time weights of eligible ballots per choice."""
    weights = {BallotChoice.FOR: 0.0, BallotChoice.AGAINST: 0.0, BallotChoice.ABSTAIN: 0.0}
    counts = dict.fromkeys(BallotChoice, 0)
    excluded = []
    for ballot in sorted(ballots, key=lambda b: (b.cast_at, str(b.id))):
        if not is_ballot_eligible(ballot, resolution, pool):
            excluded.append(ballot.id)
            continue
        counts[ballot.choice] += 1
        if ballot.choice in weights:
            weights[ballot.choice] += ballot.weight
    return TallyBreakdown(
        for_weight=weights[BallotChoice.FOR],
        against_weight=weights[BallotChoice.AGAINST],
        abstain_weight=weights[BallotChoice.ABSTAIN],
        for_count=counts[BallotChoice.FOR],
        against_count=counts[BallotChoice.AGAINST],
        abstain_count=counts[BallotChoice.ABSTAIN],
        nsp_count=counts[BallotChoice.NSP],
        excluded_ballot_ids=tuple(excluded),
    )


def select_source(
    breakdown: TallyBreakdown,
    manual: ManualTally | None,
) -> tuple[TallyBreakdown, OfficialSource]:
    """A self-consistent manual count takes precedence over ballots."""
    if manual is not None and manual.is_consistent:
        return TallyBreakdown.from_manual(manual), OfficialSource.MANUAL
    return breakdown, OfficialSource.EVOTE


def _pct(value: float) -> str:
    return f"{value:.2%}"


def decide(
    breakdown: TallyBreakdown,
    source: OfficialSource,
    vote_policy: VotePolicy | None,
    quorum: QuorumResult | None,
    pool: EligiblePool,
    present_weight: float = 0.0,
) -> DecisionResult:
    """Apply the decision rules to a breakdown.

    Args:
        breakdown: Ballot tally or manual count.
        source: Where ``breakdown`` came from.
        vote_policy: Resolved vote policy, None if none resolvable.
        quorum: Quorum for the motion, None or not applied if no policy.
        pool: Eligible pool, used by the total_eligible base.
        present_weight: Weight present at the meeting, used by the
            present base.
    """
    common = {"breakdown": breakdown, "source": source, "quorum": quorum}

    if quorum is not None and quorum.blocks_decision:
        return DecisionResult(
            decision=Decision.NO_QUORUM,
            reason=(
                f"Quorum not met: {_pct(quorum.ratio)} present "
                f"(required {_pct(quorum.threshold or 0.0)})."
            ),
            **common,
        )

    has_votes = source is OfficialSource.MANUAL or breakdown.ballot_count > 0
    if not has_votes:
        return DecisionResult(
            decision=Decision.NO_VOTES,
            reason="No eligible ballot and no valid manual count.",
            **common,
        )

    if vote_policy is None:
        return DecisionResult(
            decision=Decision.NO_POLICY,
            reason="No vote policy applies to this motion.",
            **common,
        )

    abstain_against = vote_policy.abstention_as_against
    against = breakdown.against_weight + (breakdown.abstain_weight if abstain_against else 0.0)
    expressed = breakdown.for_weight + against

    if vote_policy.base is MajorityBase.EXPRESSED:
        base_total = expressed
        base_label = "expressed"
    elif vote_policy.base is MajorityBase.TOTAL_ELIGIBLE:
        base_total = pool.total_weight
        base_label = "eligible"
    else:
        base_total = present_weight
        base_label = "present"

    policy_fields = {
        "vote_policy_id": vote_policy.id,
        "majority_base": vote_policy.base.value,
        "base_total": base_total,
        "threshold": vote_policy.threshold,
        "against_for_threshold": against,
    }

    if base_total <= 0 or expressed <= 0:
        return DecisionResult(
            decision=Decision.REJECTED,
            reason=f"Rejected: no {base_label} weight to compute a majority.",
            for_ratio=0.0,
            **policy_fields,
            **common,
        )

    ratio = breakdown.for_weight / base_total
    adopted = ratio + WEIGHT_EPSILON >= vote_policy.threshold
    verdict = "Adopted" if adopted else "Rejected"
    comparison = ">=" if adopted else "<"
    reason = (
        f"{verdict}: {breakdown.for_weight:g} for out of {base_total:g} {base_label} "
        f"({_pct(ratio)} {comparison} {_pct(vote_policy.threshold)})."
    )
    if abstain_against and breakdown.abstain_weight:
        reason += f" Abstentions ({breakdown.abstain_weight:g}) counted against."
    return DecisionResult(
        decision=Decision.ADOPTED if adopted else Decision.REJECTED,
        reason=reason,
        for_ratio=ratio,
        **policy_fields,
        **common,
    )
