"""Unit tests for the quorum engine."""

from datetime import datetime, timedelta, timezone

import pytest

from assembly_engine.domain.models.attendance import AttendanceMode
from assembly_engine.domain.models.eligibility import EligibilityBasis
from assembly_engine.domain.models.policy import QuorumDenominator, QuorumMode
from assembly_engine.domain.services.eligibility import build_eligible_pool
from assembly_engine.domain.services.proxy_resolver import resolve_proxies
from assembly_engine.domain.services.quorum_engine import compute_quorum, present_weight
from tests.helpers.governance_factory import (
    make_attendance,
    make_meeting,
    make_member,
    make_proxy,
    quorum_policy,
)

T0 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def _evaluate(policy, members, attendance, proxies=(), convocation_no=1, opened_at=None):
    resolution = resolve_proxies(members, attendance, proxies, max_per_receiver=5)
    pool = build_eligible_pool(EligibilityBasis.ACTIVE_MEMBERS, members, attendance)
    return compute_quorum(policy, convocation_no, resolution, pool, attendance, opened_at)


@pytest.fixture
def meeting():
    return make_meeting()


class TestComputeQuorum:
    """Test compute_quorum."""

    def test_without_policy_quorum_is_not_evaluated(self) -> None:
        """No policy means quorum is reported as not evaluated."""
        result = _evaluate(None, [make_member()], [])
        assert not result.applied
        assert result.met is None
        assert not result.blocks_decision

    def test_nobody_present(self) -> None:
        """An empty room never meets quorum."""
        members = [make_member() for _ in range(10)]
        result = _evaluate(quorum_policy(threshold=0.5), members, [])
        assert result.met is False
        assert result.ratio == 0.0
        assert result.blocks_decision

    def test_half_present_meets_half_threshold(self, meeting) -> None:
        members = [make_member() for _ in range(10)]
        attendance = [make_attendance(meeting, m) for m in members[:5]]
        result = _evaluate(quorum_policy(threshold=0.5), members, attendance)
        assert result.met is True
        assert result.ratio == pytest.approx(0.5)
        assert result.numerator == 5
        assert result.eligible == 10

    def test_zero_eligible_never_meets(self) -> None:
        """A zero denominator never meets quorum."""
        result = _evaluate(quorum_policy(threshold=0.0), [], [])
        assert result.met is False
        assert result.eligible == 0.0

    def test_weighted_denominator(self, meeting) -> None:
        """Voting power, not headcount, forms the weighted ratio."""
        heavy, light = make_member(power=3.0), make_member(power=1.0)
        result = _evaluate(
            quorum_policy(threshold=0.7, denominator=QuorumDenominator.ELIGIBLE_WEIGHT),
            [heavy, light],
            [make_attendance(meeting, heavy)],
        )
        assert result.ratio == pytest.approx(0.75)
        assert result.met is True

    def test_remote_excluded_when_policy_says_so(self, meeting) -> None:
        member = make_member()
        attendance = [make_attendance(meeting, member, AttendanceMode.REMOTE)]
        policy = quorum_policy(threshold=0.5, count_remote=False)
        assert _evaluate(policy, [member], attendance).met is False

    def test_represented_givers_count_with_proxies(self, meeting) -> None:
        """Givers represented by a present receiver count as present."""
        giver, receiver, absent = make_member(), make_member(), make_member()
        attendance = [make_attendance(meeting, receiver)]
        proxies = [make_proxy(meeting, giver, receiver, T0)]

        with_proxies = _evaluate(
            quorum_policy(threshold=0.6), [giver, receiver, absent], attendance, proxies
        )
        without = _evaluate(
            quorum_policy(threshold=0.6, include_proxies=False),
            [giver, receiver, absent],
            attendance,
            proxies,
        )

        assert with_proxies.numerator == 2
        assert with_proxies.met is True
        assert without.numerator == 1
        assert without.met is False

    def test_late_arrivals_are_not_counted_for_motion(self, meeting) -> None:
        """Members arriving after the motion opened are left out."""
        early, late = make_member(), make_member()
        attendance = [
            make_attendance(meeting, early, present_from_at=T0),
            make_attendance(meeting, late, present_from_at=T0 + timedelta(minutes=30)),
        ]
        opened_at = T0 + timedelta(minutes=10)
        result = _evaluate(
            quorum_policy(threshold=1.0), [early, late], attendance, opened_at=opened_at
        )
        assert result.numerator == 1
        assert result.met is False
        assert result.late_cutoff_applied

    def test_double_call_uses_second_threshold(self, meeting) -> None:
        """The second convocation uses the lower threshold."""
        members = [make_member() for _ in range(10)]
        attendance = [make_attendance(meeting, m) for m in members[:3]]
        policy = quorum_policy(
            threshold=0.5, mode=QuorumMode.DOUBLE_CALL, threshold_call2=0.25
        )
        assert _evaluate(policy, members, attendance, convocation_no=1).met is False
        assert _evaluate(policy, members, attendance, convocation_no=2).met is True

    def test_double_mode_requires_both_conditions(self, meeting) -> None:
        """Double mode meets quorum only when both ratios do."""
        heavy = make_member(power=9.0)
        others = [make_member() for _ in range(3)]
        members = [heavy, *others]
        policy = quorum_policy(
            threshold=0.5,
            mode=QuorumMode.DOUBLE,
            denominator2=QuorumDenominator.ELIGIBLE_WEIGHT,
            threshold2=0.5,
        )
        only_heavy = _evaluate(policy, members, [make_attendance(meeting, heavy)])
        assert only_heavy.primary is not None and not only_heavy.primary.met
        assert only_heavy.secondary is not None and only_heavy.secondary.met
        assert only_heavy.met is False

        both = _evaluate(
            policy, members, [make_attendance(meeting, m) for m in (heavy, others[0])]
        )
        assert both.met is True

    def test_justification_is_readable(self, meeting) -> None:
        member = make_member()
        result = _evaluate(quorum_policy(), [member], [make_attendance(meeting, member)])
        assert "met" in result.justification
        assert "Counted modes" in result.justification


class TestPresentWeight:
    """Test present_weight."""

    def test_counts_represented_members(self, meeting) -> None:
        giver, receiver, absent = make_member(power=2.0), make_member(), make_member()
        members = [giver, receiver, absent]
        attendance = [make_attendance(meeting, receiver)]
        resolution = resolve_proxies(
            members, attendance, [make_proxy(meeting, giver, receiver, T0)], 5
        )
        pool = build_eligible_pool(EligibilityBasis.ACTIVE_MEMBERS, members, attendance)
        assert present_weight(resolution, pool) == pytest.approx(3.0)
