"""Unit tests for the eligible pool."""

from dataclasses import replace

from assembly_engine.domain.models.eligibility import EligibilityBasis
from assembly_engine.domain.services.eligibility import build_eligible_pool
from tests.helpers.governance_factory import make_attendance, make_meeting, make_member


class TestBuildEligiblePool:
    """Test build_eligible_pool."""

    def test_active_members_basis_uses_current_power(self) -> None:
        active, inactive = make_member(power=2.0), make_member(active=False)
        pool = build_eligible_pool(EligibilityBasis.ACTIVE_MEMBERS, [active, inactive], [])
        assert pool.member_ids == frozenset({active.id})
        assert pool.total_weight == 2.0
        assert not pool.fallback_used

    def test_recorded_attendance_uses_snapshot(self) -> None:
        meeting = make_meeting()
        member, absent = make_member(power=1.0), make_member()
        row = make_attendance(meeting, member)
        row = replace(row, voting_power=4.0)
        pool = build_eligible_pool(EligibilityBasis.RECORDED_ATTENDANCE, [member, absent], [row])
        assert dict(pool.weights) == {member.id: 4.0}

    def test_recorded_attendance_may_be_empty(self) -> None:
        pool = build_eligible_pool(EligibilityBasis.RECORDED_ATTENDANCE, [make_member()], [])
        assert pool.count == 0

    def test_fallback_is_flagged(self) -> None:
        members = [make_member(), make_member()]
        pool = build_eligible_pool(EligibilityBasis.RECORDED_ATTENDANCE_OR_ACTIVE, members, [])
        assert pool.count == 2
        assert pool.fallback_used

    def test_inactive_attendees_are_excluded(self) -> None:
        meeting = make_meeting()
        inactive = make_member(active=False)
        pool = build_eligible_pool(
            EligibilityBasis.RECORDED_ATTENDANCE,
            [inactive],
            [make_attendance(meeting, inactive)],
        )
        assert inactive.id not in pool
