"""Unit tests for the read-only QuorumService and TallyService."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from assembly_engine.domain.errors import MeetingNotFoundError, MotionNotFoundError
from assembly_engine.domain.models.ballot import BallotChoice
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.proxy_resolution import ParticipationStatus
from assembly_engine.domain.models.tally import Decision
from tests.helpers.governance_factory import make_ballot, viewer_ctx

S = MeetingStatus


@pytest.fixture
def members(harness):
    harness.seed_policies()
    return harness.seed_members(10)


class TestQuorumService:
    """Test QuorumService."""

    async def test_nobody_present(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        result = await harness.services.quorum.compute_for_meeting(viewer_ctx(), meeting.id)
        assert result.applied
        assert result.met is False
        assert result.ratio == 0.0

    async def test_half_present(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.attend(meeting, *members[:5])
        result = await harness.services.quorum.compute_for_meeting(viewer_ctx(), meeting.id)
        assert result.met is True
        assert result.ratio == pytest.approx(0.5)

    async def test_no_policy_is_not_applied(self, harness) -> None:
        harness.seed_members(3)
        meeting = harness.seed_meeting(S.LIVE)
        result = await harness.services.quorum.compute_for_meeting(viewer_ctx(), meeting.id)
        assert not result.applied
        assert result.met is None

    async def test_motion_quorum_ignores_late_arrivals(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.attend(meeting, *members[:4])
        motion = harness.seed_motion(meeting, opened=True)
        harness.clock.advance(seconds=300)
        harness.attend(meeting, *members[4:6])

        meeting_quorum = await harness.services.quorum.compute_for_meeting(viewer_ctx(), meeting.id)
        motion_quorum = await harness.services.quorum.compute_for_motion(viewer_ctx(), motion.id)

        assert meeting_quorum.met is True
        assert motion_quorum.met is False
        assert motion_quorum.numerator == 4

    async def test_resolve_participation(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.attend(meeting, members[0])
        harness.delegate(meeting, members[1], members[0])

        resolution = await harness.services.quorum.resolve_participation(viewer_ctx(), meeting.id)

        assert resolution.status_of(members[0].id) is ParticipationStatus.PRESENT_AS_RECEIVER
        assert resolution.receiver_for(members[1].id) == members[0].id

    async def test_unknown_meeting(self, harness) -> None:
        with pytest.raises(MeetingNotFoundError):
            await harness.services.quorum.compute_for_meeting(viewer_ctx(), uuid4())


class TestTallyService:
    """Test TallyService."""

    async def test_result_is_computed_not_written(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.attend(meeting, *members[:6])
        motion = harness.seed_motion(meeting, opened=True)
        cast_at = harness.clock.now() + timedelta(seconds=5)
        for member in members[:6]:
            harness.store.add_ballot(make_ballot(motion, member, BallotChoice.FOR, cast_at))

        result = await harness.services.tally.compute_motion_result(viewer_ctx(), motion.id)

        assert result.decision is Decision.ADOPTED
        assert result.breakdown.for_count == 6
        assert harness.motion(motion.id).decision is Decision.PENDING
        assert harness.motion(motion.id).result_hash is None

    async def test_no_ballots(self, harness, members) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.attend(meeting, *members[:6])
        motion = harness.seed_motion(meeting, opened=True)
        result = await harness.services.tally.compute_motion_result(viewer_ctx(), motion.id)
        assert result.decision is Decision.NO_VOTES

    async def test_unknown_motion(self, harness) -> None:
        with pytest.raises(MotionNotFoundError):
            await harness.services.tally.compute_motion_result(viewer_ctx(), uuid4())
