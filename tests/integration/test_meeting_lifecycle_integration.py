"""Scenario: a meeting from draft to archive through the public services."""

import pytest

from assembly_engine.domain.errors import (
    ArchivedImmutableError,
    MeetingStateError,
    TransitionForbiddenError,
    WorkflowIssuesError,
)
from assembly_engine.domain.events import (
    ATTENDANCE_RECORDED_EVENT_TYPE,
    BALLOT_CAST_EVENT_TYPE,
    MEETING_LAUNCHED_EVENT_TYPE,
    MEETING_TRANSITIONED_EVENT_TYPE,
    MOTION_CLOSED_EVENT_TYPE,
    MOTION_CONSOLIDATED_EVENT_TYPE,
    MOTION_OPENED_EVENT_TYPE,
)
from assembly_engine.domain.models.attendance import AttendanceMode
from assembly_engine.domain.models.ballot import BallotChoice
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.tally import Decision, OfficialSource
from tests.helpers.governance_factory import (
    admin_ctx,
    chair_ctx,
    operator_ctx,
    president_ctx,
)
from tests.helpers.metrics import counter_total

pytestmark = pytest.mark.integration

S = MeetingStatus


async def _check_in(harness, assembly, count: int) -> None:
    for member in assembly.members[:count]:
        await harness.services.attendance.record_attendance(
            operator_ctx(), assembly.meeting.id, member.id, AttendanceMode.PRESENT
        )


async def _vote(harness, assembly, choices: list[BallotChoice]) -> None:
    for member, choice in zip(assembly.members, choices):
        await harness.services.ballots.cast_ballot(
            operator_ctx(), assembly.motion.id, member.id, choice
        )


class TestFullLifecycle:
    """Test a meeting from draft to archived with real results."""

    async def test_draft_to_archive(self, harness, assembly) -> None:
        services = harness.services
        meeting_id = assembly.meeting.id

        await _check_in(harness, assembly, 6)
        launched = await services.workflow.launch(chair_ctx(meeting_id), meeting_id)
        assert launched.path == (S.SCHEDULED, S.FROZEN, S.LIVE)

        quorum = await services.quorum.compute_for_meeting(operator_ctx(), meeting_id)
        assert quorum.met
        assert quorum.ratio == pytest.approx(0.6)

        await services.motions.open_motion(operator_ctx(), assembly.motion.id)
        await _vote(harness, assembly, [BallotChoice.FOR] * 5 + [BallotChoice.AGAINST])

        live_result = await services.tally.compute_motion_result(operator_ctx(), assembly.motion.id)
        assert live_result.decision is Decision.ADOPTED
        assert live_result.breakdown.for_weight == 5.0
        # Computing a result never writes the official fields.
        assert harness.motion(assembly.motion.id).consolidated_at is None

        await services.motions.close_motion(operator_ctx(), assembly.motion.id)
        await services.workflow.transition(president_ctx(meeting_id), meeting_id, S.CLOSED)

        readiness = await services.workflow.check_validation_readiness(operator_ctx(), meeting_id)
        assert readiness.can_proceed
        assert readiness.warning_codes == ("not_consolidated",)

        (official,) = await services.consolidation.consolidate_meeting(operator_ctx(), meeting_id)
        assert official.decision is Decision.ADOPTED
        assert official.source is OfficialSource.EVOTE
        assert (official.for_weight, official.against_weight) == (5.0, 1.0)

        await services.workflow.transition(president_ctx(meeting_id), meeting_id, S.VALIDATED)
        await services.workflow.transition(admin_ctx(), meeting_id, S.ARCHIVED)

        archived = harness.meeting(meeting_id)
        assert archived.status is S.ARCHIVED
        assert archived.archived_at == harness.clock.now()
        assert archived.archived_by == "admin"
        assert archived.validated_by == "president"
        assert harness.motion(assembly.motion.id).result_hash == official.result_hash

        types = harness.audit.event_types
        assert types.count(ATTENDANCE_RECORDED_EVENT_TYPE) == 6
        assert types.count(BALLOT_CAST_EVENT_TYPE) == 6
        assert types.count(MEETING_LAUNCHED_EVENT_TYPE) == 1
        assert types.count(MEETING_TRANSITIONED_EVENT_TYPE) == 6
        assert MOTION_OPENED_EVENT_TYPE in types
        assert MOTION_CLOSED_EVENT_TYPE in types
        assert types.count(MOTION_CONSOLIDATED_EVENT_TYPE) == 1
        assert counter_total(
            harness.metrics.get_registry(), "governance_transitions_total"
        ) == 6.0

    async def test_archived_meeting_is_frozen(self, harness, assembly) -> None:
        meeting = harness.seed_meeting(S.ARCHIVED)

        with pytest.raises(ArchivedImmutableError):
            await harness.services.workflow.transition(admin_ctx(), meeting.id, S.VALIDATED)
        with pytest.raises(MeetingStateError) as exc_info:
            await harness.services.attendance.record_attendance(
                operator_ctx(), meeting.id, assembly.members[0].id, AttendanceMode.PRESENT
            )
        assert exc_info.value.code == "attendance_locked"


class TestLaunchFailures:
    """Test launch rollback when a hop is blocked."""

    async def test_unauthorized_hop_leaves_draft(self, harness, assembly) -> None:
        await _check_in(harness, assembly, 6)

        with pytest.raises(TransitionForbiddenError):
            await harness.services.workflow.launch(operator_ctx(), assembly.meeting.id)

        assert harness.meeting(assembly.meeting.id).status is S.DRAFT
        assert MEETING_TRANSITIONED_EVENT_TYPE not in harness.audit.event_types

    async def test_missing_president_blocks_live(self, harness, assembly) -> None:
        meeting = harness.seed_meeting(president_name=None)
        harness.seed_motion(meeting)
        harness.attend(meeting, *assembly.members[:6])

        with pytest.raises(WorkflowIssuesError) as exc_info:
            await harness.services.workflow.launch(chair_ctx(meeting.id), meeting.id)

        assert exc_info.value.report.issue_codes == ("missing_president",)
        assert harness.meeting(meeting.id).status is S.DRAFT

    async def test_admin_can_force_launch(self, harness, assembly) -> None:
        outcome = await harness.services.workflow.launch(
            admin_ctx(), assembly.meeting.id, force=True
        )

        assert outcome.forced
        assert harness.meeting(assembly.meeting.id).status is S.LIVE


class TestPauseAndResume:
    """Test pausing and resuming a live meeting."""

    async def test_pause_requires_no_open_motion(self, harness, assembly) -> None:
        await _check_in(harness, assembly, 6)
        meeting_id = assembly.meeting.id
        await harness.services.workflow.launch(chair_ctx(meeting_id), meeting_id)
        await harness.services.motions.open_motion(operator_ctx(), assembly.motion.id)

        with pytest.raises(WorkflowIssuesError) as exc_info:
            await harness.services.workflow.transition(operator_ctx(), meeting_id, S.PAUSED)
        assert exc_info.value.report.issue_codes == ("motion_open",)

        await harness.services.motions.close_motion(operator_ctx(), assembly.motion.id)
        await harness.services.workflow.transition(operator_ctx(), meeting_id, S.PAUSED)
        resumed = await harness.services.workflow.launch(operator_ctx(), meeting_id)

        assert resumed.path == (S.LIVE,)
        assert harness.meeting(meeting_id).status is S.LIVE
