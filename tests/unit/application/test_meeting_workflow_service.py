"""Unit tests for MeetingWorkflowService.

Runs against the in-memory governance store with a fake clock.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from assembly_engine.domain.errors import (
    AlreadyInStatusError,
    ArchivedImmutableError,
    ForceRequiresAdminError,
    InvalidLaunchStatusError,
    InvalidTransitionError,
    MeetingNotFoundError,
    OperationFailedError,
    TransitionForbiddenError,
    WorkflowIssuesError,
)
from assembly_engine.domain.events.meeting_events import (
    MEETING_LAUNCHED_EVENT_TYPE,
    MEETING_TRANSITIONED_EVENT_TYPE,
)
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.services.transition_table import TRANSITIONS
from tests.helpers.governance_factory import (
    OTHER_TENANT_ID,
    admin_ctx,
    chair_ctx,
    make_meeting,
    operator_ctx,
    president_ctx,
    viewer_ctx,
)
from tests.helpers.metrics import counter_total

S = MeetingStatus


@pytest.fixture
def workflow(harness):
    return harness.services.workflow


@pytest.fixture
def members(harness):
    harness.seed_policies()
    return harness.seed_members(4)


class TestTransition:
    """Test MeetingWorkflowService.transition."""

    async def test_schedule_draft_with_agenda(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        harness.seed_motion(meeting)

        outcome = await workflow.transition(operator_ctx(), meeting.id, S.SCHEDULED)

        assert outcome.from_status is S.DRAFT
        assert outcome.to_status is S.SCHEDULED
        assert not outcome.forced
        assert harness.meeting(meeting.id).status is S.SCHEDULED
        record = harness.audit.of_type(MEETING_TRANSITIONED_EVENT_TYPE)[0]
        assert record.payload["to_status"] == "scheduled"
        assert record.payload["actor"] == "operator"
        assert counter_total(
            harness.metrics.get_registry(),
            "governance_transitions_total",
            from_status="draft",
            to_status="scheduled",
            forced="false",
        ) == 1.0

    async def test_blocking_issues_are_reported(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.DRAFT)

        with pytest.raises(WorkflowIssuesError) as exc_info:
            await workflow.transition(operator_ctx(), meeting.id, S.SCHEDULED)

        assert [i.code for i in exc_info.value.issues] == ["no_motions"]
        assert harness.meeting(meeting.id).status is S.DRAFT
        assert harness.audit.records == []
        assert counter_total(
            harness.metrics.get_registry(),
            "governance_transitions_blocked_total",
            to_status="scheduled",
            code="workflow_issues",
        ) == 1.0

    async def test_edge_missing_from_table(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        with pytest.raises(InvalidTransitionError):
            await workflow.transition(admin_ctx(), meeting.id, S.LIVE)

    async def test_same_status(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        with pytest.raises(AlreadyInStatusError):
            await workflow.transition(admin_ctx(), meeting.id, S.LIVE)

    async def test_archived_cannot_be_forced(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.ARCHIVED)
        with pytest.raises(ArchivedImmutableError):
            await workflow.transition(admin_ctx(), meeting.id, S.VALIDATED, force=True)

    @pytest.mark.parametrize("to_status", list(S), ids=lambda s: s.value)
    async def test_archived_rejects_every_forced_target(self, harness, workflow, to_status) -> None:
        """Force never moves an archived meeting, whatever the target."""
        meeting = harness.seed_meeting(S.ARCHIVED)

        with pytest.raises(ArchivedImmutableError) as exc_info:
            await workflow.transition(admin_ctx(), meeting.id, to_status, force=True)

        assert type(exc_info.value) is ArchivedImmutableError
        assert harness.meeting(meeting.id).status is S.ARCHIVED
        assert harness.audit.records == []

    @pytest.mark.parametrize(
        ("from_status", "to_status"),
        [
            (source, target)
            for source in S
            for target in S
            if not source.is_terminal() and (source, target) not in TRANSITIONS
        ],
        ids=lambda s: s.value,
    )
    async def test_structural_errors_survive_force(
        self, harness, workflow, from_status, to_status
    ) -> None:
        """Pairs missing from the table are rejected even for a forcing admin."""
        meeting = harness.seed_meeting(from_status)
        expected = AlreadyInStatusError if from_status == to_status else InvalidTransitionError

        with pytest.raises(expected) as exc_info:
            await workflow.transition(admin_ctx(), meeting.id, to_status, force=True)

        assert type(exc_info.value) is expected
        assert harness.meeting(meeting.id).status is from_status
        assert harness.audit.records == []

    async def test_viewer_is_forbidden(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        with pytest.raises(TransitionForbiddenError) as exc_info:
            await workflow.transition(viewer_ctx(), meeting.id, S.PAUSED)
        assert exc_info.value.required_role == "operator"

    async def test_president_grant_is_meeting_scoped(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        other = harness.seed_meeting(S.LIVE)
        with pytest.raises(TransitionForbiddenError):
            await workflow.transition(president_ctx(other.id), meeting.id, S.CLOSED)

        outcome = await workflow.transition(president_ctx(meeting.id), meeting.id, S.CLOSED)
        assert outcome.to_status is S.CLOSED
        assert harness.meeting(meeting.id).closed_by == "president"

    async def test_force_requires_admin(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        with pytest.raises(ForceRequiresAdminError):
            await workflow.transition(operator_ctx(), meeting.id, S.SCHEDULED, force=True)

    async def test_admin_force_overrides_issues(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.DRAFT)

        outcome = await workflow.transition(admin_ctx(), meeting.id, S.SCHEDULED, force=True)

        assert outcome.forced
        assert [i.code for i in outcome.overridden_issues] == ["no_motions"]
        payload = harness.audit.of_type(MEETING_TRANSITIONED_EVENT_TYPE)[0].payload
        assert payload["forced"] is True
        assert payload["overridden_issues"] == ["no_motions"]

    async def test_force_without_issues_is_not_flagged(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        harness.seed_motion(meeting)
        outcome = await workflow.transition(admin_ctx(), meeting.id, S.SCHEDULED, force=True)
        assert not outcome.forced

    async def test_open_motion_blocks_close(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.seed_motion(meeting, opened=True)
        with pytest.raises(WorkflowIssuesError) as exc_info:
            await workflow.transition(admin_ctx(), meeting.id, S.CLOSED)
        assert exc_info.value.report.issue_codes == ("motion_open",)

    async def test_opening_records_start(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.FROZEN)
        outcome = await workflow.transition(chair_ctx(meeting.id), meeting.id, S.LIVE)
        live = harness.meeting(meeting.id)
        assert live.started_at == outcome.at == harness.clock.now()
        assert live.opened_by == "chair"

    async def test_other_tenant_meeting_is_not_found(self, harness, workflow) -> None:
        foreign = harness.store.add_meeting(make_meeting(OTHER_TENANT_ID, status=S.LIVE))
        with pytest.raises(MeetingNotFoundError):
            await workflow.transition(admin_ctx(), foreign.id, S.PAUSED)

    async def test_store_failure_is_opaque(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        harness.store.fail_on_commit = RuntimeError("connection reset")

        with pytest.raises(OperationFailedError) as exc_info:
            await workflow.transition(admin_ctx(), meeting.id, S.PAUSED)

        assert exc_info.value.code == "transition_failed"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert harness.meeting(meeting.id).status is S.LIVE
        assert harness.audit.records == []

    async def test_transition_reports_validation_readiness(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        await workflow.transition(admin_ctx(), meeting.id, S.CLOSED)
        ((meeting_id, report),) = harness.notifications.reports
        assert meeting_id == meeting.id
        assert report.to_status is S.VALIDATED


class TestLaunch:
    """Test MeetingWorkflowService.launch."""

    async def test_launch_from_draft_walks_every_hop(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        harness.seed_motion(meeting)
        harness.attend(meeting, *members[:3])

        launched = await workflow.launch(chair_ctx(meeting.id), meeting.id)

        assert launched.path == (S.SCHEDULED, S.FROZEN, S.LIVE)
        assert [h.to_status for h in launched.hops] == [S.SCHEDULED, S.FROZEN, S.LIVE]
        live = harness.meeting(meeting.id)
        assert live.status is S.LIVE
        assert live.frozen_by == "chair"
        assert harness.audit.event_types == [
            MEETING_TRANSITIONED_EVENT_TYPE,
            MEETING_TRANSITIONED_EVENT_TYPE,
            MEETING_TRANSITIONED_EVENT_TYPE,
            MEETING_LAUNCHED_EVENT_TYPE,
        ]

    async def test_failing_hop_leaves_meeting_untouched(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        harness.seed_motion(meeting)
        harness.attend(meeting, *members)

        with pytest.raises(TransitionForbiddenError) as exc_info:
            await workflow.launch(operator_ctx(), meeting.id)

        assert exc_info.value.to_status == "frozen"
        assert harness.meeting(meeting.id).status is S.DRAFT
        assert harness.audit.records == []

    async def test_readiness_checked_on_simulated_status(self, harness, workflow, members) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        harness.seed_motion(meeting)

        with pytest.raises(WorkflowIssuesError) as exc_info:
            await workflow.launch(chair_ctx(meeting.id), meeting.id)

        report = exc_info.value.report
        assert report.from_status is S.SCHEDULED
        assert report.issue_codes == ("no_attendance",)
        assert harness.meeting(meeting.id).status is S.DRAFT

    async def test_resume_from_pause(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.PAUSED)
        launched = await workflow.launch(operator_ctx(), meeting.id)
        assert launched.path == (S.LIVE,)

    async def test_already_live(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)
        with pytest.raises(AlreadyInStatusError):
            await workflow.launch(admin_ctx(), meeting.id)

    async def test_no_path_from_closed(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.CLOSED)
        with pytest.raises(InvalidLaunchStatusError):
            await workflow.launch(admin_ctx(), meeting.id)

    async def test_archived(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.ARCHIVED)
        with pytest.raises(ArchivedImmutableError):
            await workflow.launch(admin_ctx(), meeting.id)


class TestReadiness:
    """Test the read-only readiness reports."""

    async def test_options_list_roles_and_authorization(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.LIVE)

        options = await workflow.get_transition_readiness(operator_ctx(), meeting.id)

        by_target = {o.to_status: o for o in options}
        assert set(by_target) == {S.PAUSED, S.CLOSED}
        assert by_target[S.PAUSED].authorized
        assert not by_target[S.CLOSED].authorized
        assert by_target[S.CLOSED].required_role == "president"

    async def test_issues_before_transition_is_read_only(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.DRAFT)
        report = await workflow.issues_before_transition(viewer_ctx(), meeting.id, S.SCHEDULED)
        assert report.issue_codes == ("no_motions",)
        assert harness.meeting(meeting.id) == meeting

    async def test_validation_readiness_notifies_changes(self, harness, workflow) -> None:
        meeting = harness.seed_meeting(S.CLOSED)
        motion = harness.seed_motion(meeting, opened=True)
        harness.store.motions[motion.id] = replace(motion, closed_at=harness.clock.now())

        first = await workflow.check_validation_readiness(viewer_ctx(), meeting.id)
        assert first.issue_codes == ("bad_results",)
        assert harness.notifications.changes == []

        harness.store.motions[motion.id] = replace(
            harness.motion(motion.id),
            manual_for=3.0,
            manual_against=1.0,
            manual_abstain=0.0,
            manual_total=4.0,
        )
        second = await workflow.check_validation_readiness(viewer_ctx(), meeting.id)

        assert second.can_proceed
        (change,) = harness.notifications.changes
        assert change.became_ready is True
        assert change.removed_codes == ("bad_results",)
