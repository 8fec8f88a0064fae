"""Unit tests for governance error codes and payloads."""

from uuid import uuid4

import pytest

from assembly_engine.domain.errors import (
    AlreadyInStatusError,
    AlreadyVotedError,
    ArchivedImmutableError,
    InvalidTransitionError,
    MeetingNotFoundError,
    MeetingStateError,
    OperationFailedError,
    ProxyCeilingError,
    ProxyCycleError,
    StructuralTransitionError,
    TransitionForbiddenError,
    WorkflowIssuesError,
)
from assembly_engine.domain.exceptions import GovernanceError
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.workflow import ReadinessReport, WorkflowIssue

S = MeetingStatus


class TestErrorCodes:
    """Test the stable error codes."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (InvalidTransitionError(S.DRAFT, S.LIVE), "invalid_transition"),
            (AlreadyInStatusError(S.LIVE), "already_in_status"),
            (ArchivedImmutableError(S.ARCHIVED, S.VALIDATED), "archived_immutable"),
            (TransitionForbiddenError(uuid4(), "live", "paused", "president"), "transition_forbidden"),
            (AlreadyVotedError(uuid4(), uuid4()), "already_voted"),
            (ProxyCycleError(uuid4(), uuid4()), "proxy_cycle"),
            (ProxyCeilingError(uuid4(), uuid4(), 2), "proxy_ceiling"),
            (MeetingNotFoundError(uuid4()), "meeting_not_found"),
        ],
    )
    def test_stable_codes(self, error: GovernanceError, code: str) -> None:
        assert error.code == code
        assert error.to_dict()["code"] == code

    def test_structural_errors_share_a_base(self) -> None:
        for error in (
            InvalidTransitionError(S.DRAFT, S.LIVE),
            AlreadyInStatusError(S.LIVE),
            ArchivedImmutableError(S.ARCHIVED, S.DRAFT),
        ):
            assert isinstance(error, StructuralTransitionError)

    def test_operation_failed_code_names_operation(self) -> None:
        error = OperationFailedError("launch")
        assert error.code == "launch_failed"
        assert error.detail == {"operation": "launch"}

    def test_state_error_code_is_caller_defined(self) -> None:
        error = MeetingStateError("meeting_not_live", uuid4(), "paused", "Meeting is not live")
        assert error.code == "meeting_not_live"
        assert error.detail["status"] == "paused"

    def test_not_found_detail_names_resource(self) -> None:
        meeting_id = uuid4()
        error = MeetingNotFoundError(meeting_id)
        assert error.detail == {"meeting_id": str(meeting_id)}
        assert str(error) == f"Meeting {meeting_id} not found"


class TestWorkflowIssuesError:
    """Test WorkflowIssuesError."""

    def test_carries_full_report(self) -> None:
        report = ReadinessReport(
            from_status=S.LIVE,
            to_status=S.CLOSED,
            issues=(WorkflowIssue(code="motion_open", message="1 motion(s) still open"),),
            warnings=(WorkflowIssue(code="not_consolidated", message="pending"),),
        )
        error = WorkflowIssuesError(uuid4(), report)
        assert error.code == "workflow_issues"
        assert [i.code for i in error.issues] == ["motion_open"]
        assert [w.code for w in error.warnings] == ["not_consolidated"]
        assert error.detail["can_proceed"] is False
        assert error.detail["issues"][0]["code"] == "motion_open"
