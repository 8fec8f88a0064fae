"""Precondition errors: the operation is valid but the meeting is not ready."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from assembly_engine.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from assembly_engine.domain.models.workflow import ReadinessReport


class WorkflowIssuesError(GovernanceError):
    """Raised when readiness checks report blocking issues.

    Carries the complete report so the caller can explain exactly what is
    missing, including the non-blocking warnings.

    Attributes:
        meeting_id: Meeting the transition targeted.
        report: The readiness report for the rejected hop.
    """

    code = "workflow_issues"

    def __init__(self, meeting_id: UUID, report: ReadinessReport) -> None:
        self.meeting_id = meeting_id
        self.report = report
        super().__init__(
            f"Transition {report.from_status.value} -> {report.to_status.value} "
            f"is blocked by {len(report.issues)} issue(s)",
            detail={"meeting_id": str(meeting_id), **report.to_dict()},
        )

    @property
    def issues(self) -> tuple[Any, ...]:
        return self.report.issues

    @property
    def warnings(self) -> tuple[Any, ...]:
        return self.report.warnings


class MeetingStateError(GovernanceError):
    """Raised when the meeting status forbids the requested operation.

    ``code`` is chosen by the caller so each rule keeps its own stable
    identifier (``meeting_not_live``, ``meeting_locked``...).
    """

    def __init__(self, code: str, meeting_id: UUID, status: str, message: str) -> None:
        self.code = code
        self.meeting_id = meeting_id
        self.status = status
        super().__init__(
            message,
            detail={"meeting_id": str(meeting_id), "status": status},
        )


class MotionStateError(GovernanceError):
    """Raised when the motion is not in the state the operation needs."""

    def __init__(self, code: str, motion_id: UUID, message: str) -> None:
        self.code = code
        self.motion_id = motion_id
        super().__init__(message, detail={"motion_id": str(motion_id)})


class ConsolidationNotAllowedError(GovernanceError):
    """Raised when consolidation is requested outside closed/validated."""

    code = "consolidation_not_allowed"

    def __init__(self, meeting_id: UUID, status: str) -> None:
        self.meeting_id = meeting_id
        self.status = status
        super().__init__(
            f"Results can only be consolidated once the meeting is closed (status: {status})",
            detail={"meeting_id": str(meeting_id), "status": status},
        )


class VoterNotEligibleError(GovernanceError):
    """Raised when a ballot is cast by or for a member who cannot vote now.

    ``code`` distinguishes the rule: ``member_inactive``,
    ``voter_not_present``, ``proxy_not_held``, ``receiver_not_present``,
    ``giver_present`` (the giver attends and votes themselves) or
    ``proxy_not_effective`` (the delegation is part of a chain or cycle).
    """

    def __init__(self, code: str, member_id: UUID, message: str) -> None:
        self.code = code
        self.member_id = member_id
        super().__init__(message, detail={"member_id": str(member_id)})
