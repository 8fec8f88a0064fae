"""Structural workflow errors.

Raised before any side effect when a requested status change is not part
of the lifecycle graph at all.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from assembly_engine.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from assembly_engine.domain.models.meeting import MeetingStatus


class StructuralTransitionError(GovernanceError):
    """Base error for requests that the transition table rejects outright."""

    code = "structural_error"

    def __init__(
        self,
        message: str,
        meeting_id: UUID | None,
        from_status: MeetingStatus,
        to_status: MeetingStatus,
    ) -> None:
        self.meeting_id = meeting_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            message,
            detail={
                "meeting_id": str(meeting_id) if meeting_id else None,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )


class InvalidTransitionError(StructuralTransitionError):
    """Raised when ``to`` is not reachable from ``from`` in one step."""

    code = "invalid_transition"

    def __init__(
        self,
        from_status: MeetingStatus,
        to_status: MeetingStatus,
        meeting_id: UUID | None = None,
    ) -> None:
        super().__init__(
            f"Transition {from_status.value} -> {to_status.value} is not allowed",
            meeting_id,
            from_status,
            to_status,
        )


class AlreadyInStatusError(StructuralTransitionError):
    """Raised when the requested status equals the current status."""

    code = "already_in_status"

    def __init__(self, status: MeetingStatus, meeting_id: UUID | None = None) -> None:
        super().__init__(
            f"Meeting is already {status.value}",
            meeting_id,
            status,
            status,
        )


class ArchivedImmutableError(StructuralTransitionError):
    """Raised for any change requested on an archived meeting.

    Archived is terminal. Neither the caller's role nor the force flag can
    lift this error.
    """

    code = "archived_immutable"

    def __init__(
        self,
        from_status: MeetingStatus,
        to_status: MeetingStatus,
        meeting_id: UUID | None = None,
    ) -> None:
        super().__init__(
            "Archived meetings cannot be modified",
            meeting_id,
            from_status,
            to_status,
        )


class InvalidLaunchStatusError(GovernanceError):
    """Raised when launch is requested from a status with no launch path."""

    code = "invalid_launch_status"

    def __init__(self, meeting_id: UUID, status: MeetingStatus) -> None:
        self.meeting_id = meeting_id
        self.status = status
        super().__init__(
            f"Cannot launch a meeting from status {status.value}",
            detail={"meeting_id": str(meeting_id), "status": status.value},
        )
