"""Authorization errors: the caller lacks the role an operation requires."""

from __future__ import annotations

from uuid import UUID

from assembly_engine.domain.exceptions import GovernanceError


class TransitionForbiddenError(GovernanceError):
    """Raised when the caller may not perform a lifecycle transition.

    Attributes:
        meeting_id: Meeting the transition targeted.
        from_status: Current status value.
        to_status: Requested status value.
        required_role: Role the transition table demands.
    """

    code = "transition_forbidden"

    def __init__(
        self,
        meeting_id: UUID,
        from_status: str,
        to_status: str,
        required_role: str,
    ) -> None:
        self.meeting_id = meeting_id
        self.from_status = from_status
        self.to_status = to_status
        self.required_role = required_role
        super().__init__(
            f"Role {required_role} is required for {from_status} -> {to_status}",
            detail={
                "meeting_id": str(meeting_id),
                "from_status": from_status,
                "to_status": to_status,
                "required_role": required_role,
            },
        )


class ForceRequiresAdminError(GovernanceError):
    """Raised when a non-admin asks to override blocking readiness issues."""

    code = "force_requires_admin"

    def __init__(self, meeting_id: UUID) -> None:
        self.meeting_id = meeting_id
        super().__init__(
            "Only an administrator can force a transition",
            detail={"meeting_id": str(meeting_id)},
        )


class OperationForbiddenError(GovernanceError):
    """Raised when the caller lacks the role for a non-transition operation."""

    code = "forbidden"

    def __init__(self, operation: str, required_roles: tuple[str, ...]) -> None:
        self.operation = operation
        self.required_roles = required_roles
        super().__init__(
            f"{operation} requires one of: {', '.join(required_roles)}",
            detail={"operation": operation, "required_roles": list(required_roles)},
        )


class UnknownRoleError(GovernanceError):
    """Raised at the request boundary for a role name outside the canonical set."""

    code = "unknown_role"

    def __init__(self, raw_role: str) -> None:
        self.raw_role = raw_role
        super().__init__(f"Unknown role: {raw_role!r}", detail={"role": raw_role})
