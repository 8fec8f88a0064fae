"""Role requirements for operations outside the transition table."""

from __future__ import annotations

from uuid import UUID

from assembly_engine.domain.errors.authorization import OperationForbiddenError
from assembly_engine.domain.models.roles import MeetingRole, RequestContext, Role, SystemRole

MANAGE_MOTIONS: tuple[Role, ...] = (SystemRole.OPERATOR, MeetingRole.PRESIDENT)
RECORD_MANUAL_TALLY: tuple[Role, ...] = (SystemRole.OPERATOR, MeetingRole.PRESIDENT)
MANAGE_ATTENDANCE: tuple[Role, ...] = (SystemRole.OPERATOR, MeetingRole.ASSESSOR)
MANAGE_PROXIES: tuple[Role, ...] = (SystemRole.OPERATOR, MeetingRole.ASSESSOR)
CONSOLIDATE_RESULTS: tuple[Role, ...] = (SystemRole.OPERATOR, MeetingRole.PRESIDENT)
CAST_MANUAL_BALLOT: tuple[Role, ...] = (SystemRole.OPERATOR,)


def require_roles(
    ctx: RequestContext,
    meeting_id: UUID,
    operation: str,
    roles: tuple[Role, ...],
) -> None:
    """Raise OperationForbiddenError unless the caller holds one of ``roles``."""
    if not ctx.holds_any(roles, meeting_id):
        raise OperationForbiddenError(operation, tuple(r.value for r in roles))
