"""Meeting lifecycle transition table.

The table is keyed by (from, to) status pairs and maps each allowed
transition to the role it requires. It is validated when this module is
imported, so a malformed table fails at startup rather than on the first
request that hits the gap.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from uuid import UUID

from assembly_engine.domain.errors.structural import (
    AlreadyInStatusError,
    ArchivedImmutableError,
    InvalidTransitionError,
)
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.roles import MeetingRole, RequestContext, Role, SystemRole

S = MeetingStatus

TRANSITIONS: Mapping[tuple[MeetingStatus, MeetingStatus], Role] = MappingProxyType(
    {
        (S.DRAFT, S.SCHEDULED): SystemRole.OPERATOR,
        (S.DRAFT, S.FROZEN): MeetingRole.PRESIDENT,
        (S.SCHEDULED, S.FROZEN): MeetingRole.PRESIDENT,
        (S.SCHEDULED, S.DRAFT): SystemRole.ADMIN,
        (S.FROZEN, S.LIVE): MeetingRole.PRESIDENT,
        (S.FROZEN, S.SCHEDULED): SystemRole.ADMIN,
        (S.LIVE, S.PAUSED): SystemRole.OPERATOR,
        (S.LIVE, S.CLOSED): MeetingRole.PRESIDENT,
        (S.PAUSED, S.LIVE): SystemRole.OPERATOR,
        (S.PAUSED, S.CLOSED): MeetingRole.PRESIDENT,
        (S.CLOSED, S.VALIDATED): MeetingRole.PRESIDENT,
        (S.VALIDATED, S.ARCHIVED): SystemRole.ADMIN,
    }
)

# Fixed multi-hop paths walked by launch, keyed by starting status.
LAUNCH_PATHS: Mapping[MeetingStatus, tuple[MeetingStatus, ...]] = MappingProxyType(
    {
        S.DRAFT: (S.SCHEDULED, S.FROZEN, S.LIVE),
        S.SCHEDULED: (S.FROZEN, S.LIVE),
        S.FROZEN: (S.LIVE,),
        S.PAUSED: (S.LIVE,),
    }
)


def validate_transition_table(
    transitions: Mapping[tuple[MeetingStatus, MeetingStatus], Role],
    launch_paths: Mapping[MeetingStatus, tuple[MeetingStatus, ...]],
) -> None:
    """Check the table for completeness and consistency.

    Raises:
        ValueError: On self loops, transitions out of a terminal status,
            non-terminal dead ends, unreachable statuses or launch paths
            that use a transition missing from the table.
    """
    for (source, target), role in transitions.items():
        if source == target:
            raise ValueError(f"Self transition on {source.value}")
        if source.is_terminal():
            raise ValueError(f"Terminal status {source.value} has an outgoing transition")
        if not isinstance(role, (SystemRole, MeetingRole)):
            raise ValueError(f"Transition {source.value}->{target.value} has no role")

    sources = {source for source, _ in transitions}
    for status in MeetingStatus:
        if not status.is_terminal() and status not in sources:
            raise ValueError(f"Non-terminal status {status.value} has no way out")

    reachable = {MeetingStatus.DRAFT}
    frontier = [MeetingStatus.DRAFT]
    while frontier:
        current = frontier.pop()
        for source, target in transitions:
            if source == current and target not in reachable:
                reachable.add(target)
                frontier.append(target)
    missing = set(MeetingStatus) - reachable
    if missing:
        raise ValueError(f"Unreachable statuses: {sorted(s.value for s in missing)}")

    for start, path in launch_paths.items():
        previous = start
        for hop in path:
            if (previous, hop) not in transitions:
                raise ValueError(
                    f"Launch path from {start.value} uses unknown hop "
                    f"{previous.value}->{hop.value}"
                )
            previous = hop
        if previous is not MeetingStatus.LIVE:
            raise ValueError(f"Launch path from {start.value} does not end live")


validate_transition_table(TRANSITIONS, LAUNCH_PATHS)


def allowed_targets(from_status: MeetingStatus) -> tuple[MeetingStatus, ...]:
    return tuple(target for source, target in TRANSITIONS if source == from_status)


def required_role(from_status: MeetingStatus, to_status: MeetingStatus) -> Role | None:
    return TRANSITIONS.get((from_status, to_status))


def check_structure(
    from_status: MeetingStatus,
    to_status: MeetingStatus,
    meeting_id: UUID | None = None,
) -> Role:
    """Validate a single hop against the table.

    Archived is checked first: nothing leaves it, whatever the target.

    Returns:
        The role the hop requires.

    Raises:
        ArchivedImmutableError: If ``from_status`` is archived.
        AlreadyInStatusError: If ``to_status`` equals ``from_status``.
        InvalidTransitionError: If the table has no such hop.
    """
    if from_status.is_terminal():
        raise ArchivedImmutableError(from_status, to_status, meeting_id)
    if from_status == to_status:
        raise AlreadyInStatusError(from_status, meeting_id)
    role = TRANSITIONS.get((from_status, to_status))
    if role is None:
        raise InvalidTransitionError(from_status, to_status, meeting_id)
    return role


def is_authorized(ctx: RequestContext, meeting_id: UUID, role: Role) -> bool:
    """Admin, equal system role, or the meeting-scoped role for this meeting."""
    return ctx.holds(role, meeting_id)


def outgoing(from_status: MeetingStatus) -> list[tuple[MeetingStatus, Role]]:
    """Targets reachable in one hop with the role each requires."""
    return [
        (target, role) for (source, target), role in TRANSITIONS.items() if source == from_status
    ]
