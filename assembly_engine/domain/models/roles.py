"""Roles and the explicit request context.

Two role families exist. System roles (admin, operator, auditor, viewer)
are global to the tenant account. Meeting roles (president, assessor,
voter) are granted per meeting. Legacy aliases are normalized once, when
the request context is built, and the engine only ever sees the
canonical enums below.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from uuid import UUID

from assembly_engine.domain.errors.authorization import UnknownRoleError


class SystemRole(str, Enum):
    ADMIN = "admin"
    OPERATOR = "operator"
    AUDITOR = "auditor"
    VIEWER = "viewer"


class MeetingRole(str, Enum):
    PRESIDENT = "president"
    ASSESSOR = "assessor"
    VOTER = "voter"


Role = SystemRole | MeetingRole

# Legacy names still sent by older clients.
ROLE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "trust": MeetingRole.ASSESSOR.value,
        "readonly": SystemRole.VIEWER.value,
    }
)


def normalize_role(raw: str) -> Role:
    """Map a raw role name to its canonical enum.

    Args:
        raw: Role name as received from the session layer.

    Returns:
        The canonical SystemRole or MeetingRole.

    Raises:
        UnknownRoleError: If the name is not a known role or alias.
    """
    name = raw.strip().lower()
    name = ROLE_ALIASES.get(name, name)
    for family in (SystemRole, MeetingRole):
        try:
            return family(name)
        except ValueError:
            continue
    raise UnknownRoleError(raw)


def normalize_system_role(raw: str) -> SystemRole:
    role = normalize_role(raw)
    if not isinstance(role, SystemRole):
        raise UnknownRoleError(raw)
    return role


def normalize_meeting_role(raw: str) -> MeetingRole:
    role = normalize_role(raw)
    if not isinstance(role, MeetingRole):
        raise UnknownRoleError(raw)
    return role


@dataclass(frozen=True, eq=True)
class RequestContext:
    """Immutable, request-scoped caller identity.

    Built once by the request boundary and passed explicitly into every
    service call. Nothing in the engine reads role or tenant information
    from anywhere else.

    Attributes:
        tenant_id: Isolation boundary for every read and write.
        system_role: Caller's global role.
        user_id: Caller's account id, if authenticated.
        user_name: Display name recorded in actor fields.
        meeting_roles: Meeting id -> roles granted for that meeting.
    """

    tenant_id: UUID
    system_role: SystemRole
    user_id: UUID | None = None
    user_name: str | None = None
    meeting_roles: Mapping[UUID, frozenset[MeetingRole]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mapping so the context cannot be mutated after creation.
        frozen = {k: frozenset(v) for k, v in self.meeting_roles.items()}
        object.__setattr__(self, "meeting_roles", MappingProxyType(frozen))

    @classmethod
    def from_raw(
        cls,
        tenant_id: UUID,
        system_role: str,
        meeting_roles: Mapping[UUID, Iterable[str]] | None = None,
        user_id: UUID | None = None,
        user_name: str | None = None,
    ) -> RequestContext:
        """Build a context from untrusted role names, normalizing aliases.

        Raises:
            UnknownRoleError: If any role name is unknown.
        """
        normalized = {
            meeting_id: frozenset(normalize_meeting_role(r) for r in roles)
            for meeting_id, roles in (meeting_roles or {}).items()
        }
        return cls(
            tenant_id=tenant_id,
            system_role=normalize_system_role(system_role),
            user_id=user_id,
            user_name=user_name,
            meeting_roles=normalized,
        )

    @property
    def is_admin(self) -> bool:
        return self.system_role is SystemRole.ADMIN

    @property
    def actor(self) -> str:
        """Value written into *_by fields and audit payloads."""
        if self.user_name:
            return self.user_name
        if self.user_id is not None:
            return str(self.user_id)
        return "system"

    def roles_for(self, meeting_id: UUID) -> frozenset[MeetingRole]:
        return self.meeting_roles.get(meeting_id, frozenset())

    def holds(self, role: Role, meeting_id: UUID) -> bool:
        """Return True if the caller satisfies ``role`` for this meeting.

        Admin satisfies every role. A system role is satisfied by equality.
        A meeting role is satisfied only by a grant on this meeting.
        """
        if self.is_admin:
            return True
        if isinstance(role, SystemRole):
            return self.system_role is role
        return role in self.roles_for(meeting_id)

    def holds_any(self, roles: Iterable[Role], meeting_id: UUID) -> bool:
        return any(self.holds(role, meeting_id) for role in roles)
