"""Governance persistence port.

Every use case runs inside one tenant-scoped transaction obtained from
``GovernanceRepositoryProtocol.transaction``. The transaction commits when
the ``async with`` block exits normally and rolls back on any exception.

Row locks (``lock_meeting``, ``lock_motion``) are held until the
transaction ends. Lock order is always meeting, then motion.
Ballot uniqueness on (motion_id, member_id) is enforced by the store,
without any lock: a duplicate raises AlreadyVotedError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from uuid import UUID

from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.ballot import Ballot
from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.proxy import Proxy


class GovernanceTransaction(ABC):
    """Unit of work bound to one tenant. All reads filter by that tenant."""

    tenant_id: UUID

    # Meetings

    @abstractmethod
    async def get_meeting(self, meeting_id: UUID) -> Meeting | None: ...

    @abstractmethod
    async def lock_meeting(self, meeting_id: UUID) -> Meeting | None:
        """Read the meeting row with a pessimistic lock (SELECT ... FOR UPDATE)."""
        ...

    @abstractmethod
    async def save_meeting(self, meeting: Meeting) -> None: ...

    # Motions

    @abstractmethod
    async def list_motions(self, meeting_id: UUID) -> list[Motion]: ...

    @abstractmethod
    async def get_motion(self, motion_id: UUID) -> Motion | None: ...

    @abstractmethod
    async def lock_motion(self, motion_id: UUID) -> Motion | None: ...

    @abstractmethod
    async def save_motion(self, motion: Motion) -> None: ...

    # Members and attendance

    @abstractmethod
    async def list_members(self) -> list[Member]: ...

    @abstractmethod
    async def get_member(self, member_id: UUID) -> Member | None: ...

    @abstractmethod
    async def list_attendance(self, meeting_id: UUID) -> list[Attendance]: ...

    @abstractmethod
    async def get_attendance(self, meeting_id: UUID, member_id: UUID) -> Attendance | None: ...

    @abstractmethod
    async def save_attendance(self, attendance: Attendance) -> None: ...

    # Proxies

    @abstractmethod
    async def list_proxies(self, meeting_id: UUID, include_revoked: bool = False) -> list[Proxy]: ...

    @abstractmethod
    async def insert_proxy(self, proxy: Proxy) -> None: ...

    @abstractmethod
    async def revoke_proxy(self, proxy_id: UUID, revoked_at: datetime) -> None: ...

    # Ballots

    @abstractmethod
    async def list_ballots(self, motion_id: UUID) -> list[Ballot]: ...

    @abstractmethod
    async def insert_ballot(self, ballot: Ballot) -> None:
        """Insert a ballot.

        Raises:
            AlreadyVotedError: If (motion_id, member_id) already has a ballot.
        """
        ...


class GovernanceRepositoryProtocol(ABC):
    @abstractmethod
    def transaction(self, tenant_id: UUID) -> AbstractAsyncContextManager[GovernanceTransaction]:
        """Open a tenant-scoped transaction."""
        ...
