"""In-memory governance store for tests and local development.

Behaves like the PostgreSQL repository where the engine relies on it:

- writes go to a per-transaction overlay, applied on commit and dropped
  on rollback;
- ``lock_meeting``/``lock_motion`` take an asyncio lock per row, held
  until the transaction ends and re-entrant within one transaction;
- ballot uniqueness on (motion_id, member_id) is reserved at insert
  time, so of two concurrent transactions inserting the same key
  exactly one succeeds;
- every read is filtered by the transaction's tenant.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.domain.errors.consistency import AlreadyVotedError
from assembly_engine.domain.errors.not_found import ProxyNotFoundError
from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.ballot import Ballot
from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.proxy import Proxy

_BallotKey = tuple[UUID, UUID]
_AttendanceKey = tuple[UUID, UUID]


class InMemoryGovernanceTransaction(GovernanceTransaction):
    def __init__(self, store: InMemoryGovernanceStore, tenant_id: UUID) -> None:
        self.tenant_id = tenant_id
        self._store = store
        self._meetings: dict[UUID, Meeting] = {}
        self._motions: dict[UUID, Motion] = {}
        self._attendance: dict[_AttendanceKey, Attendance] = {}
        self._proxies: dict[UUID, Proxy] = {}
        self._ballots: dict[_BallotKey, Ballot] = {}
        self._held: list[asyncio.Lock] = []
        self._held_keys: set[tuple[str, UUID]] = set()

    def _owned(self, row: object | None) -> bool:
        return row is not None and getattr(row, "tenant_id", None) == self.tenant_id

    async def _acquire(self, kind: str, row_id: UUID) -> None:
        key = (kind, row_id)
        if key in self._held_keys:
            return
        lock = self._store._row_lock(key)
        await lock.acquire()
        self._held.append(lock)
        self._held_keys.add(key)

    # Meetings

    async def get_meeting(self, meeting_id: UUID) -> Meeting | None:
        meeting = self._meetings.get(meeting_id) or self._store.meetings.get(meeting_id)
        return meeting if self._owned(meeting) else None

    async def lock_meeting(self, meeting_id: UUID) -> Meeting | None:
        if await self.get_meeting(meeting_id) is None:
            return None
        await self._acquire("meeting", meeting_id)
        # Re-read: another transaction may have committed while we waited.
        return await self.get_meeting(meeting_id)

    async def save_meeting(self, meeting: Meeting) -> None:
        self._meetings[meeting.id] = meeting

    # Motions

    async def list_motions(self, meeting_id: UUID) -> list[Motion]:
        merged = {**self._store.motions, **self._motions}
        motions = [
            m for m in merged.values() if m.meeting_id == meeting_id and self._owned(m)
        ]
        return sorted(motions, key=lambda m: (m.position, str(m.id)))

    async def get_motion(self, motion_id: UUID) -> Motion | None:
        motion = self._motions.get(motion_id) or self._store.motions.get(motion_id)
        return motion if self._owned(motion) else None

    async def lock_motion(self, motion_id: UUID) -> Motion | None:
        if await self.get_motion(motion_id) is None:
            return None
        await self._acquire("motion", motion_id)
        return await self.get_motion(motion_id)

    async def save_motion(self, motion: Motion) -> None:
        self._motions[motion.id] = motion

    # Members and attendance

    async def list_members(self) -> list[Member]:
        members = [m for m in self._store.members.values() if self._owned(m)]
        return sorted(members, key=lambda m: str(m.id))

    async def get_member(self, member_id: UUID) -> Member | None:
        member = self._store.members.get(member_id)
        return member if self._owned(member) else None

    async def list_attendance(self, meeting_id: UUID) -> list[Attendance]:
        merged = {**self._store.attendance, **self._attendance}
        return [
            a for (mid, _), a in sorted(merged.items(), key=lambda item: str(item[0][1]))
            if mid == meeting_id and self._owned(a)
        ]

    async def get_attendance(self, meeting_id: UUID, member_id: UUID) -> Attendance | None:
        key = (meeting_id, member_id)
        row = self._attendance.get(key) or self._store.attendance.get(key)
        return row if self._owned(row) else None

    async def save_attendance(self, attendance: Attendance) -> None:
        self._attendance[(attendance.meeting_id, attendance.member_id)] = attendance

    # Proxies

    async def list_proxies(self, meeting_id: UUID, include_revoked: bool = False) -> list[Proxy]:
        merged = {**self._store.proxies, **self._proxies}
        proxies = [
            p
            for p in merged.values()
            if p.meeting_id == meeting_id
            and self._owned(p)
            and (include_revoked or p.is_active)
        ]
        return sorted(proxies, key=lambda p: (p.created_at, str(p.id)))

    async def insert_proxy(self, proxy: Proxy) -> None:
        self._proxies[proxy.id] = proxy

    async def revoke_proxy(self, proxy_id: UUID, revoked_at: datetime) -> None:
        proxy = self._proxies.get(proxy_id) or self._store.proxies.get(proxy_id)
        if proxy is None or not self._owned(proxy):
            raise ProxyNotFoundError(proxy_id)
        self._proxies[proxy_id] = proxy.revoke(revoked_at)

    # Ballots

    async def list_ballots(self, motion_id: UUID) -> list[Ballot]:
        merged = {**self._store.ballots, **self._ballots}
        ballots = [b for (mid, _), b in merged.items() if mid == motion_id and self._owned(b)]
        return sorted(ballots, key=lambda b: (b.cast_at, str(b.id)))

    async def insert_ballot(self, ballot: Ballot) -> None:
        key = ballot.key
        if key in self._ballots or key in self._store._reserved_ballot_keys:
            raise AlreadyVotedError(ballot.motion_id, ballot.member_id)
        self._store._reserved_ballot_keys.add(key)
        self._ballots[key] = ballot

    # Lifecycle

    def _commit(self) -> None:
        store = self._store
        store.meetings.update(self._meetings)
        store.motions.update(self._motions)
        store.attendance.update(self._attendance)
        store.proxies.update(self._proxies)
        store.ballots.update(self._ballots)
        store.commit_count += 1

    def _rollback(self) -> None:
        self._store._reserved_ballot_keys.difference_update(self._ballots)
        self._meetings.clear()
        self._motions.clear()
        self._attendance.clear()
        self._proxies.clear()
        self._ballots.clear()
        self._store.rollback_count += 1

    def _release(self) -> None:
        while self._held:
            self._held.pop().release()
        self._held_keys.clear()


class InMemoryGovernanceStore(GovernanceRepositoryProtocol):
    """Dict-backed implementation of GovernanceRepositoryProtocol.

    Seed rows with the ``add_*`` helpers; they bypass transactions.
    Set ``fail_on_commit`` to an exception to make the next commit fail
    and roll back.
    """

    def __init__(self) -> None:
        self.meetings: dict[UUID, Meeting] = {}
        self.motions: dict[UUID, Motion] = {}
        self.members: dict[UUID, Member] = {}
        self.attendance: dict[_AttendanceKey, Attendance] = {}
        self.proxies: dict[UUID, Proxy] = {}
        self.ballots: dict[_BallotKey, Ballot] = {}
        self.fail_on_commit: Exception | None = None
        self.commit_count = 0
        self.rollback_count = 0
        self._reserved_ballot_keys: set[_BallotKey] = set()
        self._row_locks: dict[tuple[str, UUID], asyncio.Lock] = {}

    def _row_lock(self, key: tuple[str, UUID]) -> asyncio.Lock:
        lock = self._row_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._row_locks[key] = lock
        return lock

    @asynccontextmanager
    async def transaction(self, tenant_id: UUID) -> AsyncIterator[GovernanceTransaction]:
        tx = InMemoryGovernanceTransaction(self, tenant_id)
        try:
            try:
                yield tx
            except BaseException:
                tx._rollback()
                raise
            if self.fail_on_commit is not None:
                error, self.fail_on_commit = self.fail_on_commit, None
                tx._rollback()
                raise error
            tx._commit()
        finally:
            tx._release()

    # Seeding

    def add_meeting(self, meeting: Meeting) -> Meeting:
        self.meetings[meeting.id] = meeting
        return meeting

    def add_motion(self, motion: Motion) -> Motion:
        self.motions[motion.id] = motion
        return motion

    def add_member(self, member: Member) -> Member:
        self.members[member.id] = member
        return member

    def add_attendance(self, attendance: Attendance) -> Attendance:
        self.attendance[(attendance.meeting_id, attendance.member_id)] = attendance
        return attendance

    def add_proxy(self, proxy: Proxy) -> Proxy:
        self.proxies[proxy.id] = proxy
        return proxy

    def add_ballot(self, ballot: Ballot) -> Ballot:
        self.ballots[ballot.key] = ballot
        self._reserved_ballot_keys.add(ballot.key)
        return ballot

    def ballots_for(self, motion_id: UUID) -> list[Ballot]:
        return [b for (mid, _), b in self.ballots.items() if mid == motion_id]

    def clear(self) -> None:
        """Drop all rows and counters."""
        for table in (
            self.meetings,
            self.motions,
            self.members,
            self.attendance,
            self.proxies,
            self.ballots,
        ):
            table.clear()
        self._reserved_ballot_keys.clear()
        self._row_locks.clear()
        self.fail_on_commit = None
        self.commit_count = 0
        self.rollback_count = 0
