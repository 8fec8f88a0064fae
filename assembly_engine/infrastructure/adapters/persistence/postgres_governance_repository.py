"""PostgreSQL implementation of the governance repository.

One AsyncSession per transaction, opened with ``session.begin()`` so the
block commits on normal exit and rolls back on any exception. Row locks
are ``SELECT ... FOR UPDATE`` and last until commit or rollback. Ballot
uniqueness relies on the ``uq_ballots_motion_member`` constraint through
``ON CONFLICT DO NOTHING``, so concurrent duplicates wait on each other
and the loser sees no inserted row.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from assembly_engine.infrastructure.adapters.persistence.rows import (
    attendance_from_row,
    ballot_from_row,
    meeting_from_row,
    member_from_row,
    motion_from_row,
    proxy_from_row,
    to_row,
)


def _upsert_sql(table: str, columns: list[str], conflict: tuple[str, ...]) -> str:
    names = ", ".join(columns)
    params = ", ".join(f":{c}" for c in columns)
    updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns if c not in conflict)
    return (
        f"INSERT INTO {table} ({names}) VALUES ({params}) "
        f"ON CONFLICT ({', '.join(conflict)}) DO UPDATE SET {updates}"
    )


class PostgresGovernanceTransaction(GovernanceTransaction):
    def __init__(self, session: AsyncSession, tenant_id: UUID) -> None:
        self.tenant_id = tenant_id
        self._session = session

    async def _one(self, sql: str, **params: Any) -> Mapping[str, Any] | None:
        result = await self._session.execute(
            text(sql), {"tenant_id": self.tenant_id, **params}
        )
        return result.mappings().first()

    async def _all(self, sql: str, **params: Any) -> list[Mapping[str, Any]]:
        result = await self._session.execute(
            text(sql), {"tenant_id": self.tenant_id, **params}
        )
        return list(result.mappings().all())

    async def _upsert(self, table: str, row: dict[str, Any], conflict: tuple[str, ...]) -> None:
        await self._session.execute(text(_upsert_sql(table, list(row), conflict)), row)

    # Meetings

    async def get_meeting(self, meeting_id: UUID) -> Meeting | None:
        row = await self._one(
            "SELECT * FROM meetings WHERE id = :id AND tenant_id = :tenant_id",
            id=meeting_id,
        )
        return meeting_from_row(row) if row else None

    async def lock_meeting(self, meeting_id: UUID) -> Meeting | None:
        row = await self._one(
            "SELECT * FROM meetings WHERE id = :id AND tenant_id = :tenant_id FOR UPDATE",
            id=meeting_id,
        )
        return meeting_from_row(row) if row else None

    async def save_meeting(self, meeting: Meeting) -> None:
        await self._upsert("meetings", to_row(meeting), ("id",))

    # Motions

    async def list_motions(self, meeting_id: UUID) -> list[Motion]:
        rows = await self._all(
            "SELECT * FROM motions WHERE meeting_id = :meeting_id "
            "AND tenant_id = :tenant_id ORDER BY position, id",
            meeting_id=meeting_id,
        )
        return [motion_from_row(r) for r in rows]

    async def get_motion(self, motion_id: UUID) -> Motion | None:
        row = await self._one(
            "SELECT * FROM motions WHERE id = :id AND tenant_id = :tenant_id",
            id=motion_id,
        )
        return motion_from_row(row) if row else None

    async def lock_motion(self, motion_id: UUID) -> Motion | None:
        row = await self._one(
            "SELECT * FROM motions WHERE id = :id AND tenant_id = :tenant_id FOR UPDATE",
            id=motion_id,
        )
        return motion_from_row(row) if row else None

    async def save_motion(self, motion: Motion) -> None:
        await self._upsert("motions", to_row(motion), ("id",))

    # Members and attendance

    async def list_members(self) -> list[Member]:
        rows = await self._all("SELECT * FROM members WHERE tenant_id = :tenant_id ORDER BY id")
        return [member_from_row(r) for r in rows]

    async def get_member(self, member_id: UUID) -> Member | None:
        row = await self._one(
            "SELECT * FROM members WHERE id = :id AND tenant_id = :tenant_id",
            id=member_id,
        )
        return member_from_row(row) if row else None

    async def list_attendance(self, meeting_id: UUID) -> list[Attendance]:
        rows = await self._all(
            "SELECT * FROM attendances WHERE meeting_id = :meeting_id "
            "AND tenant_id = :tenant_id ORDER BY member_id",
            meeting_id=meeting_id,
        )
        return [attendance_from_row(r) for r in rows]

    async def get_attendance(self, meeting_id: UUID, member_id: UUID) -> Attendance | None:
        row = await self._one(
            "SELECT * FROM attendances WHERE meeting_id = :meeting_id "
            "AND member_id = :member_id AND tenant_id = :tenant_id",
            meeting_id=meeting_id,
            member_id=member_id,
        )
        return attendance_from_row(row) if row else None

    async def save_attendance(self, attendance: Attendance) -> None:
        await self._upsert("attendances", to_row(attendance), ("meeting_id", "member_id"))

    # Proxies

    async def list_proxies(self, meeting_id: UUID, include_revoked: bool = False) -> list[Proxy]:
        sql = (
            "SELECT * FROM proxies WHERE meeting_id = :meeting_id AND tenant_id = :tenant_id"
        )
        if not include_revoked:
            sql += " AND revoked_at IS NULL"
        rows = await self._all(sql + " ORDER BY created_at, id", meeting_id=meeting_id)
        return [proxy_from_row(r) for r in rows]

    async def insert_proxy(self, proxy: Proxy) -> None:
        row = to_row(proxy)
        columns = ", ".join(row)
        params = ", ".join(f":{c}" for c in row)
        await self._session.execute(
            text(f"INSERT INTO proxies ({columns}) VALUES ({params})"), row
        )

    async def revoke_proxy(self, proxy_id: UUID, revoked_at: datetime) -> None:
        row = await self._one(
            "UPDATE proxies SET revoked_at = :revoked_at "
            "WHERE id = :id AND tenant_id = :tenant_id RETURNING id",
            id=proxy_id,
            revoked_at=revoked_at,
        )
        if row is None:
            raise ProxyNotFoundError(proxy_id)

    # Ballots

    async def list_ballots(self, motion_id: UUID) -> list[Ballot]:
        rows = await self._all(
            "SELECT * FROM ballots WHERE motion_id = :motion_id "
            "AND tenant_id = :tenant_id ORDER BY cast_at, id",
            motion_id=motion_id,
        )
        return [ballot_from_row(r) for r in rows]

    async def insert_ballot(self, ballot: Ballot) -> None:
        row = to_row(ballot)
        columns = ", ".join(row)
        params = ", ".join(f":{c}" for c in row)
        result = await self._session.execute(
            text(
                f"INSERT INTO ballots ({columns}) VALUES ({params}) "
                "ON CONFLICT ON CONSTRAINT uq_ballots_motion_member DO NOTHING "
                "RETURNING id"
            ),
            row,
        )
        if result.first() is None:
            raise AlreadyVotedError(ballot.motion_id, ballot.member_id)


class PostgresGovernanceRepository(GovernanceRepositoryProtocol):
    """Tenant-scoped transactions over an async_sessionmaker."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self, tenant_id: UUID) -> AsyncIterator[GovernanceTransaction]:
        async with self._session_factory() as session:
            async with session.begin():
                yield PostgresGovernanceTransaction(session, tenant_id)
