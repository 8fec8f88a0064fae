"""PostgreSQL policy store (read-only)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.domain.models.policy import QuorumPolicy, VotePolicy
from assembly_engine.infrastructure.adapters.persistence.rows import (
    quorum_policy_from_row,
    vote_policy_from_row,
)


class PostgresPolicyStore(PolicyStoreProtocol):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _fetch(self, sql: str, params: dict[str, Any]) -> Mapping[str, Any] | None:
        async with self._session_factory() as session:
            result = await session.execute(text(sql), params)
            return result.mappings().first()

    async def find_quorum_policy(self, tenant_id: UUID, policy_id: UUID) -> QuorumPolicy | None:
        row = await self._fetch(
            "SELECT * FROM quorum_policies WHERE id = :id AND tenant_id = :tenant_id",
            {"id": policy_id, "tenant_id": tenant_id},
        )
        return quorum_policy_from_row(row) if row else None

    async def find_vote_policy(self, tenant_id: UUID, policy_id: UUID) -> VotePolicy | None:
        row = await self._fetch(
            "SELECT * FROM vote_policies WHERE id = :id AND tenant_id = :tenant_id",
            {"id": policy_id, "tenant_id": tenant_id},
        )
        return vote_policy_from_row(row) if row else None

    async def default_quorum_policy(self, tenant_id: UUID) -> QuorumPolicy | None:
        row = await self._fetch(
            "SELECT * FROM quorum_policies WHERE tenant_id = :tenant_id AND is_default "
            "ORDER BY name LIMIT 1",
            {"tenant_id": tenant_id},
        )
        return quorum_policy_from_row(row) if row else None

    async def default_vote_policy(self, tenant_id: UUID) -> VotePolicy | None:
        row = await self._fetch(
            "SELECT * FROM vote_policies WHERE tenant_id = :tenant_id AND is_default "
            "ORDER BY name LIMIT 1",
            {"tenant_id": tenant_id},
        )
        return vote_policy_from_row(row) if row else None
