"""Policy store port: read-only, tenant-scoped policy lookups."""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from assembly_engine.domain.models.policy import QuorumPolicy, VotePolicy


class PolicyStoreProtocol(ABC):
    """Lookup of quorum and vote policies.

    A policy owned by another tenant is reported as missing (None).
    """

    @abstractmethod
    async def find_quorum_policy(self, tenant_id: UUID, policy_id: UUID) -> QuorumPolicy | None:
        ...

    @abstractmethod
    async def find_vote_policy(self, tenant_id: UUID, policy_id: UUID) -> VotePolicy | None:
        ...

    @abstractmethod
    async def default_quorum_policy(self, tenant_id: UUID) -> QuorumPolicy | None:
        """Tenant-wide fallback, used only when pinning policies on motion open."""
        ...

    @abstractmethod
    async def default_vote_policy(self, tenant_id: UUID) -> VotePolicy | None:
        ...
