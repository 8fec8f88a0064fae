"""In-memory policy store."""

from __future__ import annotations

from uuid import UUID

from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.domain.models.policy import QuorumPolicy, VotePolicy


class PolicyStoreStub(PolicyStoreProtocol):
    """Policies keyed by id, with an optional default per tenant."""

    def __init__(self) -> None:
        self._quorum: dict[UUID, QuorumPolicy] = {}
        self._vote: dict[UUID, VotePolicy] = {}
        self._default_quorum: dict[UUID, UUID] = {}
        self._default_vote: dict[UUID, UUID] = {}

    def add_quorum_policy(self, policy: QuorumPolicy, default: bool = False) -> QuorumPolicy:
        self._quorum[policy.id] = policy
        if default:
            self._default_quorum[policy.tenant_id] = policy.id
        return policy

    def add_vote_policy(self, policy: VotePolicy, default: bool = False) -> VotePolicy:
        self._vote[policy.id] = policy
        if default:
            self._default_vote[policy.tenant_id] = policy.id
        return policy

    def clear(self) -> None:
        self._quorum.clear()
        self._vote.clear()
        self._default_quorum.clear()
        self._default_vote.clear()

    async def find_quorum_policy(self, tenant_id: UUID, policy_id: UUID) -> QuorumPolicy | None:
        policy = self._quorum.get(policy_id)
        return policy if policy is not None and policy.tenant_id == tenant_id else None

    async def find_vote_policy(self, tenant_id: UUID, policy_id: UUID) -> VotePolicy | None:
        policy = self._vote.get(policy_id)
        return policy if policy is not None and policy.tenant_id == tenant_id else None

    async def default_quorum_policy(self, tenant_id: UUID) -> QuorumPolicy | None:
        policy_id = self._default_quorum.get(tenant_id)
        return self._quorum.get(policy_id) if policy_id is not None else None

    async def default_vote_policy(self, tenant_id: UUID) -> VotePolicy | None:
        policy_id = self._default_vote.get(tenant_id)
        return self._vote.get(policy_id) if policy_id is not None else None
