"""Proxy (vote delegation) management.

Delegations are checked under the meeting row lock so two operators
cannot build a cycle or exceed a receiver's cap by racing each other.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.authorization import MANAGE_PROXIES, require_roles
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from assembly_engine.domain.errors.consistency import (
    ProxyCeilingError,
    ProxyChainError,
    ProxyCycleError,
    ProxyMemberMismatchError,
    SelfDelegationError,
)
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, ProxyNotFoundError
from assembly_engine.domain.errors.precondition import MeetingStateError
from assembly_engine.domain.events.motion_events import (
    PROXY_REVOKED_EVENT_TYPE,
    PROXY_UPSERTED_EVENT_TYPE,
)
from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.proxy import Proxy
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.services.proxy_resolver import would_create_cycle_or_chain


class ProxyService(LoggingMixin):
    """Creates and revokes delegations between members of one meeting."""

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        audit_sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._repository = repository
        self._audit = audit_sink
        self._time = time_authority
        self._max_per_receiver = config.proxy_max_per_receiver
        self._init_logger(component="proxies")

    async def upsert_proxy(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        giver_member_id: UUID,
        receiver_member_id: UUID,
    ) -> Proxy:
        """Create or replace the giver's active delegation.

        An existing delegation to the same receiver is returned unchanged;
        one to another receiver is revoked and replaced.

        Raises:
            SelfDelegationError: giver and receiver are the same member.
            ProxyMemberMismatchError: a member is unknown or inactive.
            ProxyCycleError: the receiver already delegates to the giver.
            ProxyChainError: the delegation would need a second hop.
            ProxyCeilingError: the receiver already holds the maximum.
            MeetingStateError: ``meeting_locked`` once validated.
        """
        if giver_member_id == receiver_member_id:
            raise SelfDelegationError(giver_member_id)
        require_roles(ctx, meeting_id, "upsert_proxy", MANAGE_PROXIES)
        log = self._log_operation(
            "upsert_proxy",
            meeting_id=str(meeting_id),
            giver_member_id=str(giver_member_id),
            receiver_member_id=str(receiver_member_id),
        )

        async with unit_of_work(self._repository, ctx.tenant_id, "proxy") as tx:
            await self._lock_open_meeting(tx, meeting_id)
            for member_id in (giver_member_id, receiver_member_id):
                member = await tx.get_member(member_id)
                if member is None or not member.is_active:
                    raise ProxyMemberMismatchError(giver_member_id, receiver_member_id)

            active = await tx.list_proxies(meeting_id)
            current = next((p for p in active if p.giver_member_id == giver_member_id), None)
            if current is not None and current.receiver_member_id == receiver_member_id:
                log.debug("proxy_unchanged", proxy_id=str(current.id))
                return current

            problem = would_create_cycle_or_chain(active, giver_member_id, receiver_member_id)
            if problem == "cycle":
                raise ProxyCycleError(giver_member_id, receiver_member_id)
            if problem == "chain":
                raise ProxyChainError(
                    giver_member_id,
                    receiver_member_id,
                    "the receiver delegates their vote or the giver holds proxies",
                )

            incoming = sum(
                1
                for p in active
                if p.receiver_member_id == receiver_member_id
                and p.giver_member_id != giver_member_id
            )
            if incoming >= self._max_per_receiver:
                raise ProxyCeilingError(
                    giver_member_id, receiver_member_id, self._max_per_receiver
                )

            now = self._time.now()
            if current is not None:
                await tx.revoke_proxy(current.id, now)
            proxy = Proxy(
                id=uuid4(),
                meeting_id=meeting_id,
                tenant_id=ctx.tenant_id,
                giver_member_id=giver_member_id,
                receiver_member_id=receiver_member_id,
                created_at=now,
            )
            await tx.insert_proxy(proxy)

        await self._record(
            ctx,
            PROXY_UPSERTED_EVENT_TYPE,
            proxy,
            {"replaced_proxy_id": str(current.id) if current else None},
        )
        log.info("proxy_upserted", proxy_id=str(proxy.id), replaced=current is not None)
        return proxy

    async def revoke_proxy(self, ctx: RequestContext, meeting_id: UUID, proxy_id: UUID) -> Proxy:
        """Revoke an active delegation.

        Raises:
            ProxyNotFoundError: No active proxy with this id in the meeting.
            MeetingStateError: ``meeting_locked`` once validated.
        """
        require_roles(ctx, meeting_id, "revoke_proxy", MANAGE_PROXIES)
        async with unit_of_work(self._repository, ctx.tenant_id, "proxy") as tx:
            await self._lock_open_meeting(tx, meeting_id)
            proxy = next((p for p in await tx.list_proxies(meeting_id) if p.id == proxy_id), None)
            if proxy is None:
                raise ProxyNotFoundError(proxy_id)
            now = self._time.now()
            await tx.revoke_proxy(proxy_id, now)
            revoked = proxy.revoke(now)

        await self._record(ctx, PROXY_REVOKED_EVENT_TYPE, revoked, {"revoked_at": now.isoformat()})
        self._log_operation("revoke_proxy", proxy_id=str(proxy_id)).info("proxy_revoked")
        return revoked

    async def _lock_open_meeting(self, tx: GovernanceTransaction, meeting_id: UUID) -> Meeting:
        meeting = await tx.lock_meeting(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        if meeting.status.results_locked:
            raise MeetingStateError(
                "meeting_locked",
                meeting_id,
                meeting.status.value,
                "Delegations cannot change once the meeting is validated",
            )
        return meeting

    async def _record(
        self,
        ctx: RequestContext,
        event_type: str,
        proxy: Proxy,
        extra: dict[str, object],
    ) -> None:
        await self._audit.record(
            AuditRecord(
                event_type=event_type,
                resource_type="proxy",
                resource_id=proxy.id,
                tenant_id=ctx.tenant_id,
                meeting_id=proxy.meeting_id,
                payload={
                    "actor": ctx.actor,
                    "giver_member_id": str(proxy.giver_member_id),
                    "receiver_member_id": str(proxy.receiver_member_id),
                    **extra,
                },
            )
        )
