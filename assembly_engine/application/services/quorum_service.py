"""Read-only quorum computation for display.

These reads take no lock. Transition preconditions never use them: the
workflow service re-runs the quorum engine inside its own locked
transaction.
"""

from __future__ import annotations

from uuid import UUID

from assembly_engine.application.ports.governance_repository import GovernanceRepositoryProtocol
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.meeting_context import MeetingContextLoader
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, MotionNotFoundError
from assembly_engine.domain.models.proxy_resolution import ProxyResolution
from assembly_engine.domain.models.quorum import QuorumResult
from assembly_engine.domain.models.roles import RequestContext


class QuorumService(LoggingMixin):
    """Computes the current quorum of a meeting without locking it."""

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        policy_store: PolicyStoreProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._repository = repository
        self._context = MeetingContextLoader(policy_store, config)
        self._init_logger(component="quorum")

    async def compute_for_meeting(self, ctx: RequestContext, meeting_id: UUID) -> QuorumResult:
        async with unit_of_work(self._repository, ctx.tenant_id, "quorum") as tx:
            meeting = await tx.get_meeting(meeting_id)
            if meeting is None:
                raise MeetingNotFoundError(meeting_id)
            view = await self._context.participation(tx, meeting_id)
            result = await self._context.meeting_quorum(ctx.tenant_id, meeting, view)
        self._log_operation("compute_for_meeting", meeting_id=str(meeting_id)).debug(
            "quorum_computed", applied=result.applied, met=result.met, ratio=result.ratio
        )
        return result

    async def compute_for_motion(self, ctx: RequestContext, motion_id: UUID) -> QuorumResult:
        """Quorum for one motion, excluding members who arrived after it opened."""
        async with unit_of_work(self._repository, ctx.tenant_id, "quorum") as tx:
            motion = await tx.get_motion(motion_id)
            if motion is None:
                raise MotionNotFoundError(motion_id)
            meeting = await tx.get_meeting(motion.meeting_id)
            if meeting is None:
                raise MeetingNotFoundError(motion.meeting_id)
            view = await self._context.participation(tx, meeting.id)
            return await self._context.motion_quorum(ctx.tenant_id, meeting, motion, view)

    async def resolve_participation(self, ctx: RequestContext, meeting_id: UUID) -> ProxyResolution:
        """Current proxy resolution, e.g. for an attendance dashboard."""
        async with unit_of_work(self._repository, ctx.tenant_id, "quorum") as tx:
            if await tx.get_meeting(meeting_id) is None:
                raise MeetingNotFoundError(meeting_id)
            view = await self._context.participation(tx, meeting_id)
        return view.resolution
