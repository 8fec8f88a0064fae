"""Read-only motion results.

Computes the same decision consolidation would write, without writing
it. Reading a result never consolidates it.
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
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.models.tally import DecisionResult


class TallyService(LoggingMixin):
    """Computes motion results on demand for display."""

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        policy_store: PolicyStoreProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._repository = repository
        self._context = MeetingContextLoader(policy_store, config)
        self._init_logger(component="tally")

    async def compute_motion_result(self, ctx: RequestContext, motion_id: UUID) -> DecisionResult:
        async with unit_of_work(self._repository, ctx.tenant_id, "tally") as tx:
            motion = await tx.get_motion(motion_id)
            if motion is None:
                raise MotionNotFoundError(motion_id)
            meeting = await tx.get_meeting(motion.meeting_id)
            if meeting is None:
                raise MeetingNotFoundError(motion.meeting_id)
            view = await self._context.participation(tx, meeting.id)
            result = await self._context.motion_decision(tx, meeting, motion, view)
        self._log_operation("compute_motion_result", motion_id=str(motion_id)).debug(
            "motion_result_computed",
            decision=result.decision.value,
            source=result.source.value,
        )
        return result
