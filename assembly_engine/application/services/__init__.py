"""Governance use cases.

Every public operation takes an explicit RequestContext and runs as one
bounded unit of work against the governance repository.
"""

from assembly_engine.application.services.attendance_service import AttendanceService
from assembly_engine.application.services.ballot_service import BallotService
from assembly_engine.application.services.consolidation_service import ConsolidationService
from assembly_engine.application.services.meeting_workflow_service import MeetingWorkflowService
from assembly_engine.application.services.motion_service import MotionService
from assembly_engine.application.services.proxy_service import ProxyService
from assembly_engine.application.services.quorum_service import QuorumService
from assembly_engine.application.services.tally_service import TallyService
from assembly_engine.application.services.time_authority_service import SystemTimeAuthority

__all__: list[str] = [
    "AttendanceService",
    "BallotService",
    "ConsolidationService",
    "MeetingWorkflowService",
    "MotionService",
    "ProxyService",
    "QuorumService",
    "SystemTimeAuthority",
    "TallyService",
]
