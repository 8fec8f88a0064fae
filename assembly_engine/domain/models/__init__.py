"""Domain models for the governance engine."""

from assembly_engine.domain.models.attendance import Attendance, AttendanceMode
from assembly_engine.domain.models.ballot import Ballot, BallotChoice, BallotSource
from assembly_engine.domain.models.eligibility import EligibilityBasis, EligiblePool
from assembly_engine.domain.models.meeting import Meeting, MeetingStatus
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.policy import (
    MajorityBase,
    QuorumDenominator,
    QuorumMode,
    QuorumPolicy,
    VotePolicy,
)
from assembly_engine.domain.models.proxy import Proxy
from assembly_engine.domain.models.proxy_resolution import (
    MemberParticipation,
    ParticipationStatus,
    ProxyAnomaly,
    ProxyAnomalyKind,
    ProxyResolution,
)
from assembly_engine.domain.models.quorum import QuorumCondition, QuorumResult
from assembly_engine.domain.models.roles import (
    MeetingRole,
    RequestContext,
    SystemRole,
    normalize_role,
)
from assembly_engine.domain.models.snapshot import MeetingSnapshot
from assembly_engine.domain.models.tally import (
    Decision,
    DecisionResult,
    ManualTally,
    OfficialResult,
    OfficialSource,
    TallyBreakdown,
)
from assembly_engine.domain.models.workflow import (
    LaunchOutcome,
    ReadinessChange,
    ReadinessReport,
    TransitionOption,
    TransitionOutcome,
    WorkflowIssue,
)

__all__: list[str] = [
    "Attendance",
    "AttendanceMode",
    "Ballot",
    "BallotChoice",
    "BallotSource",
    "Decision",
    "DecisionResult",
    "EligibilityBasis",
    "EligiblePool",
    "LaunchOutcome",
    "ManualTally",
    "Meeting",
    "MeetingRole",
    "MeetingSnapshot",
    "MeetingStatus",
    "Member",
    "MemberParticipation",
    "Motion",
    "OfficialResult",
    "OfficialSource",
    "ParticipationStatus",
    "ProxyAnomaly",
    "ProxyAnomalyKind",
    "Proxy",
    "ProxyResolution",
    "QuorumCondition",
    "QuorumDenominator",
    "QuorumMode",
    "QuorumPolicy",
    "QuorumResult",
    "ReadinessChange",
    "ReadinessReport",
    "RequestContext",
    "SystemRole",
    "TallyBreakdown",
    "TransitionOption",
    "TransitionOutcome",
    "VotePolicy",
    "WorkflowIssue",
    "normalize_role",
]
