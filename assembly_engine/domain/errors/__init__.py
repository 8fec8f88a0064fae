"""Domain errors for the governance engine.

All errors inherit from GovernanceError and expose a machine-readable code.
"""

from assembly_engine.domain.errors.authorization import (
    ForceRequiresAdminError,
    OperationForbiddenError,
    TransitionForbiddenError,
    UnknownRoleError,
)
from assembly_engine.domain.errors.consistency import (
    AlreadyVotedError,
    InvalidManualTallyError,
    ProxyCeilingError,
    ProxyChainError,
    ProxyCycleError,
    ProxyError,
    ProxyMemberMismatchError,
    SelfDelegationError,
)
from assembly_engine.domain.errors.not_found import (
    MeetingNotFoundError,
    MemberNotFoundError,
    MotionNotFoundError,
    ProxyNotFoundError,
    ResourceNotFoundError,
)
from assembly_engine.domain.errors.persistence import OperationFailedError
from assembly_engine.domain.errors.precondition import (
    ConsolidationNotAllowedError,
    MeetingStateError,
    MotionStateError,
    VoterNotEligibleError,
    WorkflowIssuesError,
)
from assembly_engine.domain.errors.structural import (
    AlreadyInStatusError,
    ArchivedImmutableError,
    InvalidLaunchStatusError,
    InvalidTransitionError,
    StructuralTransitionError,
)

__all__: list[str] = [
    "AlreadyInStatusError",
    "AlreadyVotedError",
    "ArchivedImmutableError",
    "ConsolidationNotAllowedError",
    "ForceRequiresAdminError",
    "InvalidLaunchStatusError",
    "InvalidManualTallyError",
    "InvalidTransitionError",
    "MeetingNotFoundError",
    "MeetingStateError",
    "MemberNotFoundError",
    "MotionNotFoundError",
    "MotionStateError",
    "OperationFailedError",
    "OperationForbiddenError",
    "ProxyCeilingError",
    "ProxyChainError",
    "ProxyCycleError",
    "ProxyError",
    "ProxyMemberMismatchError",
    "ProxyNotFoundError",
    "ResourceNotFoundError",
    "SelfDelegationError",
    "StructuralTransitionError",
    "TransitionForbiddenError",
    "UnknownRoleError",
    "VoterNotEligibleError",
    "WorkflowIssuesError",
]
