"""Application ports (interfaces implemented by infrastructure adapters)."""

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_metrics import GovernanceMetricsProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.notification_sink import NotificationSinkProtocol
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "AuditRecord",
    "AuditSinkProtocol",
    "GovernanceMetricsProtocol",
    "GovernanceRepositoryProtocol",
    "GovernanceTransaction",
    "NotificationSinkProtocol",
    "PolicyStoreProtocol",
    "TimeAuthorityProtocol",
]
