"""In-memory implementations of the application ports."""

from assembly_engine.infrastructure.stubs.audit_sink_stub import AuditSinkStub
from assembly_engine.infrastructure.stubs.governance_store_stub import (
    InMemoryGovernanceStore,
    InMemoryGovernanceTransaction,
)
from assembly_engine.infrastructure.stubs.notification_sink_stub import NotificationSinkStub
from assembly_engine.infrastructure.stubs.policy_store_stub import PolicyStoreStub

__all__ = [
    "AuditSinkStub",
    "InMemoryGovernanceStore",
    "InMemoryGovernanceTransaction",
    "NotificationSinkStub",
    "PolicyStoreStub",
]
