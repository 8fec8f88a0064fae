"""Bootstrap wiring for the governance services.

``build_governance_services`` assembles every service over a given set
of ports. ``get_governance_services`` picks the ports from the
environment: PostgreSQL when DATABASE_URL is set, in-memory stubs
otherwise. A ``.env`` file is loaded and structlog configured first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from assembly_engine.application.ports.audit_sink import AuditSinkProtocol
from assembly_engine.application.ports.governance_metrics import GovernanceMetricsProtocol
from assembly_engine.application.ports.governance_repository import GovernanceRepositoryProtocol
from assembly_engine.application.ports.notification_sink import NotificationSinkProtocol
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services import (
    AttendanceService,
    BallotService,
    ConsolidationService,
    MeetingWorkflowService,
    MotionService,
    ProxyService,
    QuorumService,
    SystemTimeAuthority,
    TallyService,
)
from assembly_engine.bootstrap.database import get_session_factory
from assembly_engine.bootstrap.logging import configure_structlog
from assembly_engine.config.governance_config import GovernanceConfig
from assembly_engine.infrastructure.adapters.delivery import (
    RetryingAuditSink,
    WebhookNotificationSink,
)
from assembly_engine.infrastructure.adapters.persistence import (
    PostgresAuditSink,
    PostgresGovernanceRepository,
    PostgresPolicyStore,
)
from assembly_engine.infrastructure.monitoring import get_governance_metrics_collector
from assembly_engine.infrastructure.stubs import (
    AuditSinkStub,
    InMemoryGovernanceStore,
    PolicyStoreStub,
)


@dataclass(frozen=True)
class GovernanceServices:
    workflow: MeetingWorkflowService
    quorum: QuorumService
    tally: TallyService
    consolidation: ConsolidationService
    motions: MotionService
    ballots: BallotService
    proxies: ProxyService
    attendance: AttendanceService


def build_governance_services(
    repository: GovernanceRepositoryProtocol,
    policy_store: PolicyStoreProtocol,
    audit_sink: AuditSinkProtocol,
    notification_sink: NotificationSinkProtocol,
    config: GovernanceConfig,
    time_authority: TimeAuthorityProtocol | None = None,
    metrics: GovernanceMetricsProtocol | None = None,
) -> GovernanceServices:
    clock = time_authority or SystemTimeAuthority()
    return GovernanceServices(
        workflow=MeetingWorkflowService(
            repository, policy_store, audit_sink, notification_sink, clock, config, metrics
        ),
        quorum=QuorumService(repository, policy_store, config),
        tally=TallyService(repository, policy_store, config),
        consolidation=ConsolidationService(
            repository, policy_store, audit_sink, clock, config, metrics
        ),
        motions=MotionService(repository, policy_store, audit_sink, clock),
        ballots=BallotService(repository, audit_sink, clock, metrics, config),
        proxies=ProxyService(repository, audit_sink, clock, config),
        attendance=AttendanceService(repository, audit_sink, clock),
    )


def _notification_sink(config: GovernanceConfig) -> WebhookNotificationSink:
    return WebhookNotificationSink(
        config.notification_webhook_url,
        timeout_seconds=config.notification_timeout_seconds,
        max_retries=config.notification_max_retries,
    )


def build_postgres_services(config: GovernanceConfig) -> GovernanceServices:
    session_factory = get_session_factory()
    return build_governance_services(
        repository=PostgresGovernanceRepository(session_factory),
        policy_store=PostgresPolicyStore(session_factory),
        audit_sink=RetryingAuditSink(
            PostgresAuditSink(session_factory),
            max_retries=config.audit_max_retries,
            backoff_seconds=config.audit_backoff_seconds,
        ),
        notification_sink=_notification_sink(config),
        config=config,
        metrics=get_governance_metrics_collector(),
    )


def build_in_memory_services(config: GovernanceConfig) -> GovernanceServices:
    return build_governance_services(
        repository=InMemoryGovernanceStore(),
        policy_store=PolicyStoreStub(),
        audit_sink=RetryingAuditSink(
            AuditSinkStub(),
            max_retries=config.audit_max_retries,
            backoff_seconds=config.audit_backoff_seconds,
        ),
        notification_sink=_notification_sink(config),
        config=config,
        metrics=get_governance_metrics_collector(),
    )


_services: GovernanceServices | None = None


def get_governance_services() -> GovernanceServices:
    """Process-wide services, built on first use."""
    global _services
    if _services is None:
        load_dotenv()
        configure_structlog()
        config = GovernanceConfig.from_environment()
        if os.environ.get("DATABASE_URL"):
            _services = build_postgres_services(config)
        else:
            _services = build_in_memory_services(config)
    return _services


def reset_governance_services() -> None:
    """Forget the cached services (tests)."""
    global _services
    _services = None
