"""PostgreSQL adapters (SQLAlchemy async + asyncpg)."""

from assembly_engine.infrastructure.adapters.persistence.postgres_audit_sink import (
    PostgresAuditSink,
)
from assembly_engine.infrastructure.adapters.persistence.postgres_governance_repository import (
    PostgresGovernanceRepository,
    PostgresGovernanceTransaction,
)
from assembly_engine.infrastructure.adapters.persistence.postgres_policy_store import (
    PostgresPolicyStore,
)
from assembly_engine.infrastructure.adapters.persistence.schema import (
    SCHEMA_DDL,
    create_governance_schema,
)

__all__ = [
    "PostgresAuditSink",
    "PostgresGovernanceRepository",
    "PostgresGovernanceTransaction",
    "PostgresPolicyStore",
    "SCHEMA_DDL",
    "create_governance_schema",
]
