"""Transaction scope shared by all governance services.

Engine errors (GovernanceError) propagate unchanged. Any other failure
inside the transaction is a store failure: the transaction has rolled
back and the caller receives an opaque ``<operation>_failed`` error with
the original exception chained.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

import structlog

from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.domain.errors.persistence import OperationFailedError
from assembly_engine.domain.exceptions import GovernanceError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def unit_of_work(
    repository: GovernanceRepositoryProtocol,
    tenant_id: UUID,
    operation: str,
) -> AsyncIterator[GovernanceTransaction]:
    try:
        async with repository.transaction(tenant_id) as tx:
            yield tx
    except GovernanceError:
        raise
    except Exception as exc:
        logger.error(
            "unit_of_work_failed",
            operation=operation,
            tenant_id=str(tenant_id),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise OperationFailedError(operation) from exc
