"""Base service logging mixin.

Gives every governance service the same structured logging shape:

    class MyService(LoggingMixin):
        def __init__(self, repository: GovernanceRepositoryProtocol) -> None:
            self._repository = repository
            self._init_logger()

        async def do_something(self, ctx: RequestContext) -> None:
            log = self._log_operation("do_something", meeting_id=str(meeting_id))
            log.info("operation_started")

The correlation id is added to every entry by the structlog processor
configured in ``infrastructure.observability``.
"""

import structlog


class LoggingMixin:
    """Mixin providing a service-bound structlog logger.

    Attributes:
        _log: Logger bound with ``service`` and ``component``.
    """

    _log: structlog.stdlib.BoundLogger

    def _init_logger(self, component: str = "governance") -> None:
        self._log = structlog.get_logger(__name__).bind(
            service=self.__class__.__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.stdlib.BoundLogger:
        """Return a logger bound with the operation name and extra context."""
        return self._log.bind(operation=operation, **context)
