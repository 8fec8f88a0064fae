"""Time authority port.

Services never call ``datetime.now()`` directly. Every timestamp written
by the engine (frozen_at, cast_at, consolidated_at...) comes from an
injected TimeAuthorityProtocol, so tests can pin time with a fake.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract source of timestamps.

    For production use SystemTimeAuthority from
    ``assembly_engine.application.services.time_authority_service``.
    For tests use FakeTimeAuthority from ``tests/helpers``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time, timezone-aware (UTC)."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic clock value in seconds, for durations."""
        ...
