"""Governance engine configuration.

Values come from environment variables with validated defaults. The
bootstrap layer loads a ``.env`` file (python-dotenv) before calling
``GovernanceConfig.from_environment()``.

Environment Variables:
- PROXY_MAX_PER_RECEIVER: Incoming proxy cap per receiver (default: 99, min: 1, max: 999)
- ELIGIBILITY_BASIS: active_members | recorded_attendance |
  recorded_attendance_or_active (default: active_members)
- AUDIT_MAX_RETRIES: Delivery attempts after the first failure (default: 3, min: 0, max: 10)
- AUDIT_BACKOFF_SECONDS: Base backoff between audit retries (default: 0.5)
- NOTIFICATION_WEBHOOK_URL: Readiness webhook, notifications are only logged when unset
- NOTIFICATION_TIMEOUT_SECONDS: Webhook request timeout (default: 5.0)
- NOTIFICATION_MAX_RETRIES: Webhook delivery retries (default: 3, min: 0, max: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from assembly_engine.domain.models.eligibility import EligibilityBasis


def _get_int_env(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


DEFAULT_PROXY_MAX_PER_RECEIVER = 99
MIN_PROXY_MAX_PER_RECEIVER = 1
MAX_PROXY_MAX_PER_RECEIVER = 999

DEFAULT_MAX_RETRIES = 3
MAX_RETRIES_CEILING = 10

DEFAULT_AUDIT_BACKOFF_SECONDS = 0.5
DEFAULT_NOTIFICATION_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class GovernanceConfig:
    """Tunables for the governance engine.

    Attributes:
        proxy_max_per_receiver: Incoming proxies a receiver may hold.
        eligibility_basis: How the eligible voting pool is built.
        audit_max_retries: Audit delivery retries before the record is dropped.
        audit_backoff_seconds: Base delay, doubled on each retry.
        notification_webhook_url: Readiness webhook endpoint, or None.
        notification_timeout_seconds: HTTP timeout for the webhook.
        notification_max_retries: Webhook retries before giving up.
    """

    proxy_max_per_receiver: int = DEFAULT_PROXY_MAX_PER_RECEIVER
    eligibility_basis: EligibilityBasis = EligibilityBasis.ACTIVE_MEMBERS
    audit_max_retries: int = DEFAULT_MAX_RETRIES
    audit_backoff_seconds: float = DEFAULT_AUDIT_BACKOFF_SECONDS
    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
    notification_max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not (
            MIN_PROXY_MAX_PER_RECEIVER
            <= self.proxy_max_per_receiver
            <= MAX_PROXY_MAX_PER_RECEIVER
        ):
            raise ValueError(
                f"proxy_max_per_receiver must be between {MIN_PROXY_MAX_PER_RECEIVER} "
                f"and {MAX_PROXY_MAX_PER_RECEIVER}, got {self.proxy_max_per_receiver}"
            )
        for name in ("audit_max_retries", "notification_max_retries"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_RETRIES_CEILING:
                raise ValueError(
                    f"{name} must be between 0 and {MAX_RETRIES_CEILING}, got {value}"
                )
        if self.audit_backoff_seconds < 0:
            raise ValueError(
                f"audit_backoff_seconds must be >= 0, got {self.audit_backoff_seconds}"
            )
        if self.notification_timeout_seconds <= 0:
            raise ValueError(
                "notification_timeout_seconds must be > 0, "
                f"got {self.notification_timeout_seconds}"
            )

    @classmethod
    def from_environment(cls) -> GovernanceConfig:
        """Create config from environment variables, clamping out-of-range values.

        Raises:
            ValueError: If ELIGIBILITY_BASIS names an unknown basis.
        """
        proxy_max = _get_int_env("PROXY_MAX_PER_RECEIVER", DEFAULT_PROXY_MAX_PER_RECEIVER)
        proxy_max = max(MIN_PROXY_MAX_PER_RECEIVER, min(proxy_max, MAX_PROXY_MAX_PER_RECEIVER))

        audit_retries = _get_int_env("AUDIT_MAX_RETRIES", DEFAULT_MAX_RETRIES)
        audit_retries = max(0, min(audit_retries, MAX_RETRIES_CEILING))

        notify_retries = _get_int_env("NOTIFICATION_MAX_RETRIES", DEFAULT_MAX_RETRIES)
        notify_retries = max(0, min(notify_retries, MAX_RETRIES_CEILING))

        basis = os.environ.get("ELIGIBILITY_BASIS", EligibilityBasis.ACTIVE_MEMBERS.value)

        timeout = _get_float_env(
            "NOTIFICATION_TIMEOUT_SECONDS", DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
        )
        if timeout <= 0:
            timeout = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS

        return cls(
            proxy_max_per_receiver=proxy_max,
            eligibility_basis=EligibilityBasis(basis.strip().lower()),
            audit_max_retries=audit_retries,
            audit_backoff_seconds=max(
                0.0, _get_float_env("AUDIT_BACKOFF_SECONDS", DEFAULT_AUDIT_BACKOFF_SECONDS)
            ),
            notification_webhook_url=os.environ.get("NOTIFICATION_WEBHOOK_URL") or None,
            notification_timeout_seconds=timeout,
            notification_max_retries=notify_retries,
        )


# Default production config
DEFAULT_GOVERNANCE_CONFIG = GovernanceConfig()

# Testing config: a small proxy cap and no retry delay
TEST_GOVERNANCE_CONFIG = GovernanceConfig(
    proxy_max_per_receiver=2,
    audit_max_retries=2,
    audit_backoff_seconds=0.0,
    notification_max_retries=1,
)
