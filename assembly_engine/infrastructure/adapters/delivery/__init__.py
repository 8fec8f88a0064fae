"""Outbound delivery: audit retry wrapper and readiness webhook."""

from assembly_engine.infrastructure.adapters.delivery.retrying_audit_sink import (
    RetryingAuditSink,
)
from assembly_engine.infrastructure.adapters.delivery.webhook_notification_sink import (
    READINESS_CHANGED_EVENT,
    WebhookNotificationSink,
)

__all__ = ["READINESS_CHANGED_EVENT", "RetryingAuditSink", "WebhookNotificationSink"]
