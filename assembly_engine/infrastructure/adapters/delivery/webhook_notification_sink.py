"""Readiness notifications delivered to a webhook with httpx.

Only changes are posted: the first report for a meeting sets a baseline,
later ones are compared with it (see ``diff_readiness``). Delivery is
retried with exponential backoff and failures are logged, never raised.
The baseline only moves once a change is delivered, so an undelivered
crossing is posted again on the next report. Without a configured URL the
change is only logged.

Baselines are dropped once a meeting is archived, and at most
``max_tracked_meetings`` are kept, least recently reported first out.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from uuid import UUID

import httpx
from structlog import get_logger

from assembly_engine.application.ports.notification_sink import NotificationSinkProtocol
from assembly_engine.domain.models.workflow import ReadinessChange, ReadinessReport
from assembly_engine.domain.services.readiness_diff import diff_readiness

logger = get_logger()

READINESS_CHANGED_EVENT = "meeting.readiness.changed"
DEFAULT_MAX_TRACKED_MEETINGS = 1024


class WebhookNotificationSink(NotificationSinkProtocol):
    def __init__(
        self,
        webhook_url: str | None,
        timeout_seconds: float = 5.0,
        max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        max_tracked_meetings: int = DEFAULT_MAX_TRACKED_MEETINGS,
    ) -> None:
        """
        Args:
            webhook_url: Target URL, None to only log changes.
            timeout_seconds: Per-request timeout.
            max_retries: Delivery attempts per change.
            backoff_base_seconds: Sleep before retry ``n`` is ``base * 2 ** n``.
            transport: Optional httpx transport, used by tests.
            max_tracked_meetings: Baselines kept before the oldest is dropped.
        """
        self._webhook_url = webhook_url
        self._timeout = timeout_seconds
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base_seconds
        self._transport = transport
        self._max_tracked = max(1, max_tracked_meetings)
        self._last: OrderedDict[UUID, ReadinessReport] = OrderedDict()

    async def emit_readiness_transitions(
        self,
        meeting_id: UUID,
        readiness: ReadinessReport,
    ) -> None:
        change = diff_readiness(meeting_id, self._last.get(meeting_id), readiness)
        if change is not None:
            if self._webhook_url:
                if not await self._deliver(change):
                    return
            else:
                logger.bind(meeting_id=str(meeting_id), ready=change.ready).info(
                    "readiness_changed",
                    added=change.added_codes,
                    removed=change.removed_codes,
                )
        self._remember(meeting_id, readiness)

    def _remember(self, meeting_id: UUID, readiness: ReadinessReport) -> None:
        if readiness.from_status.is_terminal():
            self._last.pop(meeting_id, None)
            return
        self._last[meeting_id] = readiness
        self._last.move_to_end(meeting_id)
        while len(self._last) > self._max_tracked:
            self._last.popitem(last=False)

    async def _deliver(self, change: ReadinessChange) -> bool:
        body = {"event_type": READINESS_CHANGED_EVENT, **change.to_dict()}
        log = logger.bind(meeting_id=str(change.meeting_id), webhook_url=self._webhook_url)

        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(self._max_retries):
                try:
                    response = await client.post(
                        self._webhook_url or "",
                        json=body,
                        timeout=self._timeout,
                    )
                    if response.status_code < 300:
                        log.info(
                            "readiness_webhook_delivered",
                            status_code=response.status_code,
                            attempt=attempt + 1,
                        )
                        return True
                    log.warning(
                        "readiness_webhook_failed",
                        status_code=response.status_code,
                        attempt=attempt + 1,
                    )
                except httpx.InvalidURL as e:
                    log.error("readiness_webhook_invalid_url", error=str(e))
                    return False
                except httpx.HTTPError as e:
                    log.warning("readiness_webhook_error", error=str(e), attempt=attempt + 1)

                if attempt < self._max_retries - 1 and self._backoff_base > 0:
                    await asyncio.sleep(self._backoff_base * 2**attempt)

        log.error("readiness_webhook_exhausted", max_retries=self._max_retries)
        return False
