"""Audit sink stub recording every delivered record.

Set ``fail_times`` to make the next N deliveries raise, which lets
tests exercise the retrying wrapper.
"""

from __future__ import annotations

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol


class AuditSinkStub(AuditSinkProtocol):
    def __init__(self, fail_times: int = 0) -> None:
        self.records: list[AuditRecord] = []
        self.fail_times = fail_times
        self.attempts = 0

    async def record(self, record: AuditRecord) -> None:
        self.attempts += 1
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("audit store unavailable")
        self.records.append(record)

    def of_type(self, event_type: str) -> list[AuditRecord]:
        return [r for r in self.records if r.event_type == event_type]

    @property
    def event_types(self) -> list[str]:
        return [r.event_type for r in self.records]

    def clear(self) -> None:
        self.records.clear()
        self.fail_times = 0
        self.attempts = 0
