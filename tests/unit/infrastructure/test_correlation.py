"""Unit tests for correlation ids and the request logging scope."""

import asyncio
import re

import pytest
import structlog

from assembly_engine.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    request_scope,
    set_correlation_id,
)
from assembly_engine.infrastructure.observability.logging import configure_structlog
from tests.helpers.governance_factory import TENANT_ID, operator_ctx


@pytest.fixture(autouse=True)
def _clean_correlation() -> None:
    set_correlation_id("")
    structlog.contextvars.clear_contextvars()


class TestGenerateCorrelationId:
    """Test generate_correlation_id."""

    def test_uuid4_format(self) -> None:
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
        )
        assert uuid_pattern.match(generate_correlation_id()) is not None

    def test_unique(self) -> None:
        assert len({generate_correlation_id() for _ in range(50)}) == 50


class TestCorrelationIdContext:
    """Test the correlation ID context variable."""

    def test_empty_by_default(self) -> None:
        assert get_correlation_id() == ""

    def test_set_and_get(self) -> None:
        set_correlation_id("cid-123")
        assert get_correlation_id() == "cid-123"

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self) -> None:
        results: dict[str, str] = {}

        async def task(name: str, cid: str) -> None:
            set_correlation_id(cid)
            await asyncio.sleep(0.01)
            results[name] = get_correlation_id()

        await asyncio.gather(task("a", "cid-a"), task("b", "cid-b"))

        assert results == {"a": "cid-a", "b": "cid-b"}


class TestRequestScope:
    """Test the request logging scope."""

    def test_binds_tenant_and_caller(self) -> None:
        with request_scope(operator_ctx(), correlation_id="req-1") as cid:
            assert cid == "req-1"
            assert get_correlation_id() == "req-1"
            bound = structlog.contextvars.get_contextvars()
            assert bound["tenant_id"] == str(TENANT_ID)
            assert bound["actor"] == "operator"
            assert bound["system_role"] == "operator"

        assert get_correlation_id() == ""
        assert "tenant_id" not in structlog.contextvars.get_contextvars()

    def test_generates_id_when_missing(self) -> None:
        with request_scope(operator_ctx()) as cid:
            assert cid
            assert get_correlation_id() == cid

    def test_restores_outer_id(self) -> None:
        set_correlation_id("outer")
        with request_scope(operator_ctx(), correlation_id="inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"

    def test_resets_on_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with request_scope(operator_ctx(), correlation_id="boom"):
                raise RuntimeError("handler failed")
        assert get_correlation_id() == ""


class TestCorrelationIdProcessor:
    """Test the structlog correlation processor."""

    def test_adds_correlation_id(self) -> None:
        set_correlation_id("proc-1")
        event_dict: dict[str, object] = {"event": "ballot_cast", "choice": "for"}

        result = correlation_id_processor(None, "info", event_dict)

        assert result == {"event": "ballot_cast", "choice": "for", "correlation_id": "proc-1"}

    def test_skips_empty_id(self) -> None:
        result = correlation_id_processor(None, "info", {"event": "ballot_cast"})
        assert "correlation_id" not in result


class TestConfigureStructlog:
    """Test configure_structlog."""

    def test_production_renders_json(self) -> None:
        try:
            configure_structlog(environment="production")
            processors = structlog.get_config()["processors"]
            assert isinstance(processors[-1], structlog.processors.JSONRenderer)
            assert correlation_id_processor in processors
        finally:
            structlog.reset_defaults()

    def test_development_renders_console(self) -> None:
        try:
            configure_structlog(environment="development")
            processors = structlog.get_config()["processors"]
            assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        finally:
            structlog.reset_defaults()
