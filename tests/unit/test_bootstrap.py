"""Unit tests for the composition root."""

from collections.abc import Iterator

import pytest
import structlog

from assembly_engine.bootstrap.database import get_database_url
from assembly_engine.bootstrap.governance import (
    GovernanceServices,
    get_governance_services,
    reset_governance_services,
)
from assembly_engine.infrastructure.monitoring import reset_governance_metrics_collector


@pytest.fixture(autouse=True)
def clean_bootstrap(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")
    reset_governance_services()
    reset_governance_metrics_collector()
    yield
    reset_governance_services()
    reset_governance_metrics_collector()
    structlog.reset_defaults()


class TestGetGovernanceServices:
    """Test get_governance_services."""

    def test_in_memory_without_database_url(self) -> None:
        services = get_governance_services()

        assert isinstance(services, GovernanceServices)
        assert get_governance_services() is services

    def test_reset_rebuilds(self) -> None:
        first = get_governance_services()
        reset_governance_services()

        assert get_governance_services() is not first


class TestGetDatabaseUrl:
    """Test get_database_url."""

    def test_missing_url_raises(self) -> None:
        with pytest.raises(ValueError, match="DATABASE_URL"):
            get_database_url()

    @pytest.mark.parametrize(
        "raw",
        [
            "postgresql://u:p@db:5432/assembly",
            "postgres://u:p@db:5432/assembly",
            "postgresql+asyncpg://u:p@db:5432/assembly",
        ],
    )
    def test_driver_is_asyncpg(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("DATABASE_URL", raw)

        assert get_database_url() == "postgresql+asyncpg://u:p@db:5432/assembly"
