"""Unit tests for the import boundary checking script.

Layer rules enforced by scripts/check_imports.py:
- domain/ imports nothing from other layers
- config/ imports from domain/
- application/ imports from domain/ and config/
- infrastructure/ imports from domain/, config/ and application/
- bootstrap/ imports from every layer
"""

import ast
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))

from check_imports import (  # noqa: E402
    ALLOWED_IMPORTS,
    LAYER_HIERARCHY,
    check_file_imports,
    check_import_boundaries,
    get_import_module,
)

PACKAGE_DIR = Path(__file__).parent.parent.parent / "assembly_engine"


class TestLayerHierarchy:
    """Test the layer ordering."""

    def test_domain_is_innermost(self) -> None:
        assert LAYER_HIERARCHY["domain"] == 0

    def test_bootstrap_is_outermost(self) -> None:
        assert LAYER_HIERARCHY["bootstrap"] == max(LAYER_HIERARCHY.values())

    def test_order(self) -> None:
        ordered = sorted(LAYER_HIERARCHY, key=LAYER_HIERARCHY.__getitem__)
        assert ordered == ["domain", "config", "application", "infrastructure", "bootstrap"]


class TestAllowedImports:
    """Test which layers may import which."""

    def test_domain_imports_nothing(self) -> None:
        assert ALLOWED_IMPORTS["domain"] == set()

    def test_config_imports_domain(self) -> None:
        assert ALLOWED_IMPORTS["config"] == {"domain"}

    def test_application_imports_domain_and_config(self) -> None:
        assert ALLOWED_IMPORTS["application"] == {"domain", "config"}

    def test_infrastructure_never_imports_bootstrap(self) -> None:
        assert "bootstrap" not in ALLOWED_IMPORTS["infrastructure"]


class TestGetImportModule:
    """Test get_import_module."""

    def test_import_from_statement(self) -> None:
        node = ast.parse("from assembly_engine.domain.models import Meeting").body[0]
        assert isinstance(node, ast.ImportFrom)
        assert get_import_module(node) == "assembly_engine.domain.models"

    def test_import_statement(self) -> None:
        node = ast.parse("import assembly_engine.domain.models").body[0]
        assert isinstance(node, ast.Import)
        assert get_import_module(node) == "assembly_engine.domain.models"

    def test_none_for_relative_import(self) -> None:
        node = ast.parse("from . import something").body[0]
        assert isinstance(node, ast.ImportFrom)
        assert get_import_module(node) is None


class TestCheckFileImports:
    """Test check_file_imports."""

    @pytest.fixture
    def package_dir(self) -> Iterator[Path]:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "assembly_engine"
            root.mkdir()
            for layer in LAYER_HIERARCHY:
                (root / layer).mkdir()
                (root / layer / "__init__.py").write_text("")
            yield root

    def test_stdlib_and_third_party_allowed(self, package_dir: Path) -> None:
        module = package_dir / "domain" / "rules.py"
        module.write_text("import os\nfrom uuid import UUID\nimport structlog\n")

        assert check_file_imports(module, package_dir) == []

    def test_application_to_config_allowed(self, package_dir: Path) -> None:
        module = package_dir / "application" / "service.py"
        module.write_text("from assembly_engine.config.governance_config import GovernanceConfig")

        assert check_file_imports(module, package_dir) == []

    def test_infrastructure_to_application_allowed(self, package_dir: Path) -> None:
        module = package_dir / "infrastructure" / "adapter.py"
        module.write_text("from assembly_engine.application.ports import AuditSinkProtocol")

        assert check_file_imports(module, package_dir) == []

    def test_same_layer_allowed(self, package_dir: Path) -> None:
        module = package_dir / "domain" / "rules.py"
        module.write_text("from assembly_engine.domain.models import Meeting")

        assert check_file_imports(module, package_dir) == []

    def test_domain_importing_config(self, package_dir: Path) -> None:
        module = package_dir / "domain" / "rules.py"
        module.write_text("from assembly_engine.config import GovernanceConfig")

        violations = check_file_imports(module, package_dir)

        assert len(violations) == 1
        assert violations[0][0] == str(module)
        assert violations[0][1] == 1
        assert "domain layer cannot import from config" in violations[0][2]

    def test_application_importing_infrastructure(self, package_dir: Path) -> None:
        module = package_dir / "application" / "service.py"
        module.write_text("\nfrom assembly_engine.infrastructure.stubs import AuditSinkStub")

        violations = check_file_imports(module, package_dir)

        assert len(violations) == 1
        assert violations[0][1] == 2
        assert "application layer cannot import from infrastructure" in violations[0][2]

    def test_infrastructure_importing_bootstrap(self, package_dir: Path) -> None:
        module = package_dir / "infrastructure" / "adapter.py"
        module.write_text("import assembly_engine.bootstrap.governance")

        violations = check_file_imports(module, package_dir)

        assert len(violations) == 1
        assert "infrastructure layer cannot import from bootstrap" in violations[0][2]

    def test_multiple_violations(self, package_dir: Path) -> None:
        module = package_dir / "domain" / "rules.py"
        module.write_text(
            "from assembly_engine.application.ports import A\n"
            "from assembly_engine.infrastructure.stubs import B\n"
            "from assembly_engine.bootstrap import C\n"
        )

        assert len(check_file_imports(module, package_dir)) == 3

    def test_root_module_has_no_layer(self, package_dir: Path) -> None:
        module = package_dir / "__main__.py"
        module.write_text("from assembly_engine.bootstrap import build_governance_services")

        assert check_file_imports(module, package_dir) == []


class TestCheckImportBoundaries:
    """Test check_import_boundaries over the package."""

    def test_nonexistent_directory(self) -> None:
        assert check_import_boundaries(Path("/nonexistent/assembly_engine")) == []

    def test_scans_nested_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "assembly_engine"
            nested = root / "domain" / "services"
            nested.mkdir(parents=True)
            (nested / "rules.py").write_text("from assembly_engine.infrastructure import x")

            violations = check_import_boundaries(root)

        assert len(violations) == 1
        assert "rules.py" in violations[0][0]

    def test_package_is_clean(self) -> None:
        assert check_import_boundaries(PACKAGE_DIR) == []
