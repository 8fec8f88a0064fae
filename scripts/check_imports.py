#!/usr/bin/env python3
"""Check the layer boundaries of the assembly_engine package.

Layering rules:
- domain/: Pure governance rules, imports nothing from other layers
- config/: Settings, may import domain/ value types
- application/: Ports and use cases, may import domain/ and config/
- infrastructure/: Adapters, may import domain/, config/ and application/
- bootstrap/: Composition root, may import every layer

Usage:
    python scripts/check_imports.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import ast
import sys
from pathlib import Path

DEFAULT_PACKAGE = "assembly_engine"

# Lower number = more inner layer
LAYER_HIERARCHY: dict[str, int] = {
    "domain": 0,
    "config": 1,
    "application": 2,
    "infrastructure": 3,
    "bootstrap": 4,
}

ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "config": {"domain"},
    "application": {"domain", "config"},
    "infrastructure": {"domain", "config", "application"},
    "bootstrap": {"domain", "config", "application", "infrastructure"},
}


def get_import_module(node: ast.Import | ast.ImportFrom) -> str | None:
    """Module named by an import statement, None for relative imports."""
    if isinstance(node, ast.ImportFrom):
        return node.module
    if isinstance(node, ast.Import) and node.names:
        return node.names[0].name
    return None


def _get_file_layer(py_file: Path, package_dir: Path) -> str | None:
    try:
        relative = py_file.relative_to(package_dir)
    except ValueError:
        return None
    if len(relative.parts) < 2:
        return None
    layer = relative.parts[0]
    return layer if layer in LAYER_HIERARCHY else None


def _parse_file(py_file: Path) -> ast.Module | None:
    try:
        return ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return None


def _check_import_violation(
    module: str, package: str, file_layer: str, allowed_layers: set[str]
) -> str | None:
    """Violation message for ``module`` imported from ``file_layer``, or None.

    Args:
        module: Imported module, e.g. ``assembly_engine.domain.models``.
        package: Top-level package name being checked.
        file_layer: Layer of the importing file.
        allowed_layers: Layers the importing file may depend on.
    """
    parts = module.split(".")
    if len(parts) < 2 or parts[0] != package:
        return None

    target_layer = parts[1]
    if target_layer not in LAYER_HIERARCHY or target_layer == file_layer:
        return None
    if target_layer not in allowed_layers:
        return f"{file_layer} layer cannot import from {target_layer}"
    return None


def check_file_imports(py_file: Path, package_dir: Path) -> list[tuple[str, int, str]]:
    """Violations in one file as (path, line, message) tuples."""
    file_layer = _get_file_layer(py_file, package_dir)
    if file_layer is None:
        return []

    tree = _parse_file(py_file)
    if tree is None:
        return []

    allowed_layers = ALLOWED_IMPORTS.get(file_layer, set())
    violations: list[tuple[str, int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            module = get_import_module(node)
            if not module:
                continue
            error = _check_import_violation(module, package_dir.name, file_layer, allowed_layers)
            if error:
                violations.append((str(py_file), node.lineno, error))
    return violations


def check_import_boundaries(package_dir: Path) -> list[tuple[str, int, str]]:
    """Violations across every ``.py`` file below ``package_dir``."""
    if not package_dir.exists():
        print(f"Error: Package directory '{package_dir}' does not exist", file=sys.stderr)
        return []

    violations: list[tuple[str, int, str]] = []
    for py_file in sorted(package_dir.rglob("*.py")):
        violations.extend(check_file_imports(py_file, package_dir))
    return violations


def format_violations(violations: list[tuple[str, int, str]]) -> str:
    if not violations:
        return ""

    lines = ["Import boundary violations found:", ""]
    for file_path, line_no, message in sorted(violations):
        lines.append(f"  {file_path}:{line_no}: {message}")
    lines.append("")
    lines.append(f"Total: {len(violations)} violation(s)")
    return "\n".join(lines)


def main() -> int:
    if len(sys.argv) > 1:
        package_dir = Path(sys.argv[1])
    else:
        package_dir = Path(__file__).parent.parent / DEFAULT_PACKAGE

    violations = check_import_boundaries(package_dir)
    if violations:
        print(format_violations(violations))
        return 1
    print("No import boundary violations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
