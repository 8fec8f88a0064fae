#!/usr/bin/env python3
"""Reject direct ``datetime.now()``/``datetime.utcnow()`` calls in the package.

Every timestamp the engine writes comes from an injected
TimeAuthorityProtocol so tests can freeze and advance time. Only
SystemTimeAuthority reads the wall clock.

Usage:
    python scripts/check_no_datetime_now.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""

import re
import sys
from pathlib import Path

DATETIME_NOW_PATTERN = re.compile(r"datetime\s*\.\s*(now|utcnow)\s*\(")

ALLOWED_FILES = {
    Path("application/services/time_authority_service.py"),
}


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """(line_number, line) for each offending, non-comment line."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []

    violations: list[tuple[int, str]] = []
    in_docstring = False
    for line_num, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if stripped.count('"""') % 2 == 1:
            in_docstring = not in_docstring
            continue
        if in_docstring or stripped.startswith("#"):
            continue
        if DATETIME_NOW_PATTERN.search(line):
            violations.append((line_num, stripped))
    return violations


def find_violations(package_dir: Path) -> dict[str, list[tuple[int, str]]]:
    found: dict[str, list[tuple[int, str]]] = {}
    for py_file in sorted(package_dir.rglob("*.py")):
        if py_file.relative_to(package_dir) in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            found[str(py_file)] = violations
    return found


def main() -> int:
    if len(sys.argv) > 1:
        package_dir = Path(sys.argv[1])
    else:
        package_dir = Path(__file__).parent.parent / "assembly_engine"

    if not package_dir.exists():
        print(f"Warning: {package_dir} not found, skipping check")
        return 0

    all_violations = find_violations(package_dir)
    if not all_violations:
        print(f"No datetime.now() calls found in {package_dir}")
        return 0

    print("Direct datetime.now() calls detected:")
    print()
    for file_path, violations in all_violations.items():
        print(f"  {file_path}:")
        for line_num, line_content in violations:
            print(f"    Line {line_num}: {line_content}")
        print()
    print("Inject TimeAuthorityProtocol and call self._time.now() instead.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
