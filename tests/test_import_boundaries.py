"""
Import boundary guard.

Rules:
- src/crewhours/reconcile/ holds pure algorithms: no sqlmodel, sqlalchemy,
  fastapi, or crewhours persistence/service modules.
- src/crewhours/services/ must not import fastapi.
"""

import ast
from collections.abc import Callable
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = REPO_ROOT / "src" / "crewhours"

BANNED_MODULES = {"sqlmodel", "sqlalchemy", "fastapi"}
BANNED_PREFIXES = (
    "sqlmodel.",
    "sqlalchemy.",
    "fastapi.",
    "crewhours.models",
    "crewhours.db",
    "crewhours.infra",
    "crewhours.services",
    "crewhours.api",
)


def _is_banned_for_reconcile(module_name: str) -> bool:
    if module_name in BANNED_MODULES:
        return True
    return any(module_name.startswith(prefix) for prefix in BANNED_PREFIXES)


def _file_imports_any(path: Path, is_banned: Callable[[str], bool]) -> bool:
    """Parse *path* with AST and return True if any import matches *is_banned*."""
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            if any(is_banned(alias.name) for alias in node.names):
                return True
        elif isinstance(node, ast.ImportFrom):
            if is_banned(node.module or ""):
                return True
    return False


def _violations(root: Path, is_banned: Callable[[str], bool]) -> list[str]:
    return [
        py_file.relative_to(REPO_ROOT).as_posix()
        for py_file in sorted(root.rglob("*.py"))
        if _file_imports_any(py_file, is_banned)
    ]


def test_reconcile_import_boundaries() -> None:
    violations = _violations(PACKAGE_ROOT / "reconcile", _is_banned_for_reconcile)
    assert not violations, (
        "reconcile/ must stay free of persistence and web imports:\n"
        + "\n".join(f"  {v}" for v in violations)
    )


def test_service_import_boundaries() -> None:
    """Service files must not import from fastapi."""
    _is_fastapi = lambda m: m.startswith("fastapi")  # noqa: E731
    violations = _violations(PACKAGE_ROOT / "services", _is_fastapi)
    assert not violations, (
        "Service files must not import fastapi:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
