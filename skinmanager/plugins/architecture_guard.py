"""Static import checks for plugin isolation and core layering."""

from __future__ import annotations

import ast
from pathlib import Path

# The only host modules a third-party plugin may import.
PLUGIN_ALLOWED_PREFIXES = (
    "skinmanager.messaging",
    "skinmanager.plugins.context",
    "skinmanager.plugins.events",
)

# Leaf layers that must not depend on anything composed above them.
_CORE_LAYERS = ("messaging/", "dispatch/")
_CORE_FORBIDDEN_PREFIXES = (
    "skinmanager.plugins",
    "skinmanager.facades",
    "skinmanager.host",
    "skinmanager.cli",
    "skinmanager.config",
)


def _imported_modules(tree: ast.AST) -> list[tuple[int, str, bool]]:
    """(lineno, module, is_relative) for every import in the tree."""
    rows: list[tuple[int, str, bool]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                rows.append((node.lineno, str(alias.name or ""), False))
        elif isinstance(node, ast.ImportFrom):
            rows.append((node.lineno, str(node.module or ""), node.level > 0))
    return rows


def _parse(file_path: Path, rel_path: str, violations: list[str]) -> ast.AST | None:
    try:
        return ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    except (OSError, SyntaxError, ValueError) as exc:
        violations.append(f"{rel_path}:0 parse-error: {exc}")
        return None


def collect_plugin_isolation_violations(plugin_root: Path) -> list[str]:
    """Return imports in a plugin's sources that reach into host internals."""
    root = plugin_root.resolve()
    violations: list[str] = []
    for file_path in sorted(root.rglob("*.py")):
        rel_path = file_path.resolve().relative_to(root).as_posix()
        tree = _parse(file_path, rel_path, violations)
        if tree is None:
            continue
        for lineno, module, _ in _imported_modules(tree):
            if module == "skinmanager" or module.startswith("skinmanager."):
                if not module.startswith(PLUGIN_ALLOWED_PREFIXES):
                    violations.append(f"{rel_path}:{lineno} forbidden-host-import: {module}")
    return violations


def collect_layer_violations(package_root: Path) -> list[str]:
    """Return violations where messaging/dispatch import composed layers."""
    root = package_root.resolve()
    violations: list[str] = []
    for file_path in sorted(root.rglob("*.py")):
        rel_path = file_path.resolve().relative_to(root).as_posix()
        if not rel_path.startswith(_CORE_LAYERS):
            continue
        tree = _parse(file_path, rel_path, violations)
        if tree is None:
            continue
        for lineno, module, relative in _imported_modules(tree):
            if module.startswith(_CORE_FORBIDDEN_PREFIXES):
                violations.append(f"{rel_path}:{lineno} forbidden-import-from: {module}")
            elif relative and module.split(".")[0] in ("plugins", "facades", "host", "cli", "config"):
                violations.append(f"{rel_path}:{lineno} forbidden-relative-import-from: {module}")
    return violations
