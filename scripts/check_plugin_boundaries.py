"""Check core layering and example plugin isolation for the skinmanager package."""

from __future__ import annotations

from pathlib import Path

from skinmanager.plugins.architecture_guard import (
    collect_layer_violations,
    collect_plugin_isolation_violations,
)


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    violations = collect_layer_violations(package_root=repo_root / "skinmanager")
    examples = repo_root / "examples" / "native-plugins"
    if examples.is_dir():
        for plugin_root in sorted(p for p in examples.iterdir() if p.is_dir()):
            violations.extend(
                f"{plugin_root.name}/{row}" for row in collect_plugin_isolation_violations(plugin_root)
            )
    if not violations:
        print("plugin-boundary-check: ok")
        return 0
    print("plugin-boundary-check: violations detected")
    for row in violations:
        print(f"- {row}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
