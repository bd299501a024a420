"""Plugins command group: list registered plugins and diagnose discovery."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import typer
from rich.console import Console
from rich.table import Table

from skinmanager.config.schema import Config
from skinmanager.host import SkinManagerHost
from skinmanager.plugins.loader import PluginLoader


def _format_diagnostics_table(console: Console, diagnostics: list[dict[str, Any]], title: str) -> None:
    if not diagnostics:
        return
    diag_table = Table(title=title)
    diag_table.add_column("Level", style="cyan")
    diag_table.add_column("Code")
    diag_table.add_column("Plugin")
    diag_table.add_column("Message")
    for diag in diagnostics:
        diag_table.add_row(
            str(diag.get("level", "")),
            str(diag.get("code", "")),
            str(diag.get("pluginId", "-")),
            str(diag.get("message", "")),
        )
    console.print(diag_table)


def _format_doctor_table(console: Console, report: dict[str, Any]) -> None:
    checks = report.get("checks", {}) if isinstance(report, dict) else {}
    table = Table(title="Plugin Discovery")
    table.add_column("Check", style="cyan")
    table.add_column("Value")
    rows = [
        ("data dir exists", str(bool(checks.get("dataDirExists")))),
        ("manifests discovered", str(checks.get("discoveredCount", 0))),
        ("plugins loaded", str(checks.get("loadedCount", 0))),
        ("plugins errored", str(checks.get("errorCount", 0))),
    ]
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)
    plugins = report.get("plugins", [])
    if isinstance(plugins, list) and plugins:
        plugin_table = Table(title="Discovered Plugins")
        plugin_table.add_column("ID", style="cyan")
        plugin_table.add_column("State")
        plugin_table.add_column("Source")
        plugin_table.add_column("Error")
        for row in plugins:
            plugin_table.add_row(
                str(row.get("id", "")),
                str(row.get("state", "")),
                str(row.get("source", "")),
                str(row.get("error") or ""),
            )
        console.print(plugin_table)
    _format_diagnostics_table(console, report.get("diagnostics", []), "Plugin Diagnostics")


async def _collect_records(config: Config) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    host = SkinManagerHost(config)
    await host.start()
    try:
        return [r.to_dict() for r in host.plugin_records()], list(host.diagnostics)
    finally:
        await host.shutdown()


def register_plugins_commands(app: typer.Typer, console: Console, config_loader: Callable[[], Config]) -> None:
    """Register plugins command group."""
    plugins_app = typer.Typer(help="Inspect built-in and discovered plugins")
    app.add_typer(plugins_app, name="plugins")

    @plugins_app.command("list")
    def plugins_list(
        keyword: str = typer.Option("", "--keyword", "-k", help="Filter by id/name/source"),
        as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
    ) -> None:
        """Start plugins, show their lifecycle state, then stop them."""
        rows, diagnostics = asyncio.run(_collect_records(config_loader()))
        needle = keyword.strip().lower()
        if needle:
            rows = [
                r for r in rows
                if needle in " ".join(str(r.get(k) or "") for k in ("id", "name", "source")).lower()
            ]
        if as_json:
            console.print_json(json.dumps({"plugins": rows, "diagnostics": diagnostics}))
            return
        table = Table(title=f"Plugins ({len(rows)})")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Version")
        table.add_column("State")
        table.add_column("Origin")
        table.add_column("Types")
        for row in rows:
            table.add_row(
                str(row.get("id", "")),
                str(row.get("name", "")),
                str(row.get("version") or ""),
                str(row.get("state", "")),
                str(row.get("origin", "")),
                ", ".join(row.get("messageTypes") or []),
            )
        console.print(table)
        _format_diagnostics_table(console, diagnostics, "Plugin Diagnostics")

    @plugins_app.command("doctor")
    def plugins_doctor(
        as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
    ) -> None:
        """Check plugin discovery without initializing anything."""
        config = config_loader()
        report = PluginLoader().doctor(config.data_path, {"plugins": config.model_dump()["plugins"]})
        if as_json:
            console.print_json(json.dumps(report))
        else:
            _format_doctor_table(console, report)
        if report["checks"]["errorCount"]:
            raise typer.Exit(1)
