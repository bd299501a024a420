"""CLI commands for skinmanager.

Top-level commands (version, types, dispatch, serve) plus the plugins command group.
All commands build a SkinManagerHost from the loaded config, use it, and shut it down.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from skinmanager import __logo__, __version__
from skinmanager.cli.command_groups.plugins_command import register_plugins_commands
from skinmanager.cli.shared.logging_utils import configure_logging
from skinmanager.config.loader import load_config
from skinmanager.config.schema import Config
from skinmanager.host import SkinManagerHost, local_services
from skinmanager.messaging.envelope import MessageRequest, MessageResponse
from skinmanager.messaging.serialization import decode_request_line, encode_response_line
from skinmanager.utils.exceptions import SkinManagerError

app = typer.Typer(
    name="skinmanager",
    help=f"{__logo__} skinmanager - plugin host and message dispatch",
    no_args_is_help=True,
)

console = Console()
_state: dict[str, Any] = {"config_path": None, "verbose": False, "config": None}


def _load_cli_config() -> Config:
    cached = _state.get("config")
    if cached is not None:
        return cached
    try:
        config = load_config(_state.get("config_path"))
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    configure_logging(config, verbose=bool(_state.get("verbose")))
    _state["config"] = config
    return config


def _build_host(config: Config) -> SkinManagerHost:
    return SkinManagerHost(config, services=local_services(config.data_path))


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} skinmanager v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
) -> None:
    """skinmanager - plugin host and message dispatch."""
    _state["config_path"] = Path(config_path).expanduser() if config_path else None
    _state["verbose"] = verbose
    _state["config"] = None


@app.command()
def types() -> None:
    """List every routable message type and its owner."""

    async def _run() -> list[tuple[str, str]]:
        async with _build_host(_load_cli_config()) as host:
            router = host.router
            return [(r.message_type, r.owner) for r in router.registrations()] if router else []

    try:
        rows = asyncio.run(_run())
    except SkinManagerError as exc:
        console.print(f"[red]{exc.code}:[/red] {exc.message}")
        raise typer.Exit(1)
    table = Table(title=f"Message types ({len(rows)})")
    table.add_column("Type", style="cyan")
    table.add_column("Owner")
    for message_type, owner in rows:
        table.add_row(message_type, owner)
    console.print(table)


@app.command()
def dispatch(
    message_type: str = typer.Argument(..., help="Message type, e.g. PLUGINS_GET_ALL"),
    payload: str = typer.Option("", "--payload", "-p", help="JSON payload"),
    request_id: str = typer.Option("", "--id", help="Correlation id (generated when empty)"),
) -> None:
    """Send one request through the router and print the response envelope."""
    body: Any = None
    if payload.strip():
        try:
            body = json.loads(payload)
        except json.JSONDecodeError as exc:
            console.print(f"[red]Invalid --payload JSON:[/red] {exc.msg}")
            raise typer.Exit(2)
    request = (
        MessageRequest(id=request_id, type=message_type, payload=body)
        if request_id
        else MessageRequest.new(message_type, body)
    )

    async def _run() -> MessageResponse:
        async with _build_host(_load_cli_config()) as host:
            return await host.dispatch(request)

    try:
        response = asyncio.run(_run())
    except SkinManagerError as exc:
        console.print(f"[red]{exc.code}:[/red] {exc.message}")
        raise typer.Exit(1)
    typer.echo(encode_response_line(response))
    if not response.success:
        raise typer.Exit(1)


async def serve_stream(host: SkinManagerHost, reader: Any = None, writer: Any = None) -> int:
    """Answer newline-delimited JSON requests until EOF; returns the request count.

    Requests are dispatched concurrently, so responses may be written out of
    order; callers correlate them by id.
    """
    reader = reader or sys.stdin
    writer = writer or sys.stdout
    loop = asyncio.get_running_loop()
    pending: set[asyncio.Task] = set()
    count = 0

    async def _answer(line: str) -> None:
        try:
            request = decode_request_line(line)
        except SkinManagerError as exc:
            response = MessageResponse.create_error("unknown", exc.message)
        else:
            response = await host.dispatch(request)
        writer.write(encode_response_line(response) + "\n")
        writer.flush()

    while True:
        line = await loop.run_in_executor(None, reader.readline)
        if not line:
            break
        if not line.strip():
            continue
        count += 1
        task = asyncio.create_task(_answer(line))
        pending.add(task)
        task.add_done_callback(pending.discard)
    if pending:
        await asyncio.gather(*pending)
    return count


@app.command()
def serve() -> None:
    """Read JSON request lines on stdin and write JSON response lines on stdout."""

    async def _run() -> int:
        async with _build_host(_load_cli_config()) as host:
            return await serve_stream(host)

    try:
        handled = asyncio.run(_run())
    except SkinManagerError as exc:
        console.print(f"[red]{exc.code}:[/red] {exc.message}")
        raise typer.Exit(1)
    logger.info("serve: handled {} requests", handled)


register_plugins_commands(app, console, _load_cli_config)


if __name__ == "__main__":
    app()
