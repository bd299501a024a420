"""Loguru helpers for consistent stderr and file logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from skinmanager.config.schema import Config

_SINK_IDS: dict[str, int] = {}


def configure_logging(config: Config, *, verbose: bool = False) -> None:
    """Replace loguru's default sink with one at the configured level."""
    level = "DEBUG" if verbose else config.logging.level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    _SINK_IDS.clear()
    if config.logging.file:
        ensure_rotating_log_file(
            "skinmanager",
            level=level,
            log_dir=config.data_path / "logs",
            rotation=config.logging.rotation,
            retention=config.logging.retention,
        )


def ensure_rotating_log_file(
    name: str,
    level: str = "INFO",
    *,
    log_dir: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "14 days",
) -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_dir = log_dir or Path.home() / ".skinmanager" / "logs"
    log_path = log_dir / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_dir.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation=rotation,
        retention=retention,
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path
