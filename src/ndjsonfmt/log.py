"""Diagnostics go to stderr through rich; stdout only ever carries data."""

from __future__ import annotations

import logging
import os
from typing import IO, Mapping

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "NDJSON_LOG_LEVEL"
LOGGER_NAME = "ndjsonfmt"


def resolve_log_level(verbosity: int = 0, *, env: Mapping[str, str] | None = None) -> int:
    """Map ``-v`` counts to a level; without flags honor ``$NDJSON_LOG_LEVEL``."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO

    env = os.environ if env is None else env
    raw = env.get(LOG_LEVEL_ENV_VAR, "").strip().upper()
    if not raw:
        return logging.WARNING
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: int = logging.WARNING, *, stream: IO[str] | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = Console(file=stream, stderr=stream is None, highlight=False)
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=level <= logging.DEBUG,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
