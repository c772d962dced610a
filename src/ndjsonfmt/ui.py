from __future__ import annotations

import argparse
import os
import sys
from typing import IO, Literal, Mapping

from rich.console import Console

from .util import env_value

COLOR_CHOICES = ("auto", "always", "never")
COLOR_ENV_VAR = "NDJSON_COLOR"
ColorChoice = Literal["auto", "always", "never"]


def add_color_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--color",
        choices=COLOR_CHOICES,
        help=(
            "Colorize output: auto (default, only when stdout is a terminal), "
            "always, or never."
        ),
    )


def normalize_color_choice(raw: str | None, *, source: str) -> ColorChoice | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if not value:
        return None
    if value not in COLOR_CHOICES:
        expected = ", ".join(COLOR_CHOICES)
        raise ValueError(f"invalid {source} value {raw!r}; expected one of: {expected}")
    return value  # type: ignore[return-value]


def stream_is_tty(stream: object) -> bool:
    probe = getattr(stream, "isatty", None)
    if not callable(probe):
        return False
    try:
        return bool(probe())
    except (OSError, ValueError):
        return False


def resolve_color(
    requested: str | None = None,
    *,
    configured: str | None = None,
    env: Mapping[str, str] | None = None,
    is_tty: bool | None = None,
) -> bool:
    """Decide whether output gets ANSI colors.

    Precedence: ``requested`` (the ``--color`` flag), ``$NDJSON_COLOR``,
    ``configured`` (config file), ``$NO_COLOR``, then terminal detection.
    """
    env = os.environ if env is None else env

    selected = normalize_color_choice(requested, source="--color")
    if selected is None:
        selected = normalize_color_choice(env.get(COLOR_ENV_VAR), source=COLOR_ENV_VAR)
    if selected is None:
        selected = normalize_color_choice(configured, source="color")
    if selected is None:
        if env_value(env, "NO_COLOR"):
            return False
        selected = "auto"

    if selected == "auto":
        tty = stream_is_tty(sys.stdout) if is_tty is None else bool(is_tty)
        return tty and env.get("TERM") != "dumb"
    return selected == "always"


def make_console(*, file: IO[str] | None = None, stderr: bool = True) -> Console:
    return Console(
        file=file if file is not None else (sys.stderr if stderr else sys.stdout),
        stderr=stderr,
        highlight=False,
    )
