#!/usr/bin/env python3
"""Format and colorize newline-delimited JSON as it streams in."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Mapping

from rich.console import Console
from rich.style import Style
from rich.text import Text

from . import __version__
from .config import load_config
from .log import resolve_log_level, setup_logging
from .render import TokenKind, render_line
from .sink import OutputSink, OutputStream
from .source import LineStream, read_lines
from .ui import add_color_argument, make_console, resolve_color, stream_is_tty
from .util import EXIT_INTERRUPTED, EXIT_IO_FAILURE, EXIT_OK, EXIT_USAGE, StreamFailure

logger = logging.getLogger(__name__)

_DESCRIPTION = (
    "Formats and colorizes newline delimited JSON for better readability.\n"
    "Lines that are not JSON pass through unchanged."
)
_USAGE = """ndjson [FILE] [--color auto|always|never]
    ndjson < file
    tail -f file | ndjson
    docker logs --tail 100 -f container 2>&1 | ndjson
    kubectl logs --tail 100 -f pod | ndjson"""


@dataclass
class NdjsonFormatter:
    stdout: OutputStream
    stderr: IO[str]
    color: bool = False
    theme: Mapping[TokenKind, Style] | None = None
    processed_lines: int = 0
    fallback_lines: int = 0

    sink: OutputSink = field(init=False)
    err_console: Console = field(init=False)

    def __post_init__(self) -> None:
        self.sink = OutputSink(self.stdout)
        self.err_console = make_console(file=self.stderr)

    def process_line(self, line: str) -> None:
        self.processed_lines += 1
        output = render_line(
            line, color=self.color, theme=self.theme, lineno=self.processed_lines
        )
        if output.fallback:
            self.fallback_lines += 1
        self.sink.write(output)

    def report_failure(self, exc: StreamFailure) -> None:
        if exc.stage == "write" and exc.broken_pipe:
            logger.debug("output closed after %d lines", self.sink.lines_written)
            return
        self.err_console.print(Text(f"ndjson: {exc}", style="red"), soft_wrap=True)

    def finish(self) -> int:
        logger.debug(
            "processed %d lines (%d passed through unparsed)",
            self.processed_lines,
            self.fallback_lines,
        )
        return EXIT_OK


def run(
    input_stream: LineStream,
    color: bool,
    output_stream: OutputStream,
    *,
    theme: Mapping[TokenKind, Style] | None = None,
    stderr: IO[str] | None = None,
    encoding_errors: str = "replace",
) -> int:
    """Read, render, write and flush one line at a time until end of input.

    Returns 0 at end of input and 1 when reading or writing fails. Lines that
    fail to parse never change the exit status.
    """
    formatter = NdjsonFormatter(
        stdout=output_stream,
        stderr=sys.stderr if stderr is None else stderr,
        color=color,
        theme=theme,
    )
    try:
        for line in read_lines(input_stream, errors=encoding_errors):
            formatter.process_line(line)
    except StreamFailure as exc:
        formatter.report_failure(exc)
        return EXIT_IO_FAILURE
    return formatter.finish()


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ndjson",
        usage=_USAGE,
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("file", nargs="?", help="Read FILE instead of stdin")
    add_color_argument(p)
    p.add_argument("--config", help="Path to a TOML configuration file")
    p.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log to stderr (-vv for debug)"
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _silence_stdout() -> None:
    # Keep interpreter shutdown from failing again on the closed pipe.
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        pass


def main(
    argv: list[str] | None = None,
    stdin: LineStream | None = None,
    stdout: OutputStream | None = None,
) -> None:
    p = _parser()
    args = p.parse_args(argv)

    setup_logging(resolve_log_level(args.verbose))
    err_console = make_console()
    out = stdout if stdout is not None else getattr(sys.stdout, "buffer", sys.stdout)

    try:
        cfg = load_config(Path(args.config) if args.config else None)
        theme = cfg.theme()
        color = resolve_color(args.color, configured=cfg.color, is_tty=stream_is_tty(out))
    except ValueError as exc:
        err_console.print(Text(f"ndjson: {exc}", style="red"), soft_wrap=True)
        raise SystemExit(EXIT_USAGE)

    if args.file:
        try:
            inp: LineStream = open(args.file, "rb")
        except OSError as exc:
            message = f"ndjson: cannot open {args.file}: {exc.strerror or exc}"
            err_console.print(Text(message, style="red"), soft_wrap=True)
            raise SystemExit(EXIT_IO_FAILURE)
    else:
        inp = stdin if stdin is not None else sys.stdin.buffer
        if stream_is_tty(inp):
            if stream_is_tty(sys.stdout):
                p.print_help()
            raise SystemExit(EXIT_IO_FAILURE)

    logger.info("color %s", "on" if color else "off")
    try:
        code = run(
            inp,
            color,
            out,
            theme=theme,
            encoding_errors=cfg.encoding_errors,
        )
    except KeyboardInterrupt:
        raise SystemExit(EXIT_INTERRUPTED)
    finally:
        if args.file:
            inp.close()

    if code == EXIT_IO_FAILURE and stdout is None:
        _silence_stdout()
    raise SystemExit(code)


if __name__ == "__main__":
    main()
