"""Lazy line reader for live NDJSON streams."""

from __future__ import annotations

import logging
from typing import IO, Iterator, Union

from .util import StreamFailure

logger = logging.getLogger(__name__)

ENCODING_ERROR_POLICIES = ("replace", "backslashreplace", "ignore")

LineStream = Union[IO[bytes], IO[str]]


def _strip_terminator(chunk):
    if chunk[-1:] in ("\n", b"\n"):
        chunk = chunk[:-1]
        if chunk[-1:] in ("\r", b"\r"):
            chunk = chunk[:-1]
    return chunk


def decode_line(raw: bytes, *, lineno: int, encoding: str = "utf-8", errors: str = "replace") -> str:
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        logger.debug(
            "line %d: invalid %s at byte %d (%s), substituting",
            lineno,
            encoding,
            exc.start,
            exc.reason,
        )
        return raw.decode(encoding, errors)


def read_lines(
    stream: LineStream,
    *,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> Iterator[str]:
    """Yield lines from ``stream`` without their terminators.

    Uses ``readline`` so each line is handed on as soon as it arrives; nothing
    is read ahead. A last line without a terminator is still yielded. Binary
    streams are decoded line by line so one bad byte only affects its own
    line. ``OSError`` while reading becomes :class:`StreamFailure`.
    """
    lineno = 0
    while True:
        try:
            chunk = stream.readline()
        except OSError as exc:
            raise StreamFailure("read", exc) from exc
        if not chunk:
            return
        lineno += 1
        chunk = _strip_terminator(chunk)
        if isinstance(chunk, bytes):
            yield decode_line(chunk, lineno=lineno, encoding=encoding, errors=errors)
        else:
            yield chunk
