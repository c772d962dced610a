"""Render parsed JSON lines as compact, colorized text.

Objects are flattened to ``key: value`` pairs separated by single spaces,
without braces, so the output stays easy to grep. Arrays keep their
brackets. Strings are printed decoded, so an embedded ``\\n`` becomes a real
line break.

Every fragment is a :class:`rich.segment.Segment` carrying the style of its
category, or no style when color is off.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from rich.color import ColorSystem
from rich.segment import Segment
from rich.style import Style

from .parser import JSON_WHITESPACE, ParseError, parse_value
from .values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    KEY = "key"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"
    PUNCTUATION = "punctuation"
    ESCAPE = "escape"
    RAW = "raw"


DEFAULT_STYLES: dict[TokenKind, str] = {
    TokenKind.KEY: "bright_yellow",
    TokenKind.STRING: "bright_cyan",
    TokenKind.NUMBER: "bright_green",
    TokenKind.LITERAL: "bright_magenta",
    TokenKind.PUNCTUATION: "none",
    TokenKind.ESCAPE: "bright_red",
    TokenKind.RAW: "none",
}

Theme = Mapping[TokenKind, Style]


def build_theme(overrides: Mapping[str, str] | None = None) -> dict[TokenKind, Style]:
    """Return the default theme with ``overrides`` (category name -> style) applied.

    Raises ``ValueError`` for an unknown category and
    ``rich.errors.StyleSyntaxError`` for a style that does not parse.
    """
    styles = {kind: DEFAULT_STYLES[kind] for kind in TokenKind}
    for name, definition in (overrides or {}).items():
        try:
            kind = TokenKind(name)
        except ValueError:
            known = ", ".join(k.value for k in TokenKind)
            raise ValueError(f"unknown style category {name!r}; expected one of: {known}") from None
        styles[kind] = definition
    return {kind: Style.parse(definition) for kind, definition in styles.items()}


DEFAULT_THEME: dict[TokenKind, Style] = build_theme()

# C0 and C1 control characters other than tab, LF and CR.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_SHORT_ESCAPES = {"\b": "\\b", "\f": "\\f"}


def _escape_control(ch: str) -> str:
    return _SHORT_ESCAPES.get(ch) or f"\\u{ord(ch):04x}"


@dataclass(frozen=True)
class RenderOutput:
    """Styled fragments for one input line, written as a single unit."""

    segments: tuple[Segment, ...]
    error: ParseError | None = None

    @property
    def fallback(self) -> bool:
        return self.error is not None

    @property
    def plain(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def text(self) -> str:
        parts: list[str] = []
        for text, style, _control in Segment.simplify(self.segments):
            if style:
                parts.append(style.render(text, color_system=ColorSystem.STANDARD))
            else:
                parts.append(text)
        return "".join(parts)


class _SegmentWriter:
    def __init__(self, theme: Theme | None) -> None:
        self.theme = theme
        self.segments: list[Segment] = []

    def write(self, kind: TokenKind, text: str) -> None:
        if not text:
            return
        style = self.theme.get(kind) if self.theme is not None else None
        self.segments.append(Segment(text, style or None))

    def write_text(self, kind: TokenKind, text: str) -> None:
        pos = 0
        for m in _CONTROL_RE.finditer(text):
            self.write(kind, text[pos : m.start()])
            self.write(TokenKind.ESCAPE, _escape_control(m.group()))
            pos = m.end()
        self.write(kind, text[pos:])

    def value(self, value: JsonValue) -> None:
        if isinstance(value, JsonObject):
            self.object(value)
        elif isinstance(value, JsonArray):
            self.array(value)
        elif isinstance(value, JsonString):
            self.write_text(TokenKind.STRING, value.value)
        elif isinstance(value, JsonNumber):
            self.write(TokenKind.NUMBER, value.text)
        elif isinstance(value, JsonBool):
            self.write(TokenKind.LITERAL, "true" if value.value else "false")
        elif isinstance(value, JsonNull):
            self.write(TokenKind.LITERAL, "null")
        else:
            raise TypeError(f"not a JSON value: {value!r}")

    def object(self, value: JsonObject) -> None:
        if not value.members:
            self.write(TokenKind.PUNCTUATION, "{}")
            return
        for index, (key, member) in enumerate(value.members):
            if index:
                self.write(TokenKind.PUNCTUATION, " ")
            self.write_text(TokenKind.KEY, key)
            self.write(TokenKind.PUNCTUATION, ": ")
            self.value(member)

    def array(self, value: JsonArray) -> None:
        self.write(TokenKind.PUNCTUATION, "[")
        for index, item in enumerate(value.items):
            if index:
                self.write(TokenKind.PUNCTUATION, ", ")
            self.value(item)
        self.write(TokenKind.PUNCTUATION, "]")


def render_value(value: JsonValue, theme: Theme | None = None) -> list[Segment]:
    """Render a parsed value depth-first. ``theme=None`` produces unstyled segments."""
    writer = _SegmentWriter(theme)
    writer.value(value)
    return writer.segments


def _raw(line: str, theme: Theme | None, error: ParseError | None = None) -> RenderOutput:
    writer = _SegmentWriter(theme)
    writer.write(TokenKind.RAW, line)
    return RenderOutput(tuple(writer.segments), error=error)


def render_line(
    line: str,
    *,
    color: bool,
    theme: Theme | None = None,
    lineno: int | None = None,
) -> RenderOutput:
    """Render one NDJSON line. Never raises for bad input.

    Lines that do not parse as JSON come back verbatim, with ``error`` set on
    the result. ``theme`` only applies when ``color`` is true and defaults to
    :data:`DEFAULT_THEME`.
    """
    active = (theme if theme is not None else DEFAULT_THEME) if color else None
    if not line.strip(JSON_WHITESPACE):
        return _raw(line, active)
    try:
        value = parse_value(line)
    except ParseError as exc:
        logger.debug("line %s: passing through (%s)", lineno if lineno is not None else "?", exc)
        return _raw(line, active, error=exc)
    return RenderOutput(tuple(render_value(value, active)))
