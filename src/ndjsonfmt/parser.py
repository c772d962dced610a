"""Recursive-descent JSON parser for single NDJSON lines.

Numbers are kept as the text that was scanned. Errors carry the byte offset
into the UTF-8 encoding of the line so they line up with what a hex dump of
the input shows.
"""

from __future__ import annotations

import re

from .values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
)

MAX_DEPTH = 128

JSON_WHITESPACE = " \t\n\r"

_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_STRING_CHUNK_RE = re.compile(r'[^"\\\x00-\x1f]*')
_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_LITERALS: tuple[tuple[str, JsonValue], ...] = (
    ("true", JsonBool(True)),
    ("false", JsonBool(False)),
    ("null", JsonNull()),
)


class ParseError(ValueError):
    def __init__(self, reason: str, offset: int) -> None:
        super().__init__(f"{reason} at byte {offset}")
        self.reason = reason
        self.offset = offset


class _Parser:
    def __init__(self, text: str, *, max_depth: int) -> None:
        self.text = text
        self.pos = 0
        self.max_depth = max_depth

    def error(self, reason: str, pos: int | None = None) -> ParseError:
        at = self.pos if pos is None else pos
        offset = len(self.text[:at].encode("utf-8", "surrogatepass"))
        return ParseError(reason, offset)

    def peek(self) -> str:
        return self.text[self.pos : self.pos + 1]

    def skip_whitespace(self) -> None:
        text = self.text
        pos = self.pos
        while pos < len(text) and text[pos] in JSON_WHITESPACE:
            pos += 1
        self.pos = pos

    def document(self) -> JsonValue:
        self.skip_whitespace()
        value = self.value(0)
        self.skip_whitespace()
        if self.pos != len(self.text):
            raise self.error("trailing characters")
        return value

    def value(self, depth: int) -> JsonValue:
        ch = self.peek()
        if ch == "{":
            return self.object(depth)
        if ch == "[":
            return self.array(depth)
        if ch == '"':
            return JsonString(self.string())
        if ch and ch in "-0123456789":
            return self.number()
        if not ch:
            raise self.error("unexpected end of input")
        for word, literal in _LITERALS:
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                return literal
        raise self.error(f"unexpected character {ch!r}")

    def enter(self, depth: int) -> None:
        if depth >= self.max_depth:
            raise self.error("recursion limit exceeded")

    def object(self, depth: int) -> JsonObject:
        self.enter(depth)
        self.pos += 1
        members: list[tuple[str, JsonValue]] = []
        self.skip_whitespace()
        if self.peek() == "}":
            self.pos += 1
            return JsonObject(())

        while True:
            self.skip_whitespace()
            if self.peek() != '"':
                raise self.error("expected string key")
            key = self.string()
            self.skip_whitespace()
            if self.peek() != ":":
                raise self.error("expected ':' after object key")
            self.pos += 1
            self.skip_whitespace()
            members.append((key, self.value(depth + 1)))
            self.skip_whitespace()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
                continue
            if ch == "}":
                self.pos += 1
                return JsonObject(tuple(members))
            if not ch:
                raise self.error("unterminated object")
            raise self.error("expected ',' or '}' in object")

    def array(self, depth: int) -> JsonArray:
        self.enter(depth)
        self.pos += 1
        items: list[JsonValue] = []
        self.skip_whitespace()
        if self.peek() == "]":
            self.pos += 1
            return JsonArray(())

        while True:
            self.skip_whitespace()
            items.append(self.value(depth + 1))
            self.skip_whitespace()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
                continue
            if ch == "]":
                self.pos += 1
                return JsonArray(tuple(items))
            if not ch:
                raise self.error("unterminated array")
            raise self.error("expected ',' or ']' in array")

    def number(self) -> JsonNumber:
        m = _NUMBER_RE.match(self.text, self.pos)
        if not m:
            raise self.error("invalid number")
        self.pos = m.end()
        return JsonNumber(m.group())

    def hex4(self, pos: int) -> int:
        m = _HEX4_RE.match(self.text, pos)
        if not m:
            raise self.error("invalid \\u escape", pos - 2)
        return int(m.group(), 16)

    def string(self) -> str:
        start = self.pos
        text = self.text
        pos = start + 1
        parts: list[str] = []
        while True:
            m = _STRING_CHUNK_RE.match(text, pos)
            assert m is not None
            parts.append(m.group())
            pos = m.end()
            ch = text[pos : pos + 1]
            if ch == '"':
                self.pos = pos + 1
                return "".join(parts)
            if not ch:
                raise self.error("unterminated string", start)
            if ch != "\\":
                raise self.error("control character in string", pos)

            esc = text[pos + 1 : pos + 2]
            if esc == "u":
                code = self.hex4(pos + 2)
                if 0xD800 <= code <= 0xDBFF:
                    if not text.startswith("\\u", pos + 6):
                        raise self.error("lone leading surrogate", pos)
                    low = self.hex4(pos + 8)
                    if not 0xDC00 <= low <= 0xDFFF:
                        raise self.error("invalid trailing surrogate", pos + 6)
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    pos += 12
                elif 0xDC00 <= code <= 0xDFFF:
                    raise self.error("lone trailing surrogate", pos)
                else:
                    pos += 6
                parts.append(chr(code))
                continue
            if esc in _ESCAPES:
                parts.append(_ESCAPES[esc])
                pos += 2
                continue
            if not esc:
                raise self.error("unterminated string", start)
            raise self.error(f"invalid escape '\\{esc}'", pos)


def parse_value(text: str, *, max_depth: int = MAX_DEPTH) -> JsonValue:
    """Parse exactly one JSON value from ``text``.

    Leading and trailing JSON whitespace is ignored. Anything else after the
    value raises :class:`ParseError`.
    """
    return _Parser(text, max_depth=max_depth).document()
