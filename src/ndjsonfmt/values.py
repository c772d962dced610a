"""JSON value tree produced by the parser, one per input line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNumber:
    # Kept exactly as scanned so rendering never loses precision.
    text: str


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonArray:
    items: tuple[JsonValue, ...] = ()


@dataclass(frozen=True)
class JsonObject:
    """Object members in input order. Duplicate keys are kept."""

    members: tuple[tuple[str, JsonValue], ...] = ()


JsonValue = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]
