from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib
from rich.errors import StyleSyntaxError
from rich.style import Style

from .render import TokenKind, build_theme
from .source import ENCODING_ERROR_POLICIES
from .ui import normalize_color_choice

CONFIG_ENV_VAR = "NDJSON_CONFIG"


@dataclass(frozen=True)
class NdjsonFileConfig:
    path: Path | None = None
    color: str | None = None
    styles: dict[str, str] = field(default_factory=dict)
    encoding_errors: str = "replace"

    def theme(self) -> dict[TokenKind, Style]:
        return build_theme(self.styles)


class ConfigValidationError(ValueError):
    pass


def _as_str(value: object, *, name: str) -> str:
    if not isinstance(value, str):
        raise ConfigValidationError(f"{name} must be a string")
    return value.strip()


def _as_table(value: object, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigValidationError(f"[{name}] must be a table")
    return value


def _parse_styles(raw: object) -> dict[str, str]:
    table = _as_table(raw, name="styles")
    known = {kind.value for kind in TokenKind}
    styles: dict[str, str] = {}
    for name, definition in table.items():
        if name not in known:
            expected = ", ".join(sorted(known))
            raise ConfigValidationError(
                f"unknown style category [styles].{name}; expected one of: {expected}"
            )
        text = _as_str(definition, name=f"[styles].{name}")
        try:
            Style.parse(text)
        except StyleSyntaxError as exc:
            raise ConfigValidationError(f"invalid style for [styles].{name}: {exc}") from None
        styles[name] = text
    return styles


def parse_config(raw: Mapping[str, Any], *, path: Path | None = None) -> NdjsonFileConfig:
    color: str | None = None
    if "color" in raw:
        try:
            color = normalize_color_choice(_as_str(raw["color"], name="color"), source="color")
        except ConfigValidationError:
            raise
        except ValueError as exc:
            raise ConfigValidationError(str(exc)) from None

    input_table = _as_table(raw.get("input"), name="input")
    encoding_errors = "replace"
    if "encoding_errors" in input_table:
        encoding_errors = _as_str(input_table["encoding_errors"], name="[input].encoding_errors")
        if encoding_errors not in ENCODING_ERROR_POLICIES:
            expected = ", ".join(ENCODING_ERROR_POLICIES)
            raise ConfigValidationError(
                f"[input].encoding_errors must be one of: {expected}"
            )

    return NdjsonFileConfig(
        path=path,
        color=color,
        styles=_parse_styles(raw.get("styles")),
        encoding_errors=encoding_errors,
    )


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    explicit = env.get(CONFIG_ENV_VAR, "").strip()
    if explicit:
        return Path(explicit).expanduser()
    xdg = env.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "ndjson" / "config.toml"


def load_config(
    path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> NdjsonFileConfig:
    """Load the configuration file.

    An explicit ``path`` (or ``$NDJSON_CONFIG``) must exist. The default
    location is optional and yields defaults when absent.
    """
    env = os.environ if env is None else env
    required = path is not None or bool(env.get(CONFIG_ENV_VAR, "").strip())
    target = path if path is not None else default_config_path(env)

    if not target.exists():
        if required:
            raise ConfigValidationError(f"config file not found: {target}")
        return NdjsonFileConfig()

    try:
        raw = tomllib.loads(target.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigValidationError(f"invalid TOML in {target}: {exc}") from None
    except OSError as exc:
        raise ConfigValidationError(f"cannot read {target}: {exc.strerror or exc}") from None

    try:
        return parse_config(raw, path=target)
    except ConfigValidationError as exc:
        raise ConfigValidationError(f"{target}: {exc}") from None
