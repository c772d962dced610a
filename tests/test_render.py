"""Tests for rendering NDJSON lines."""

from __future__ import annotations

import logging
from typing import Callable

import pytest
from rich.errors import StyleSyntaxError
from rich.style import Style

from ndjsonfmt.render import (
    DEFAULT_THEME,
    TokenKind,
    build_theme,
    render_line,
    render_value,
)
from ndjsonfmt.values import JsonArray, JsonNumber, JsonObject, JsonString


def _plain(line: str) -> str:
    return render_line(line, color=False).text


class TestScenarios:
    def test_flat_object(self) -> None:
        assert _plain('{"type":"json","value":42}') == "type: json value: 42"

    def test_multiline_string(self) -> None:
        assert _plain('{"multiline":"line1\\nline2"}').split("\n") == [
            "multiline: line1",
            "line2",
        ]

    def test_array(self) -> None:
        assert _plain("[1,2,3]") == "[1, 2, 3]"

    def test_not_json(self) -> None:
        out = render_line("not json at all", color=False)
        assert out.text == "not json at all"
        assert out.fallback is True

    def test_empty_line(self) -> None:
        out = render_line("", color=False)
        assert out.text == ""
        assert out.fallback is False

    def test_empty_json_string(self) -> None:
        assert _plain('""') == ""

    def test_nested_object_flattens(self) -> None:
        assert _plain('{"a":{"b":1}}') == "a: b: 1"


class TestFormatting:
    def test_key_order_preserved(self) -> None:
        assert _plain('{"z":1,"a":2,"m":3}') == "z: 1 a: 2 m: 3"

    def test_duplicate_keys_kept(self) -> None:
        assert _plain('{"k":1,"k":2}') == "k: 1 k: 2"

    def test_literals_and_numbers_verbatim(self) -> None:
        assert _plain('{"ok":true,"no":false,"nil":null,"n":1.0e3}') == (
            "ok: true no: false nil: null n: 1.0e3"
        )

    def test_objects_inside_arrays(self) -> None:
        assert _plain('[{"a":1,"b":2},{"c":[]}]') == "[a: 1 b: 2, c: []]"

    def test_empty_containers(self) -> None:
        assert _plain("{}") == "{}"
        assert _plain("[]") == "[]"
        assert _plain('{"a":{},"b":[]}') == "a: {} b: []"

    def test_top_level_string_decoded(self) -> None:
        assert _plain('"tab\\there"') == "tab\there"

    def test_keys_decoded(self) -> None:
        assert _plain('{"caf\\u00e9":"x"}') == "café: x"

    def test_surrounding_whitespace_ignored(self) -> None:
        assert _plain('  {"a":1}  ') == "a: 1"

    def test_control_characters_escaped(self) -> None:
        assert _plain('{"m":"\\u001b[31mred\\b"}') == "m: \\u001b[31mred\\b"

    def test_c1_controls_and_delete_escaped(self) -> None:
        assert _plain('{"m":"\\u009b31mred\\u007f"}') == "m: \\u009b31mred\\u007f"
        assert "\x9b" not in render_line('{"m":"\\u009b31m"}', color=True).text

    def test_latin1_letters_not_escaped(self) -> None:
        assert _plain('"\\u00a0\\u00ff"') == "\u00a0\u00ff"

    def test_carriage_return_decoded(self) -> None:
        assert _plain('"a\\r\\nb"') == "a\r\nb"


class TestFallback:
    @pytest.mark.parametrize(
        "line",
        [
            '{"a":1',
            "[1,]",
            "2024-01-01 INFO started",
            '{"a":1} trailing',
            "   ",
            "\x1b[32mcolored log\x1b[0m",
        ],
    )
    def test_verbatim(self, line: str) -> None:
        assert render_line(line, color=False).text == line
        assert render_line(line, color=True).text == line

    def test_error_attached(self) -> None:
        out = render_line('{"a":', color=False)
        assert out.error is not None
        assert out.error.reason == "unexpected end of input"

    def test_fallback_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="ndjsonfmt"):
            render_line("nope", color=False, lineno=7)
        assert "line 7: passing through" in caplog.text


class TestColor:
    def test_plain_has_no_escapes(self) -> None:
        assert "\x1b" not in render_line('{"a":[1,"s",true]}', color=False).text

    def test_colored_strips_to_plain(self, strip_ansi: Callable[[str], str]) -> None:
        line = '{"type":"json","value":42,"tags":["x",null]}'
        colored = render_line(line, color=True).text
        assert "\x1b[" in colored
        assert strip_ansi(colored) == render_line(line, color=False).text

    def test_default_key_style(self) -> None:
        out = render_line('{"a":1}', color=True)
        assert out.segments[0].text == "a"
        assert out.segments[0].style == DEFAULT_THEME[TokenKind.KEY]
        assert out.text.startswith("\x1b[93ma\x1b[0m")

    def test_punctuation_unstyled_by_default(self) -> None:
        out = render_line("[1]", color=True)
        assert out.segments[0].text == "["
        assert out.segments[0].style is None

    def test_deterministic(self) -> None:
        line = '{"a":{"b":[1,2,{"c":"d"}]}}'
        assert render_line(line, color=True) == render_line(line, color=True)

    def test_custom_theme(self, strip_ansi: Callable[[str], str]) -> None:
        theme = build_theme({"punctuation": "bold"})
        out = render_line("[1]", color=True, theme=theme)
        assert out.text.startswith("\x1b[1m[\x1b[0m")
        assert strip_ansi(out.text) == "[1]"

    def test_theme_ignored_without_color(self) -> None:
        theme = build_theme({"key": "red"})
        assert render_line('{"a":1}', color=False, theme=theme).text == "a: 1"

    def test_same_style_fragments_merged(self) -> None:
        out = render_line('{"a":"x","b":"y"}', color=True)
        assert out.text.count("\x1b[0m") == len(
            [s for s in out.segments if s.style]
        )
        theme = build_theme({"punctuation": "bright_cyan"})
        merged = render_line('["x"]', color=True, theme=theme)
        assert merged.text == "\x1b[96m[x]\x1b[0m"


class TestBuildTheme:
    def test_defaults(self) -> None:
        theme = build_theme()
        assert set(theme) == set(TokenKind)
        assert theme[TokenKind.STRING] == Style.parse("bright_cyan")

    def test_unknown_category(self) -> None:
        with pytest.raises(ValueError, match="unknown style category"):
            build_theme({"brace": "red"})

    def test_bad_style(self) -> None:
        with pytest.raises(StyleSyntaxError):
            build_theme({"key": "not-a-colour"})


class TestRenderValue:
    def test_unstyled_segments(self) -> None:
        value = JsonObject((("a", JsonArray((JsonNumber("1"), JsonString("x")))),))
        segments = render_value(value)
        assert "".join(s.text for s in segments) == "a: [1, x]"
        assert all(s.style is None for s in segments)
