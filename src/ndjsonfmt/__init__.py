from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = [
    "__version__",
    "ParseError",
    "RenderOutput",
    "parse_value",
    "render_line",
    "run",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .format_stream import run
    from .parser import ParseError, parse_value
    from .render import RenderOutput, render_line


def __getattr__(name: str):
    if name in {"ParseError", "parse_value"}:
        from .parser import ParseError, parse_value

        return {"ParseError": ParseError, "parse_value": parse_value}[name]
    if name in {"RenderOutput", "render_line"}:
        from .render import RenderOutput, render_line

        return {"RenderOutput": RenderOutput, "render_line": render_line}[name]
    if name == "run":
        from .format_stream import run

        return run
    raise AttributeError(f"module 'ndjsonfmt' has no attribute {name!r}")
