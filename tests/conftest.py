from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Callable, Iterator

import pytest

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def stderr() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    return lambda text: _ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("NDJSON_COLOR", "NDJSON_CONFIG", "NDJSON_LOG_LEVEL", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    logger = logging.getLogger("ndjsonfmt")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
