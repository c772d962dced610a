from __future__ import annotations

import io
import logging

from rich.logging import RichHandler

from ndjsonfmt.log import LOG_LEVEL_ENV_VAR, resolve_log_level, setup_logging


def test_resolve_log_level_verbosity() -> None:
    assert resolve_log_level(1, env={}) == logging.INFO
    assert resolve_log_level(2, env={}) == logging.DEBUG
    assert resolve_log_level(5, env={LOG_LEVEL_ENV_VAR: "ERROR"}) == logging.DEBUG


def test_resolve_log_level_env() -> None:
    assert resolve_log_level(0, env={}) == logging.WARNING
    assert resolve_log_level(0, env={LOG_LEVEL_ENV_VAR: "debug"}) == logging.DEBUG
    assert resolve_log_level(0, env={LOG_LEVEL_ENV_VAR: "15"}) == 15
    assert resolve_log_level(0, env={LOG_LEVEL_ENV_VAR: "chatty"}) == logging.WARNING


def test_setup_logging_writes_to_given_stream() -> None:
    stream = io.StringIO()
    logger = setup_logging(logging.DEBUG, stream=stream)
    assert [type(h) for h in logger.handlers] == [RichHandler]
    logging.getLogger("ndjsonfmt.render").debug("line 3: passing through")
    assert "line 3: passing through" in stream.getvalue()


def test_setup_logging_replaces_handlers() -> None:
    setup_logging(logging.INFO, stream=io.StringIO())
    logger = setup_logging(logging.WARNING, stream=io.StringIO())
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
