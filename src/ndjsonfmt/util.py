from __future__ import annotations

import errno
from typing import Mapping

EXIT_OK = 0
EXIT_IO_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class StreamFailure(RuntimeError):
    """Reading the input or writing the output failed. Always fatal."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"{stage} failed: {getattr(cause, 'strerror', None) or cause}")
        self.stage = stage
        self.cause = cause

    @property
    def broken_pipe(self) -> bool:
        return isinstance(self.cause, BrokenPipeError) or getattr(self.cause, "errno", None) == errno.EPIPE


def env_value(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None
