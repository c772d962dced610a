from __future__ import annotations

import io
from typing import IO, Union

from .render import RenderOutput
from .util import StreamFailure

OutputStream = Union[IO[bytes], IO[str]]


def _is_binary(stream: OutputStream) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    if isinstance(stream, io.TextIOBase):
        return False
    return "b" in getattr(stream, "mode", "")


class OutputSink:
    """Writes one rendered line per call and flushes before returning.

    Byte streams (buffered or raw, or anything opened with a ``b`` mode)
    receive UTF-8; every other stream gets ``str``. Write and flush errors,
    including writes to a closed stream, raise :class:`StreamFailure`.
    """

    def __init__(self, stream: OutputStream, *, encoding: str = "utf-8") -> None:
        self.stream = stream
        self.encoding = encoding
        self.binary = _is_binary(stream)
        self.lines_written = 0

    def write(self, output: RenderOutput) -> None:
        data = output.text + "\n"
        try:
            if self.binary:
                self.stream.write(data.encode(self.encoding, "replace"))
            else:
                self.stream.write(data)
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise StreamFailure("write", exc) from exc
        self.lines_written += 1
