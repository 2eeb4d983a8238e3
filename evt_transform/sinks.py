"""Line-oriented text sinks for the output file and the run log."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO, Union


class LineSink:
    """Truncating UTF-8 text file written one flushed line at a time.

    A sink is opened at most once. Writing to a closed sink raises
    ``ValueError``; closing an unopened or already closed sink does nothing.
    """

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding
        self._stream: Optional[TextIO] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self) -> "LineSink":
        if self._closed or self.is_open:
            raise ValueError(f"Sink cannot be reopened: {self.path}")
        self._stream = self.path.open("w", encoding=self.encoding)
        return self

    def write_line(self, text: str) -> None:
        if self._stream is None:
            raise ValueError(f"Sink is not open: {self.path}")
        self._stream.write(text + "\n")
        self._stream.flush()

    def close(self) -> None:
        stream, self._stream = self._stream, None
        self._closed = True
        if stream is not None:
            stream.close()
