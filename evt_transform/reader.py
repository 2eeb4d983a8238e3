"""Event source over Windows Event Log (.evtx) files.

Records are read sequentially through python-evtx, which parses the binary
EVTX format on any platform. Each record exposes ``xml()``, returning its
native self-describing XML form.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Iterator, Optional, Union

from Evtx.Evtx import Evtx

from .exceptions import ResourceOpenError
from .utils import has_evtx_signature

logger = logging.getLogger(__name__)


class EvtxEventSource:
    """Live handle over an EVTX file.

    The handle is opened once and may not be reopened after ``close()``.
    Closing a source that was never opened is a no-op.

    Example:
        >>> with EvtxEventSource("Security.evtx").open() as source:
        ...     for record in source.records():
        ...         print(record.xml())
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._stack: Optional[ExitStack] = None
        self._log: Optional[Evtx] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._log is not None

    def open(self) -> "EvtxEventSource":
        """Open the underlying file and validate its header.

        Returns:
            The source itself, for chaining.

        Raises:
            ResourceOpenError: If the file is not an EVTX log or cannot be mapped.
        """
        if self._closed or self.is_open:
            raise ResourceOpenError("event log", f"Event source cannot be reopened: {self.path}")

        if not has_evtx_signature(self.path):
            raise ResourceOpenError(
                "event log",
                f"File does not appear to be a Windows Event Log (.evtx): {self.path}",
            )

        stack = ExitStack()
        try:
            log = stack.enter_context(Evtx(str(self.path)))
        except Exception as e:
            stack.close()
            raise ResourceOpenError(
                "event log", f"Cannot open event log: {self.path}", str(e)
            ) from e

        self._stack = stack
        self._log = log
        logger.debug(f"Opened event source {self.path}")
        return self

    def records(self) -> Iterator:
        """Yield every record of the log in file order."""
        if self._log is None:
            raise ResourceOpenError("event log", f"Event source is not open: {self.path}")
        yield from self._log.records()

    def close(self) -> None:
        """Release the file handle and memory map if they are open."""
        stack, self._stack = self._stack, None
        self._log = None
        self._closed = True
        if stack is not None:
            stack.close()
            logger.debug(f"Closed event source {self.path}")

    def __enter__(self) -> "EvtxEventSource":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def open_event_source(path: Union[str, Path]) -> EvtxEventSource:
    """Open an EVTX file for sequential reading.

    Args:
        path: Path to the .evtx file.

    Returns:
        An open EvtxEventSource.

    Raises:
        ResourceOpenError: If the file cannot be opened as an event log.
    """
    return EvtxEventSource(path).open()
