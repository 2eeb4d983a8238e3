"""Record transform pipeline.

Each event record is serialized to its XML form, re-parsed into a document
and run through a stylesheet compiled once with lxml. The transform output
is collected into a reusable text buffer, cleared at the start of every
record, and returned as a single fragment without an XML declaration.
"""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

from lxml import etree

from .exceptions import ResourceOpenError, TransformError

logger = logging.getLogger(__name__)

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>\s*")


def describe_lxml_error(error: Exception) -> str:
    """Render an lxml exception together with its error log entries."""
    message = str(error)
    error_log = getattr(error, "error_log", None)
    if not error_log:
        return message

    entries = [str(entry) for entry in error_log]
    return "\n".join([message] + [e for e in entries if e != message])


def serialize_record(record: Any) -> str:
    """Return the native XML representation of an event record."""
    return record.xml()


def _serialize_fragment(result: etree._XSLTResultTree) -> str:
    text = str(result)
    text = _XML_DECLARATION.sub("", text, count=1)
    return text.rstrip("\r\n")


class TransformPipeline:
    """Compiled stylesheet plus the reusable output buffer.

    Not safe for concurrent use: the buffer is mutated in place once per
    record.
    """

    def __init__(self, xslt_file: Union[str, Path]) -> None:
        self.xslt_file = Path(xslt_file)
        self.buffer = io.StringIO()
        self._transform: Optional[etree.XSLT] = None
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    @property
    def is_loaded(self) -> bool:
        return self._transform is not None

    def load(self) -> None:
        """Parse and compile the stylesheet.

        Raises:
            ResourceOpenError: If the stylesheet cannot be read or compiled.
        """
        try:
            xslt_doc = etree.parse(str(self.xslt_file))
            self._transform = etree.XSLT(xslt_doc)
        except (etree.XMLSyntaxError, etree.XSLTParseError, OSError) as e:
            raise ResourceOpenError(
                "xslt",
                f"Cannot compile stylesheet: {self.xslt_file}",
                describe_lxml_error(e),
            ) from e

        logger.debug(f"Compiled stylesheet {self.xslt_file}")

    def transform(self, record: Any, record_index: int) -> str:
        """Transform one record into its output fragment.

        Args:
            record: Event record exposing ``xml()``.
            record_index: 1-based position of the record, used in errors.

        Returns:
            The buffer contents after the transform.

        Raises:
            TransformError: If serialization, parsing or the transform fails.
        """
        if self._transform is None:
            raise TransformError(record_index, "Stylesheet is not loaded")

        self.buffer.seek(0)
        self.buffer.truncate(0)

        try:
            xml_text = serialize_record(record)
            document = etree.fromstring(xml_text.encode("utf-8"), self._parser)
            result = self._transform(document)
            self.buffer.write(_serialize_fragment(result))
        except Exception as e:
            # python-evtx and lxml raise a wide range of error types here
            raise TransformError(
                record_index, f"{type(e).__name__}: {describe_lxml_error(e)}"
            ) from e

        return self.buffer.getvalue()
