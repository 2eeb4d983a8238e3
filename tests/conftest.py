from pathlib import Path
from typing import Callable, List, Optional

import pytest

import evt_transform.runner as runner_module
from evt_transform.runner import RunConfig

EVENT_NS = "http://schemas.microsoft.com/win/2004/08/events/event"

EVENT_ID_XSLT = f"""<?xml version="1.0"?>
<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform"
    xmlns:e="{EVENT_NS}">
  <xsl:output method="text"/>
  <xsl:template match="/">
    <xsl:value-of select="e:Event/e:System/e:EventID"/>
    <xsl:text>,</xsl:text>
    <xsl:value-of select="e:Event/e:System/e:Computer"/>
  </xsl:template>
</xsl:stylesheet>
"""


def event_xml(event_id: int, computer: str = "WS01") -> str:
    return (
        f'<Event xmlns="{EVENT_NS}"><System>'
        f"<EventID>{event_id}</EventID><Computer>{computer}</Computer>"
        "</System></Event>"
    )


class FakeRecord:
    def __init__(self, xml_text: str) -> None:
        self._xml_text = xml_text

    def xml(self) -> str:
        return self._xml_text


class FakeSource:
    """Stands in for an open EvtxEventSource."""

    def __init__(self, records: List[FakeRecord]) -> None:
        self._records = records
        self.served = 0
        self.closed = False

    def records(self):
        for record in self._records:
            self.served += 1
            yield record

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def stylesheet(tmp_path: Path) -> Path:
    path = tmp_path / "events.xslt"
    path.write_text(EVENT_ID_XSLT, encoding="utf-8")
    return path


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    # contents are never parsed, the source is faked
    path = tmp_path / "Security.evtx"
    path.write_bytes(b"ElfFile\x00" + b"\x00" * 120)
    return path


@pytest.fixture
def run_config(tmp_path: Path, event_file: Path, stylesheet: Path) -> RunConfig:
    return RunConfig.from_paths(
        event_file, stylesheet, tmp_path / "out.txt", tmp_path / "run.log"
    )


@pytest.fixture
def fake_source(monkeypatch: pytest.MonkeyPatch) -> Callable[[List[FakeRecord]], List[FakeSource]]:
    """Route the runner's event source to FakeSource objects.

    Returns a function taking the records to serve; the list it returns
    collects every source the runner opened.
    """

    def install(records: List[FakeRecord], error: Optional[Exception] = None) -> List[FakeSource]:
        opened: List[FakeSource] = []

        def fake_open(path):
            if error is not None:
                raise error
            source = FakeSource(records)
            opened.append(source)
            return source

        monkeypatch.setattr(runner_module, "open_event_source", fake_open)
        return opened

    return install
