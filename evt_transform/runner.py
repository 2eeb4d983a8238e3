"""Run controller for transforming an event log with an XSLT stylesheet.

A run is a small state machine::

    INITIALIZE_LOGGING -> CHECK_FILES -> PREPARE_FILES -> PROCESS_EVENTS -> END_RUN
                              |
                              +-> CHECK_FILE_ERROR -> END_RUN

Every stage reports its progress to the run log, and every failure moves the
machine straight to END_RUN, so the outcome of a run can always be
attributed to a single stage. No state is ever entered twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from .exceptions import (
    AccessibilityError,
    ConfigurationError,
    EvtTransformError,
    ResourceOpenError,
    TransformError,
)
from .reader import EvtxEventSource, open_event_source
from .sinks import LineSink
from .transform import TransformPipeline
from .utils import can_read, can_write

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Stages of a run. END_RUN is terminal."""

    INITIALIZE_LOGGING = "initialize_logging"
    CHECK_FILES = "check_files"
    CHECK_FILE_ERROR = "check_file_error"
    PREPARE_FILES = "prepare_files"
    PROCESS_EVENTS = "process_events"
    END_RUN = "end_run"


# (state, action succeeded) -> next state
TRANSITIONS: Dict[Tuple[RunState, bool], RunState] = {
    (RunState.INITIALIZE_LOGGING, True): RunState.CHECK_FILES,
    (RunState.INITIALIZE_LOGGING, False): RunState.END_RUN,
    (RunState.CHECK_FILES, True): RunState.PREPARE_FILES,
    (RunState.CHECK_FILES, False): RunState.CHECK_FILE_ERROR,
    (RunState.CHECK_FILE_ERROR, True): RunState.END_RUN,
    (RunState.CHECK_FILE_ERROR, False): RunState.END_RUN,
    (RunState.PREPARE_FILES, True): RunState.PROCESS_EVENTS,
    (RunState.PREPARE_FILES, False): RunState.END_RUN,
    (RunState.PROCESS_EVENTS, True): RunState.END_RUN,
    (RunState.PROCESS_EVENTS, False): RunState.END_RUN,
}


class RunStatus(Enum):
    """Status of a finished run.

    Attributes:
        SUCCESS: Every record was transformed.
        FAILED: The run stopped at a failed stage.
    """

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class RunConfig:
    """The four files of a run.

    Attributes:
        event_file: Windows Event Log (.evtx) to read.
        xslt_file: Stylesheet applied to every record.
        output_file: Destination of the transformed records.
        log_file: Run log receiving progress and diagnostics.
    """

    event_file: Path
    xslt_file: Path
    output_file: Path
    log_file: Path

    @classmethod
    def from_paths(
        cls,
        event_file: Union[str, Path],
        xslt_file: Union[str, Path],
        output_file: Union[str, Path],
        log_file: Union[str, Path],
    ) -> "RunConfig":
        return cls(
            event_file=Path(event_file),
            xslt_file=Path(xslt_file),
            output_file=Path(output_file),
            log_file=Path(log_file),
        )


@dataclass
class RunOutcome:
    """Result of a run.

    Attributes:
        status: SUCCESS or FAILED.
        records_processed: Number of records transformed and written.
        failed_stage: Stage at which the run failed (None on success).
        error_message: Description of the failure (None on success).
        error: The typed error behind the failure (None on success).
    """

    status: RunStatus
    records_processed: int = 0
    failed_stage: Optional[RunState] = None
    error_message: Optional[str] = None
    error: Optional[EvtTransformError] = None

    @property
    def success(self) -> bool:
        return self.status == RunStatus.SUCCESS


class EventTransformRunner:
    """Drives a single run from logging setup to teardown.

    The runner owns the event source, the output sink and the run-log sink.
    ``close()`` releases whichever of them were opened; it is also called on
    leaving a ``with`` block.

    Example:
        >>> config = RunConfig.from_paths("Security.evtx", "events.xslt", "out.txt", "run.log")
        >>> with EventTransformRunner(config) as runner:
        ...     outcome = runner.run()
        >>> outcome.records_processed
        1042
    """

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.state = RunState.INITIALIZE_LOGGING
        self.history: List[RunState] = []
        self.records_processed = 0

        self.pipeline = TransformPipeline(config.xslt_file)
        self._event_source: Optional[EvtxEventSource] = None
        self._output = LineSink(config.output_file)
        self._run_log = LineSink(config.log_file)

        self._failed_stage: Optional[RunState] = None
        self._error: Optional[EvtTransformError] = None

        self._actions: Dict[RunState, Callable[[], bool]] = {
            RunState.INITIALIZE_LOGGING: self._initialize_logging,
            RunState.CHECK_FILES: self._check_files,
            RunState.CHECK_FILE_ERROR: self._check_file_error,
            RunState.PREPARE_FILES: self._prepare_files,
            RunState.PROCESS_EVENTS: self._process_events,
        }

    def run(self) -> RunOutcome:
        """Execute the state machine until END_RUN is reached.

        Returns:
            RunOutcome describing the finished run.

        Raises:
            RuntimeError: If the runner has already been run.
        """
        if self.history:
            raise RuntimeError("A runner can only execute a single run")

        self.history.append(self.state)
        while self.state is not RunState.END_RUN:
            succeeded = self._actions[self.state]()
            self._advance(TRANSITIONS[(self.state, succeeded)])

        return self.outcome()

    def outcome(self) -> RunOutcome:
        if self._error is None:
            return RunOutcome(
                status=RunStatus.SUCCESS, records_processed=self.records_processed
            )

        return RunOutcome(
            status=RunStatus.FAILED,
            records_processed=self.records_processed,
            failed_stage=self._failed_stage,
            error_message=str(self._error),
            error=self._error,
        )

    def _advance(self, next_state: RunState) -> None:
        if next_state in self.history:
            raise RuntimeError(f"State {next_state.name} was already visited")

        logger.debug(f"{self.state.name} -> {next_state.name}")
        self.state = next_state
        self.history.append(next_state)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        """Write a line to the run log and mirror it to the module logger."""
        logger.log(level, message)
        if self._run_log.is_open:
            self._run_log.write_line(message)

    def _fail(self, error: EvtTransformError) -> None:
        # the first failure of a run is the one reported
        if self._error is None:
            self._failed_stage = self.state
            self._error = error

    # ---------- Stage actions ----------

    def _initialize_logging(self) -> bool:
        try:
            self._run_log.open()
        except (OSError, ValueError) as e:
            error = ConfigurationError(str(self.config.log_file), str(e))
            logger.debug(str(error))
            self._fail(error)
            return False

        self._log(f"Event file: {self.config.event_file}")
        self._log(f"XSLT file: {self.config.xslt_file}")
        self._log(f"Log file: {self.config.log_file}")
        self._log(f"Output file: {self.config.output_file}")
        return True

    def _check_files(self) -> bool:
        self._log("Checking files ...")

        probes = [
            (can_read, self.config.event_file, "Cannot read event log file"),
            (can_read, self.config.xslt_file, "Cannot read XSLT file"),
            (can_write, self.config.output_file, "Cannot write output file"),
        ]
        for probe, path, reason in probes:
            if not probe(path):
                self._fail(AccessibilityError(str(path), reason))
                return False

        return True

    def _check_file_error(self) -> bool:
        self._log(
            "Error checking files. Please check the following files and necessary access.",
            logging.ERROR,
        )
        if self._error is not None:
            self._log(f"  {self._error}", logging.ERROR)
        return True

    def _prepare_files(self) -> bool:
        """Acquire all three resources, logging every failure.

        All three acquisitions are attempted even after one fails; the run
        only proceeds when all of them succeeded.
        """
        self._log("Preparing files ...")
        ready = True

        try:
            self.pipeline.load()
        except ResourceOpenError as e:
            self._log("Error loading XSLT", logging.ERROR)
            self._log(str(e), logging.ERROR)
            self._fail(e)
            ready = False

        try:
            self._event_source = open_event_source(self.config.event_file)
        except ResourceOpenError as e:
            self._log("Error reading event log file", logging.ERROR)
            self._log(str(e), logging.ERROR)
            self._fail(e)
            ready = False

        try:
            self._output.open()
        except (OSError, ValueError) as e:
            error = ResourceOpenError(
                "output", f"Cannot open output file: {self.config.output_file}", str(e)
            )
            self._log("Error opening output file for writing", logging.ERROR)
            self._log(str(error), logging.ERROR)
            self._fail(error)
            ready = False

        return ready

    def _process_events(self) -> bool:
        self._log("Reading and processing events ...")
        assert self._event_source is not None

        try:
            for record in self._event_source.records():
                line = self.pipeline.transform(record, self.records_processed + 1)
                self._output.write_line(line)
                self.records_processed += 1
                logger.debug(f"Transformed record #{self.records_processed}")
        except TransformError as e:
            error = e
        except Exception as e:
            # reader or output failures while streaming
            error = TransformError(self.records_processed + 1, f"{type(e).__name__}: {e}")
        else:
            self._log(f"Processed {self.records_processed} records")
            return True

        self._log(
            f"Last successfully read record # {self.records_processed}", logging.ERROR
        )
        self._log(str(error), logging.ERROR)
        self._fail(error)
        return False

    # ---------- Teardown ----------

    def close(self) -> None:
        """Release the event source, the output sink and the run log.

        Each release runs even if another one fails, and releasing a
        resource that was never opened does nothing.
        """
        try:
            source, self._event_source = self._event_source, None
            if source is not None:
                source.close()
        finally:
            try:
                self._close_sink(self._output, "Closing output file")
            finally:
                self._close_sink(self._run_log, "Closing log file")

    def _close_sink(self, sink: LineSink, marker: str) -> None:
        if not sink.is_open:
            return
        try:
            self._log(marker)
        finally:
            sink.close()

    def __enter__(self) -> "EventTransformRunner":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def run_event_transform(
    event_file: Union[str, Path, RunConfig],
    xslt_file: Optional[Union[str, Path]] = None,
    output_file: Optional[Union[str, Path]] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> RunOutcome:
    """Transform every record of an event log and release all resources.

    Accepts either a RunConfig or the four paths.

    Args:
        event_file: Path to the .evtx file, or a complete RunConfig.
        xslt_file: Path to the XSLT stylesheet.
        output_file: Path of the output file (truncated).
        log_file: Path of the run log (truncated).

    Returns:
        RunOutcome with the processed record count or the failed stage.

    Example:
        >>> outcome = run_event_transform("System.evtx", "events.xslt", "out.txt", "run.log")
        >>> if outcome.success:
        ...     print(f"Processed {outcome.records_processed} records")
    """
    if isinstance(event_file, RunConfig):
        config = event_file
    else:
        if xslt_file is None or output_file is None or log_file is None:
            raise TypeError("xslt_file, output_file and log_file are required")
        config = RunConfig.from_paths(event_file, xslt_file, output_file, log_file)

    with EventTransformRunner(config) as runner:
        return runner.run()
