"""Event Log Transformer - apply XSLT stylesheets to Windows Event Log records.

This library provides functionality to:
- Read Windows Event Log (.evtx) files record by record (cross-platform, via python-evtx)
- Transform every record's XML with a user-supplied XSLT stylesheet (via lxml)
- Write one output line per record while tracing the run into a separate run log

The library offers:
- A run controller that validates files, acquires resources and streams records
- File accessibility probes used as a gate before any resource is opened
- A typed exception per failure stage
- A thin command-line interface

Basic Usage:
    Single run:
        >>> from evt_transform import run_event_transform
        >>> outcome = run_event_transform("Security.evtx", "events.xslt", "out.txt", "run.log")
        >>> if outcome.success:
        ...     print(f"Processed {outcome.records_processed} records")

    Probing files:
        >>> from evt_transform import can_read, can_write
        >>> can_read("Security.evtx") and can_write("out.txt")
        True

Platform Requirements:
    - Python 3.8+
    - lxml and python-evtx

For more information, see the documentation for individual functions and classes.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .runner import (
    RunState,
    RunStatus,
    RunConfig,
    RunOutcome,
    EventTransformRunner,
    run_event_transform,
)

from .exceptions import (
    EvtTransformError,
    ConfigurationError,
    AccessibilityError,
    ResourceOpenError,
    TransformError,
)

from .reader import EvtxEventSource, open_event_source

from .transform import TransformPipeline

from .utils import can_read, can_write, has_evtx_signature

__all__ = [
    # Main entry points
    "run_event_transform",
    "EventTransformRunner",
    # Data classes and enums
    "RunState",
    "RunStatus",
    "RunConfig",
    "RunOutcome",
    # Building blocks
    "EvtxEventSource",
    "open_event_source",
    "TransformPipeline",
    # Exceptions
    "EvtTransformError",
    "ConfigurationError",
    "AccessibilityError",
    "ResourceOpenError",
    "TransformError",
    # Utility functions
    "can_read",
    "can_write",
    "has_evtx_signature",
    # Metadata
    "__version__",
    "__license__",
]
