"""Custom exceptions for the event log transformer.

This module defines the exception hierarchy used throughout the library.
Each exception corresponds to one stage of a run, so a failed run can always
be attributed to the stage that raised it.
"""

from __future__ import annotations

from typing import Optional


class EvtTransformError(Exception):
    """Base exception for all event log transformer errors.

    All custom exceptions in this library inherit from this base class,
    allowing users to catch all transformer-related errors with a single except block.
    """

    pass


class ConfigurationError(EvtTransformError):
    """Raised when the run log cannot be opened for writing.

    The run log is the only diagnostic channel of a run, so this error is
    reported through the process' own output instead.
    """

    def __init__(self, log_file: str, details: Optional[str] = None) -> None:
        self.log_file = log_file
        self.details = details
        message = f"Error initializing log file: {log_file}"
        if details:
            message += f" ({details})"
        super().__init__(message)


class AccessibilityError(EvtTransformError):
    """Raised when a configured file fails its accessibility probe.

    This can occur when:
    - The event log or stylesheet does not exist, is empty or cannot be read
    - The output file cannot be created or truncated
    """

    def __init__(self, path: str, reason: str) -> None:
        """Initialize the exception with the offending path.

        Args:
            path: The path that failed the probe.
            reason: Short description of the failed check.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ResourceOpenError(EvtTransformError):
    """Raised when a resource cannot be acquired while preparing a run.

    Covers stylesheet compilation, opening the event source and opening
    the output file.
    """

    def __init__(
        self,
        resource: str,
        message: str,
        details: Optional[str] = None,
    ) -> None:
        """Initialize the error with the failing resource.

        Args:
            resource: Label of the resource (``xslt``, ``event log``, ``output``).
            message: Human-readable error description.
            details: Underlying error text (if available).
        """
        self.resource = resource
        self.details = details

        error_parts = [f"[{resource}] {message}"]
        if details:
            error_parts.append(details)

        super().__init__(" | ".join(error_parts))


class TransformError(EvtTransformError):
    """Raised when a single event record cannot be serialized, parsed or transformed."""

    def __init__(self, record_index: int, details: str) -> None:
        self.record_index = record_index
        self.details = details
        super().__init__(f"Failed to transform record #{record_index}: {details}")
