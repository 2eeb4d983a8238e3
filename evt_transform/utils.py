"""Utility functions for file accessibility checks and format detection.

This module provides the readiness probes the runner uses as a gate before
any resource is opened. The probes never raise: every failure is reported
as ``False``.
"""

from pathlib import Path
from typing import Union

EVTX_SIGNATURE = b"ElfFile\x00"
EVTX_SIGNATURE_OFFSET = 0x00


def can_read(path: Union[str, Path]) -> bool:
    """Check whether a file exists, is non-empty and can be opened for reading.

    Zero-length files are treated as unusable rather than as an empty input.
    The file is opened and immediately closed as a readiness probe.

    Args:
        path: Path of the file to probe.

    Returns:
        True if the file can be read, False otherwise.

    Example:
        >>> can_read("Security.evtx")   # Existing log file
        True
        >>> can_read("missing.evtx")
        False
    """
    try:
        file_path = Path(path)
        if not file_path.is_file():
            return False

        # return False for zero length files
        if file_path.stat().st_size == 0:
            return False

        with file_path.open("rb"):
            pass
    except (OSError, ValueError):
        return False

    return True


def can_write(path: Union[str, Path]) -> bool:
    """Check whether a file can be created or truncated for writing.

    Note that the probe itself creates or truncates the file. A positive
    result does not guarantee the file stays writable afterwards.

    Args:
        path: Path of the file to probe.

    Returns:
        True if opening the file for writing succeeded, False otherwise.

    Example:
        >>> can_write("out/result.txt")          # Existing directory
        True
        >>> can_write("missing-dir/result.txt")
        False
    """
    try:
        with Path(path).open("w", encoding="utf-8"):
            pass
    except (OSError, ValueError):
        return False

    return True


def has_evtx_signature(path: Union[str, Path]) -> bool:
    """Check whether a file starts with the EVTX file header magic.

    Modern Windows Event Log files (.evtx) begin with the bytes
    ``ElfFile\\x00``.

    Args:
        path: Path of the file to check.

    Returns:
        True if the signature is present, False if it is missing or the file
        cannot be read.
    """
    try:
        with Path(path).open("rb") as f:
            f.seek(EVTX_SIGNATURE_OFFSET)
            header = f.read(len(EVTX_SIGNATURE))
    except OSError:
        return False

    return header == EVTX_SIGNATURE
