"""Exception taxonomy for elftrace.

Library code raises these; only the command-line layer turns them into
exit codes and diagnostics. ``SegmentReadFailure`` is the one non-fatal
error: the scanner records it and moves on to the next segment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ElfTraceError(Exception):
    """Base class for all elftrace errors."""

    fatal: bool = True

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class ImageUnreadable(ElfTraceError):
    """Raised when the input image cannot be opened or read."""


class InvalidFormat(ElfTraceError):
    """Raised when the input is not a recognized ELF container."""


class UnsupportedArchitecture(ElfTraceError):
    """Raised when the image targets a machine outside the accepted set."""

    def __init__(
        self,
        message: str,
        machine: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.machine = machine
        super().__init__(message, path)


class TruncatedTable(ElfTraceError):
    """Raised when the program header table cannot be read to completion."""


class SegmentReadFailure(ElfTraceError):
    """Raised when one segment's file-backed bytes cannot be read."""

    fatal = False

    def __init__(
        self,
        message: str,
        segment_index: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.segment_index = segment_index
        super().__init__(message, path)


class DestinationUnwritable(ElfTraceError):
    """Raised when the trace destination cannot be created or truncated."""


class TraceFormatError(ElfTraceError):
    """Raised when a trace line does not match the trace layout."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.line_number = line_number
        super().__init__(message, path)


class ConfigError(ElfTraceError):
    """Raised for unreadable or invalid configuration."""
