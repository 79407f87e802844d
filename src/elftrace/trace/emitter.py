"""Trace serialization.

The trace is UTF-8 text: a fixed ``#`` header followed by one line per
record in the form ``0x<16 hex>: <8 hex>   <group>``. The layout is a
compatibility surface for downstream tools and must stay byte-stable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from elftrace.errors import DestinationUnwritable
from elftrace.trace.records import InstructionRecord
from elftrace.utils.logging import get_logger

logger = get_logger(__name__)

TRACE_HEADER = (
    "# RISC-V Instruction Trace",
    "# Generated from ELF file",
    "# Address       Instruction   Disassembly",
    "# ---------------------------------------",
)

RECORD_FORMAT = "0x{address:016x}: {word:08x}   {group}"


def format_record(record: InstructionRecord) -> str:
    """Render one record as a trace line (without newline)."""
    return RECORD_FORMAT.format(
        address=record.address,
        word=record.word,
        group=record.group.value,
    )


def render_trace(records: Iterable[InstructionRecord]) -> str:
    """Render a complete trace, header included, as a string."""
    lines = list(TRACE_HEADER)
    lines.extend(format_record(r) for r in records)
    return "\n".join(lines) + "\n"


def check_destination(destination: Union[str, Path]) -> Path:
    """Check that ``destination`` can be created or truncated.

    Nothing is written, so a failed run leaves no trace behind.

    Raises:
        DestinationUnwritable: If the path is a directory or its parent is
            missing or not writable
    """
    path = Path(destination)
    if path.is_dir():
        raise DestinationUnwritable(f"Failed to open trace file: {path} is a directory", path=path)

    parent = path.parent
    if not parent.is_dir():
        raise DestinationUnwritable(
            f"Failed to open trace file: {path}: directory {parent} does not exist",
            path=path,
        )
    if path.exists():
        if not os.access(path, os.W_OK):
            raise DestinationUnwritable(f"Failed to open trace file: {path}: permission denied", path=path)
    elif not os.access(parent, os.W_OK):
        raise DestinationUnwritable(
            f"Failed to open trace file: {path}: directory {parent} is not writable",
            path=path,
        )
    return path


class TraceWriter:
    """Context manager that owns an open trace destination.

    The header is written on entry; the file is closed on exit whether or
    not the body completed.

    Example:
        with TraceWriter("out.trace") as writer:
            for record in records:
                writer.write(record)
    """

    def __init__(self, destination: Union[str, Path]):
        self.path = Path(destination)
        self.count = 0
        self.opened = False
        self._stream: Optional[TextIO] = None

    def __enter__(self) -> "TraceWriter":
        try:
            self._stream = open(self.path, "w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise DestinationUnwritable(
                f"Failed to open trace file: {self.path}: {e.strerror}", path=self.path
            ) from e
        self.opened = True
        try:
            for line in TRACE_HEADER:
                self._stream.write(line + "\n")
        except OSError as e:
            self.__exit__()
            raise self._write_error(e) from e
        return self

    def _write_error(self, error: OSError) -> DestinationUnwritable:
        return DestinationUnwritable(
            f"Failed to write trace file: {self.path}: {error.strerror or error}", path=self.path
        )

    def write(self, record: InstructionRecord) -> None:
        if self._stream is None:
            raise RuntimeError("TraceWriter is not open")
        try:
            self._stream.write(format_record(record) + "\n")
        except OSError as e:
            raise self._write_error(e) from e
        self.count += 1

    def __exit__(self, *args) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            try:
                stream.close()
            except OSError as e:
                raise self._write_error(e) from e


def write_trace(
    destination: Union[str, Path],
    records: Iterable[InstructionRecord],
) -> int:
    """Write ``records`` to ``destination``, truncating existing content.

    ``records`` may be a lazy iterator; lines are written in iteration order.

    Args:
        destination: Output trace path
        records: Records to serialize

    Returns:
        Number of records written

    Raises:
        DestinationUnwritable: If the destination cannot be opened or written
    """
    writer = TraceWriter(destination)
    try:
        with writer:
            for record in records:
                writer.write(record)
    except BaseException:
        # A partial trace is never left behind
        if writer.opened:
            writer.path.unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote {writer.count} records to {writer.path}")
    return writer.count
