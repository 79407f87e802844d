"""Parsing of trace files back into records."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

from elftrace.decoding.classifier import OperationGroup
from elftrace.errors import TraceFormatError
from elftrace.trace.records import InstructionRecord

_LINE_RE = re.compile(r"^0x([0-9a-f]{16}): ([0-9a-f]{8})   (\S+)$")


def parse_trace_line(line: str, line_number: Optional[int] = None) -> Optional[InstructionRecord]:
    """Parse one trace line.

    Returns:
        The record, or None for header and blank lines

    Raises:
        TraceFormatError: If a data line does not match the trace layout
    """
    line = line.rstrip("\n")
    if not line or line.startswith("#"):
        return None

    match = _LINE_RE.match(line)
    if match is None:
        raise TraceFormatError(f"Malformed trace line: {line!r}", line_number=line_number)

    address, word, label = match.groups()
    try:
        group = OperationGroup(label)
    except ValueError as e:
        raise TraceFormatError(f"Unknown group label {label!r}", line_number=line_number) from e

    return InstructionRecord(address=int(address, 16), word=int(word, 16), group=group)


def read_trace(path: Union[str, Path]) -> list[InstructionRecord]:
    """Read every record from a trace file, in file order."""
    path = Path(path)
    records = []
    with open(path, encoding="utf-8") as f:
        for number, line in enumerate(f, 1):
            try:
                record = parse_trace_line(line, number)
            except TraceFormatError as e:
                e.path = path
                raise
            if record is not None:
                records.append(record)
    return records
