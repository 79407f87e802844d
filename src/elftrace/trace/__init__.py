"""Trace records and their text serialization.

- InstructionRecord: one classified word at its load address
- write_trace / TraceWriter: serialize records to a trace file
- read_trace: parse a trace file back into records
"""

from elftrace.trace.records import InstructionRecord, TraceSummary
from elftrace.trace.emitter import (
    TRACE_HEADER,
    TraceWriter,
    check_destination,
    format_record,
    render_trace,
    write_trace,
)
from elftrace.trace.reader import parse_trace_line, read_trace

__all__ = [
    "InstructionRecord",
    "TraceSummary",
    "TRACE_HEADER",
    "TraceWriter",
    "check_destination",
    "format_record",
    "render_trace",
    "write_trace",
    "parse_trace_line",
    "read_trace",
]
