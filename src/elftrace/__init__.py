"""elftrace: instruction traces from ELF executable segments.

Reads an ELF image, walks every loadable and executable segment as a
stream of 32-bit words, labels each word with its RISC-V major opcode
group and writes one line per word to a text trace.

Key Components:
    - container: ELF validation, program headers and segment bytes
    - decoding: word extraction and opcode-group classification
    - trace: trace records, writer and reader
    - pipeline: end-to-end run producing a trace file
    - config: run configuration and presets

Example:
    >>> from elftrace import run_trace
    >>> summary = run_trace("firmware.elf", "firmware.trace")
    >>> summary.num_records
    1024
"""

__version__ = "0.1.0"
__author__ = "elftrace developers"

from elftrace.config import TraceConfig
from elftrace.container import BinaryImage, Segment, SegmentScanner, executable_segments, open_image
from elftrace.decoding import OperationGroup, classify
from elftrace.errors import (
    ElfTraceError,
    ImageUnreadable,
    InvalidFormat,
    UnsupportedArchitecture,
    TruncatedTable,
    SegmentReadFailure,
    DestinationUnwritable,
    TraceFormatError,
    ConfigError,
)
from elftrace.pipeline import extract_records, run_trace
from elftrace.trace import InstructionRecord, TraceSummary, read_trace, write_trace

__all__ = [
    # Config
    "TraceConfig",
    # Container
    "BinaryImage",
    "Segment",
    "SegmentScanner",
    "executable_segments",
    "open_image",
    # Decoding
    "OperationGroup",
    "classify",
    # Errors
    "ElfTraceError",
    "ImageUnreadable",
    "InvalidFormat",
    "UnsupportedArchitecture",
    "TruncatedTable",
    "SegmentReadFailure",
    "DestinationUnwritable",
    "TraceFormatError",
    "ConfigError",
    # Pipeline
    "extract_records",
    "run_trace",
    # Trace
    "InstructionRecord",
    "TraceSummary",
    "read_trace",
    "write_trace",
]
