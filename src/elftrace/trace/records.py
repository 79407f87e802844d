"""Trace record types."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from elftrace.decoding.classifier import OperationGroup


@dataclass(frozen=True)
class InstructionRecord:
    """One classified word at its load address."""

    address: int
    word: int
    group: OperationGroup

    def __post_init__(self):
        if not 0 <= self.address < 1 << 64:
            raise ValueError(f"Address out of 64-bit range: {self.address:#x}")
        if not 0 <= self.word < 1 << 32:
            raise ValueError(f"Word out of 32-bit range: {self.word:#x}")


@dataclass
class TraceSummary:
    """Outcome of one trace run."""

    input_path: Path
    output_path: Path
    machine: str
    entry_point: int
    num_segments: int = 0
    num_skipped: int = 0
    num_records: int = 0
    group_counts: Counter = field(default_factory=Counter)
    warnings: list[str] = field(default_factory=list)
    trace_sha256: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
            "machine": self.machine,
            "entry_point": self.entry_point,
            "num_segments": self.num_segments,
            "num_skipped": self.num_skipped,
            "num_records": self.num_records,
            "group_counts": {str(k): v for k, v in sorted(self.group_counts.items())},
            "warnings": list(self.warnings),
            "trace_sha256": self.trace_sha256,
        }
