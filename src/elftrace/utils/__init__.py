"""Utility functions and common types for elftrace."""

from elftrace.utils.types import (
    ELF_MAGIC,
    WORD_SIZE,
    PT_LOAD,
    DEFAULT_MACHINES,
    SegmentFlag,
    ElfClass,
    Endianness,
)
from elftrace.utils.logging import setup_logging, get_logger
from elftrace.utils.hashing import compute_content_hash, compute_file_hash

__all__ = [
    "ELF_MAGIC",
    "WORD_SIZE",
    "PT_LOAD",
    "DEFAULT_MACHINES",
    "SegmentFlag",
    "ElfClass",
    "Endianness",
    "setup_logging",
    "get_logger",
    "compute_content_hash",
    "compute_file_hash",
]
