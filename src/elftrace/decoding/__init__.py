"""Word classification for elftrace.

Maps fixed-width instruction words to coarse operation groups.
"""

from elftrace.decoding.classifier import (
    OperationGroup,
    OPCODE_GROUPS,
    OPCODE_MASK,
    classify,
    opcode_of,
    read_word,
    iter_words,
)

__all__ = [
    "OperationGroup",
    "OPCODE_GROUPS",
    "OPCODE_MASK",
    "classify",
    "opcode_of",
    "read_word",
    "iter_words",
]
