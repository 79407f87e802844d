"""Coarse classification of 32-bit instruction words.

Each word is labelled with its RISC-V major opcode group, taken from the
low seven bits. No operand, register or immediate decoding is done: the
label only says which structural family the encoding belongs to.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, Union

from elftrace.utils.types import WORD_SIZE, Endianness

# Low seven bits of a word select its major opcode.
OPCODE_MASK = 0x7F

WORD_MASK = 0xFFFFFFFF


class OperationGroup(str, Enum):
    """Major opcode groups reported in the trace."""

    LOAD = "LOAD"
    FENCE = "FENCE"
    OP_IMM = "OP-IMM"
    AUIPC = "AUIPC"
    OP_IMM_32 = "OP-IMM-32"
    STORE = "STORE"
    AMO = "AMO"
    OP = "OP"
    LUI = "LUI"
    OP_32 = "OP-32"
    BRANCH = "BRANCH"
    JALR = "JALR"
    JAL = "JAL"
    SYSTEM = "SYSTEM"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


OPCODE_GROUPS: dict[int, OperationGroup] = {
    0x03: OperationGroup.LOAD,
    0x0F: OperationGroup.FENCE,
    0x13: OperationGroup.OP_IMM,
    0x17: OperationGroup.AUIPC,
    0x1B: OperationGroup.OP_IMM_32,
    0x23: OperationGroup.STORE,
    0x2F: OperationGroup.AMO,
    0x33: OperationGroup.OP,
    0x37: OperationGroup.LUI,
    0x3B: OperationGroup.OP_32,
    0x63: OperationGroup.BRANCH,
    0x67: OperationGroup.JALR,
    0x6F: OperationGroup.JAL,
    0x73: OperationGroup.SYSTEM,
}


def opcode_of(word: int) -> int:
    """Return the major opcode selector of a word."""
    if not 0 <= word <= WORD_MASK:
        raise ValueError(f"Word out of 32-bit range: {word:#x}")
    return word & OPCODE_MASK


def classify(word: int) -> OperationGroup:
    """Classify a 32-bit word into its operation group.

    Args:
        word: Unsigned 32-bit instruction word

    Returns:
        The group for the word's major opcode, ``UNKNOWN`` if unmapped
    """
    return OPCODE_GROUPS.get(opcode_of(word), OperationGroup.UNKNOWN)


def read_word(
    buf: bytes,
    offset: int,
    byteorder: Union[Endianness, str] = Endianness.LITTLE,
) -> int:
    """Read one word from ``buf`` at ``offset`` with explicit endianness.

    Raises:
        IndexError: If fewer than four bytes are available at ``offset``
    """
    if offset < 0 or offset + WORD_SIZE > len(buf):
        raise IndexError(
            f"Word at offset {offset:#x} exceeds buffer of {len(buf)} bytes"
        )
    return int.from_bytes(buf[offset : offset + WORD_SIZE], Endianness(byteorder).value)


def iter_words(
    data: bytes,
    base_address: int,
    byteorder: Union[Endianness, str] = Endianness.LITTLE,
) -> Iterator[tuple[int, int]]:
    """Yield ``(address, word)`` for every whole word in ``data``.

    A trailing partial word (``len(data) % 4`` bytes) is dropped.
    """
    whole = len(data) - len(data) % WORD_SIZE
    for offset in range(0, whole, WORD_SIZE):
        yield base_address + offset, read_word(data, offset, byteorder)
