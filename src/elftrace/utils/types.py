"""Core ELF constants and small value types shared across elftrace."""

from __future__ import annotations

from enum import Enum, IntFlag

ELF_MAGIC = b"\x7fELF"

# Width in bytes of one classified word.
WORD_SIZE = 4

PT_LOAD = "PT_LOAD"

# Machines the tool knows how to label; anything else is reported by name.
DEFAULT_MACHINES = ("EM_RISCV",)


class SegmentFlag(IntFlag):
    """Program header permission bits (``p_flags``)."""

    X = 0x1
    W = 0x2
    R = 0x4

    @classmethod
    def describe(cls, flags: int) -> str:
        """Render flags the way readelf does, e.g. ``R E``."""
        return "".join(
            [
                "R" if flags & cls.R else " ",
                "W" if flags & cls.W else " ",
                "E" if flags & cls.X else " ",
            ]
        )


class ElfClass(int, Enum):
    """ELF file class (``EI_CLASS``)."""

    ELF32 = 32
    ELF64 = 64

    @property
    def header_size(self) -> int:
        """Size of the ELF file header for this class."""
        return 64 if self is ElfClass.ELF64 else 52


class Endianness(str, Enum):
    """Data encoding of the image (``EI_DATA``)."""

    LITTLE = "little"
    BIG = "big"

    @classmethod
    def from_elf(cls, little_endian: bool) -> "Endianness":
        return cls.LITTLE if little_endian else cls.BIG
