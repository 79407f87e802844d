"""ELF container reader.

Opens an image, validates its identification and machine, and parses the
program header table into ``Segment`` objects. The whole file is read into
memory up front, so the handle is closed before ``open_image`` returns and
segment bytes are served from the in-memory copy.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from elftrace.errors import (
    ImageUnreadable,
    InvalidFormat,
    SegmentReadFailure,
    TruncatedTable,
    UnsupportedArchitecture,
)
from elftrace.utils.logging import get_logger
from elftrace.utils.types import (
    DEFAULT_MACHINES,
    ELF_MAGIC,
    PT_LOAD,
    ElfClass,
    Endianness,
    SegmentFlag,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Segment:
    """One entry of the program header table."""

    index: int
    type: str
    flags: int
    load_address: int
    offset: int
    file_size: int
    memory_size: int
    alignment: int = 0

    @property
    def readable(self) -> bool:
        return bool(self.flags & SegmentFlag.R)

    @property
    def writable(self) -> bool:
        return bool(self.flags & SegmentFlag.W)

    @property
    def executable(self) -> bool:
        return bool(self.flags & SegmentFlag.X)

    @property
    def is_loadable(self) -> bool:
        return self.type == PT_LOAD

    @property
    def is_code(self) -> bool:
        """True for segments that contribute words to the trace."""
        return self.is_loadable and self.executable

    @property
    def end_address(self) -> int:
        """End of the file-backed range (exclusive)."""
        return self.load_address + self.file_size

    @property
    def memory_end_address(self) -> int:
        return self.load_address + self.memory_size

    def contains(self, address: int) -> bool:
        """Check whether ``address`` lies in the file-backed range."""
        return self.load_address <= address < self.end_address


@dataclass
class BinaryImage:
    """An opened ELF image with its segment table materialized.

    Attributes:
        path: Source path of the image
        machine: ``e_machine`` name, e.g. ``EM_RISCV``
        elf_class: 32 or 64 bit container
        endianness: Data encoding used for words
        elf_type: ``e_type`` name, e.g. ``ET_EXEC``
        entry_point: Program entry address
        segments: Program headers in table order
    """

    path: Path
    machine: str
    elf_class: ElfClass
    endianness: Endianness
    elf_type: str
    entry_point: int
    segments: tuple[Segment, ...] = ()
    raw: bytes = field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.raw)

    @property
    def is_executable(self) -> bool:
        return self.elf_type == "ET_EXEC"

    @property
    def code_segments(self) -> list[Segment]:
        return [seg for seg in self.segments if seg.is_code]

    def read(self, offset: int, size: int) -> bytes:
        """Return exactly ``size`` bytes at file ``offset``.

        Raises:
            SegmentReadFailure: If the range is not fully inside the file
        """
        if offset < 0 or size < 0 or offset + size > len(self.raw):
            raise SegmentReadFailure(
                f"Cannot read {size} bytes at offset {offset:#x} "
                f"(image is {len(self.raw)} bytes)",
                path=self.path,
            )
        return self.raw[offset : offset + size]

    def read_segment(self, segment: Segment) -> bytes:
        """Return the file-backed bytes of ``segment``."""
        if segment.memory_size < segment.file_size:
            raise SegmentReadFailure(
                f"Segment {segment.index} has memsz {segment.memory_size:#x} "
                f"smaller than filesz {segment.file_size:#x}",
                segment_index=segment.index,
                path=self.path,
            )
        if segment.end_address > 1 << self.elf_class.value:
            raise SegmentReadFailure(
                f"Segment {segment.index} at {segment.load_address:#x} with filesz "
                f"{segment.file_size:#x} runs past the ELF{self.elf_class.value} address space",
                segment_index=segment.index,
                path=self.path,
            )
        try:
            return self.read(segment.offset, segment.file_size)
        except SegmentReadFailure as e:
            raise SegmentReadFailure(
                f"Failed to read segment {segment.index}: {e}",
                segment_index=segment.index,
                path=self.path,
            ) from e


def _machine_name(value: Union[str, int]) -> str:
    # pyelftools returns the raw number for machines it has no name for
    return value if isinstance(value, str) else f"EM_{value}"


def _parse_segments(elf: ELFFile, raw: bytes, path: Path) -> tuple[Segment, ...]:
    header = elf.header
    count = elf.num_segments()
    if count == 0:
        return ()

    table_end = header["e_phoff"] + count * header["e_phentsize"]
    if table_end > len(raw):
        raise TruncatedTable(
            f"Program header table ends at {table_end:#x}, "
            f"past end of file ({len(raw):#x} bytes)",
            path=path,
        )

    segments = []
    for i in range(count):
        try:
            phdr = elf.get_segment(i)
        except ELFError as e:
            raise TruncatedTable(f"Failed to read program header {i}: {e}", path=path) from e
        segments.append(
            Segment(
                index=i,
                type=str(phdr["p_type"]),
                flags=int(phdr["p_flags"]),
                load_address=int(phdr["p_vaddr"]),
                offset=int(phdr["p_offset"]),
                file_size=int(phdr["p_filesz"]),
                memory_size=int(phdr["p_memsz"]),
                alignment=int(phdr["p_align"]),
            )
        )
    return tuple(segments)


def open_image(
    path: Union[str, Path],
    accepted_machines: Optional[Iterable[str]] = DEFAULT_MACHINES,
    elf_class: Optional[int] = None,
) -> BinaryImage:
    """Open and validate an ELF image.

    Args:
        path: Path to the ELF file
        accepted_machines: ``e_machine`` names the caller can trace; None
            accepts any machine
        elf_class: Require a 32 or 64 bit container; None accepts both

    Returns:
        The parsed image

    Raises:
        ImageUnreadable: If the file cannot be read
        InvalidFormat: If the file is not an ELF container
        UnsupportedArchitecture: If machine or class is not accepted
        TruncatedTable: If the program header table is incomplete
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ImageUnreadable(f"Failed to open ELF file: {path}: {e.strerror}", path=path) from e

    if raw[: len(ELF_MAGIC)] != ELF_MAGIC:
        raise InvalidFormat(f"Not an ELF file: {path}", path=path)

    try:
        elf = ELFFile(io.BytesIO(raw))
        header = elf.header
    except ELFError as e:
        raise InvalidFormat(f"Malformed ELF header in {path}: {e}", path=path) from e

    if len(raw) < ElfClass(elf.elfclass).header_size:
        raise InvalidFormat(f"ELF header of {path} is truncated", path=path)

    machine = _machine_name(header["e_machine"])
    accepted = set(accepted_machines) if accepted_machines is not None else None
    if accepted is not None and machine not in accepted:
        raise UnsupportedArchitecture(
            f"Unsupported machine {machine} in {path} (accepted: {', '.join(sorted(accepted))})",
            machine=machine,
            path=path,
        )
    if elf_class is not None and elf.elfclass != elf_class:
        raise UnsupportedArchitecture(
            f"{path} is ELF{elf.elfclass}, expected ELF{elf_class}",
            machine=machine,
            path=path,
        )

    try:
        segments = _parse_segments(elf, raw, path)
    except ELFError as e:
        raise TruncatedTable(f"Failed to read program header table of {path}: {e}", path=path) from e

    image = BinaryImage(
        path=path,
        machine=machine,
        elf_class=ElfClass(elf.elfclass),
        endianness=Endianness.from_elf(elf.little_endian),
        elf_type=str(header["e_type"]),
        entry_point=int(header["e_entry"]),
        segments=segments,
        raw=raw,
    )

    logger.info(f"ELF Type: {'Executable' if image.is_executable else 'Other'}")
    logger.info(f"Entry Point: {image.entry_point:#x}")
    logger.info(f"Machine: {image.machine} (ELF{image.elf_class.value}, {image.endianness.value}-endian)")
    logger.debug(f"{len(segments)} program headers in {path}")

    return image
