"""Unit tests for ELF container reading and segment scanning."""

import pytest

from elf_builder import (
    EM_RISCV,
    EM_X86_64,
    ET_DYN,
    PF_R,
    PF_W,
    PF_X,
    PT_GNU_STACK,
    SegmentSpec,
    build_elf,
    words,
)
from elftrace.container import SegmentScanner, executable_segments, open_image
from elftrace.errors import (
    ImageUnreadable,
    InvalidFormat,
    SegmentReadFailure,
    TruncatedTable,
    UnsupportedArchitecture,
)
from elftrace.utils.types import ElfClass, Endianness


class TestOpenImage:
    """Test header validation and program header parsing."""

    def test_header_fields(self, mixed_elf):
        """Test header attributes of a valid image."""
        image = open_image(mixed_elf)

        assert image.machine == "EM_RISCV"
        assert image.elf_class == ElfClass.ELF64
        assert image.endianness == Endianness.LITTLE
        assert image.elf_type == "ET_EXEC"
        assert image.is_executable
        assert image.entry_point == 0x1000

    def test_segment_table(self, mixed_elf):
        """Test segments are parsed in table order."""
        image = open_image(mixed_elf)

        assert [s.index for s in image.segments] == [0, 1, 2, 3]
        assert [s.type for s in image.segments[:2]] == ["PT_LOAD", "PT_LOAD"]
        assert image.segments[0].load_address == 0x80000000
        assert image.segments[0].file_size == 12
        assert image.segments[3].memory_size == 0x100
        assert [s.index for s in image.code_segments] == [0, 3]

    def test_segment_flags(self, mixed_elf):
        """Test permission flag accessors."""
        code, data = open_image(mixed_elf).segments[:2]

        assert code.readable and code.executable and not code.writable
        assert data.readable and data.writable and not data.executable
        assert code.is_code
        assert not data.is_code

    def test_elf32(self, elf_factory):
        """Test 32-bit containers are accepted by default."""
        path = elf_factory([SegmentSpec(data=words(0x13), vaddr=0x100)], elf_class=32)
        image = open_image(path)

        assert image.elf_class == ElfClass.ELF32
        assert image.segments[0].load_address == 0x100
        assert image.segments[0].executable

    def test_no_program_headers(self, elf_factory):
        """Test an image without program headers has no segments."""
        image = open_image(elf_factory([], e_type=ET_DYN))

        assert image.segments == ()
        assert not image.is_executable

    def test_bad_magic(self, tmp_path):
        """Test a corrupted magic is rejected."""
        raw = bytearray(build_elf([SegmentSpec(data=words(0x13))]))
        raw[1] = ord("X")
        path = tmp_path / "bad.elf"
        path.write_bytes(bytes(raw))

        with pytest.raises(InvalidFormat):
            open_image(path)

    def test_empty_file(self, tmp_path):
        """Test an empty file is not an ELF image."""
        path = tmp_path / "empty"
        path.write_bytes(b"")

        with pytest.raises(InvalidFormat):
            open_image(path)

    def test_truncated_header(self, tmp_path):
        """Test a file cut inside the ELF header is rejected."""
        path = tmp_path / "short.elf"
        path.write_bytes(build_elf([SegmentSpec(data=words(0x13))])[:20])

        with pytest.raises(InvalidFormat):
            open_image(path)

    def test_missing_file(self, tmp_path):
        """Test a missing input raises ImageUnreadable."""
        with pytest.raises(ImageUnreadable):
            open_image(tmp_path / "missing.elf")

    def test_wrong_machine(self, elf_factory):
        """Test a foreign machine is rejected."""
        path = elf_factory([SegmentSpec(data=words(0x13))], machine=EM_X86_64)

        with pytest.raises(UnsupportedArchitecture) as exc_info:
            open_image(path)

        assert exc_info.value.machine == "EM_X86_64"

    def test_configurable_machines(self, elf_factory):
        """Test the accepted machine set can be widened or disabled."""
        path = elf_factory([SegmentSpec(data=words(0x13))], machine=EM_X86_64)

        assert open_image(path, accepted_machines=["EM_RISCV", "EM_X86_64"]).machine == "EM_X86_64"
        assert open_image(path, accepted_machines=None).machine == "EM_X86_64"

    def test_elf_class_policy(self, elf_factory):
        """Test a required ELF class is enforced."""
        path = elf_factory([SegmentSpec(data=words(0x13))], elf_class=32, machine=EM_RISCV)

        with pytest.raises(UnsupportedArchitecture):
            open_image(path, elf_class=64)
        assert open_image(path, elf_class=32).elf_class == ElfClass.ELF32

    def test_truncated_table(self, tmp_path):
        """Test a program header table cut short is rejected."""
        raw = build_elf(
            [SegmentSpec(data=words(0x13)), SegmentSpec(data=words(0x33), vaddr=0x2000)]
        )
        path = tmp_path / "truncated.elf"
        path.write_bytes(raw[: 64 + 56 + 10])

        with pytest.raises(TruncatedTable):
            open_image(path)


class TestSegmentRead:
    """Test bounds-checked segment reads."""

    def test_read_out_of_range(self, two_word_elf):
        """Test reading past the file raises SegmentReadFailure."""
        image = open_image(two_word_elf)

        with pytest.raises(SegmentReadFailure):
            image.read(image.size - 2, 4)

    def test_read_segment(self, two_word_elf):
        """Test a segment's file bytes are returned exactly."""
        image = open_image(two_word_elf)
        segment = image.segments[0]

        assert image.read_segment(segment) == bytes([0x13, 0, 0, 0, 0x33, 0, 0, 0])


class TestExecutableSegments:
    """Test executable segment selection."""

    def test_filters_and_orders(self, mixed_elf):
        """Test only loadable+executable segments are yielded, in order."""
        image = open_image(mixed_elf)
        result = list(executable_segments(image))

        assert [seg.index for seg, _ in result] == [0, 3]
        assert [len(data) for _, data in result] == [12, 10]

    def test_memsz_tail_not_read(self, mixed_elf):
        """Test bytes between filesz and memsz are never produced."""
        image = open_image(mixed_elf)
        segment, data = list(executable_segments(image))[1]

        assert segment.memory_size == 0x100
        assert len(data) == segment.file_size

    def test_no_executable_segments(self, elf_factory):
        """Test an image with only data segments yields nothing."""
        path = elf_factory(
            [
                SegmentSpec(data=words(1, 2), flags=PF_R | PF_W),
                SegmentSpec(data=words(3), p_type=PT_GNU_STACK, flags=PF_R | PF_W | PF_X),
            ]
        )

        assert list(executable_segments(open_image(path))) == []

    def test_unreadable_segment_skipped(self, elf_factory):
        """Test a segment pointing past EOF is skipped with a warning."""
        path = elf_factory(
            [
                SegmentSpec(data=b"", offset=0x10000, filesz=0x100, vaddr=0x1000),
                SegmentSpec(data=words(0x13), vaddr=0x2000),
            ]
        )
        warnings = []
        result = list(executable_segments(open_image(path), warnings))

        assert [seg.index for seg, _ in result] == [1]
        assert len(warnings) == 1
        assert warnings[0].segment_index == 0
        assert not warnings[0].fatal

    def test_memsz_smaller_than_filesz_skipped(self, elf_factory):
        """Test a segment breaking memsz >= filesz is skipped."""
        path = elf_factory([SegmentSpec(data=words(0x13, 0x13), memsz=4)])
        warnings = []

        assert list(executable_segments(open_image(path), warnings)) == []
        assert len(warnings) == 1

    def test_scanner_collects_warnings(self, elf_factory):
        """Test SegmentScanner counts scanned and skipped segments."""
        path = elf_factory(
            [
                SegmentSpec(data=words(0x13), vaddr=0x1000),
                SegmentSpec(data=b"", offset=0x10000, filesz=8, vaddr=0x2000),
            ]
        )
        scanner = SegmentScanner(open_image(path))
        result = list(scanner)

        assert len(result) == 1
        assert scanner.num_scanned == 1
        assert scanner.num_skipped == 1

    def test_segment_past_address_space_skipped(self, elf_factory):
        """Test a segment whose file range wraps past 2**64 is skipped."""
        path = elf_factory(
            [
                SegmentSpec(data=words(0x13, 0x33, 0x73), vaddr=0xFFFFFFFFFFFFFFF8),
                SegmentSpec(data=words(0x13), vaddr=0x2000),
            ]
        )
        warnings = []
        result = list(executable_segments(open_image(path), warnings))

        assert [seg.index for seg, _ in result] == [1]
        assert len(warnings) == 1
        assert warnings[0].segment_index == 0

    def test_segment_ending_at_top_of_address_space(self, elf_factory):
        """Test a segment ending exactly at 2**64 is still traced."""
        path = elf_factory([SegmentSpec(data=words(0x13, 0x33), vaddr=0xFFFFFFFFFFFFFFF8)])

        assert len(list(executable_segments(open_image(path)))) == 1

    def test_elf32_segment_past_address_space_skipped(self, elf_factory):
        """Test the 32-bit address space bounds ELF32 segments."""
        path = elf_factory(
            [SegmentSpec(data=words(0x13, 0x33), vaddr=0xFFFFFFFC)], elf_class=32
        )
        warnings = []

        assert list(executable_segments(open_image(path), warnings)) == []
        assert len(warnings) == 1
