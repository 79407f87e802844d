"""Shared fixtures for elftrace tests."""

import pytest
from loguru import logger

from elf_builder import SegmentSpec, build_elf, words


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks added by a test so later tests never log to closed streams."""
    yield
    logger.remove()


@pytest.fixture
def elf_factory(tmp_path):
    """Write an ELF image built from segment specs and return its path."""

    def factory(segments=(), name="image.elf", **kwargs):
        path = tmp_path / name
        path.write_bytes(build_elf(segments, **kwargs))
        return path

    return factory


@pytest.fixture
def two_word_elf(elf_factory):
    """Image with one 8-byte code segment at 0x1000: addi then add."""
    return elf_factory([SegmentSpec(data=bytes([0x13, 0, 0, 0, 0x33, 0, 0, 0]), vaddr=0x1000)])


@pytest.fixture
def mixed_elf(elf_factory):
    """Image with code, data and stack segments, code split in two."""
    return elf_factory(
        [
            SegmentSpec(data=words(0x00000297, 0x00028293, 0x0000006F), vaddr=0x80000000),
            SegmentSpec(data=words(0xDEADBEEF, 0x12345678), vaddr=0x80001000, flags=0x6),
            SegmentSpec(data=b"", vaddr=0, flags=0x6, p_type=0x6474E551),
            SegmentSpec(
                data=words(0x00008067, 0x00000073) + b"\xaa\xbb",
                vaddr=0x80002000,
                memsz=0x100,
            ),
        ]
    )
