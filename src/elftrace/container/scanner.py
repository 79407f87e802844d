"""Selection of executable load segments.

Walks the program header table in order and yields the file-backed bytes
of every ``PT_LOAD`` segment with the execute flag. A segment whose bytes
cannot be read is skipped with a warning instead of failing the run.
"""

from __future__ import annotations

from typing import Iterator, Optional

from elftrace.container.reader import BinaryImage, Segment
from elftrace.errors import SegmentReadFailure
from elftrace.utils.logging import get_logger
from elftrace.utils.types import SegmentFlag

logger = get_logger(__name__)


def executable_segments(
    image: BinaryImage,
    warnings: Optional[list[SegmentReadFailure]] = None,
) -> Iterator[tuple[Segment, bytes]]:
    """Yield ``(segment, data)`` for each loadable, executable segment.

    Args:
        image: Opened image
        warnings: If given, skipped segments are appended as
            ``SegmentReadFailure`` instances

    Yields:
        Segments in table order with exactly ``file_size`` bytes of data
    """
    for segment in image.segments:
        if not segment.is_code:
            continue

        logger.info(
            f"Executable segment: {segment.load_address:#x} - "
            f"{segment.memory_end_address:#x} (size: {segment.memory_size}) "
            f"[{SegmentFlag.describe(segment.flags)}]"
        )

        try:
            data = image.read_segment(segment)
        except SegmentReadFailure as e:
            logger.warning(f"Skipping segment {segment.index}: {e}")
            if warnings is not None:
                warnings.append(e)
            continue

        yield segment, data


class SegmentScanner:
    """Iterable view over an image's executable segments.

    Collects the warnings raised while scanning so callers can report them
    after the run.

    Example:
        scanner = SegmentScanner(image)
        for segment, data in scanner:
            ...
        print(len(scanner.warnings))
    """

    def __init__(self, image: BinaryImage):
        self.image = image
        self.warnings: list[SegmentReadFailure] = []
        self.num_scanned = 0

    def __iter__(self) -> Iterator[tuple[Segment, bytes]]:
        for segment, data in executable_segments(self.image, self.warnings):
            self.num_scanned += 1
            yield segment, data

    @property
    def num_skipped(self) -> int:
        return len(self.warnings)
