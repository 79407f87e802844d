"""ELF container access for elftrace.

- open_image: validates an ELF image and parses its program headers
- executable_segments / SegmentScanner: yield loadable, executable segment bytes
"""

from elftrace.container.reader import BinaryImage, Segment, open_image
from elftrace.container.scanner import SegmentScanner, executable_segments

__all__ = [
    "BinaryImage",
    "Segment",
    "open_image",
    "SegmentScanner",
    "executable_segments",
]
