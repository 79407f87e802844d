"""End-to-end trace generation.

Connects the container reader, segment scanner, word classifier and
trace emitter. Records are streamed straight into the emitter in table
then address order, so memory use does not grow with the image.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Iterator, Optional, Union

from elftrace.config import TraceConfig
from elftrace.container import BinaryImage, executable_segments, open_image
from elftrace.decoding import classify, iter_words
from elftrace.errors import SegmentReadFailure
from elftrace.trace import InstructionRecord, TraceSummary, check_destination, write_trace
from elftrace.utils.hashing import compute_file_hash
from elftrace.utils.logging import get_logger

logger = get_logger(__name__)


def extract_records(
    image: BinaryImage,
    warnings: Optional[list[SegmentReadFailure]] = None,
) -> Iterator[InstructionRecord]:
    """Yield a record for every whole word of every executable segment.

    Args:
        image: Opened image
        warnings: Collects segments that had to be skipped

    Yields:
        Records in segment table order, then increasing address
    """
    for segment, data in executable_segments(image, warnings):
        for address, word in iter_words(data, segment.load_address, image.endianness):
            yield InstructionRecord(address=address, word=word, group=classify(word))


def _counted(
    records: Iterator[InstructionRecord], counts: Counter
) -> Iterator[InstructionRecord]:
    for record in records:
        counts[record.group] += 1
        yield record


def run_trace(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[TraceConfig] = None,
) -> TraceSummary:
    """Generate a trace file from an ELF image.

    Fatal errors surface before the output is touched, so a rejected input
    never leaves a trace file behind.

    Args:
        input_path: ELF image to read
        output_path: Trace file to create or truncate
        config: Run configuration (defaults to ``TraceConfig()``)

    Returns:
        Summary of the run
    """
    config = config or TraceConfig()
    output_path = Path(output_path)

    image = open_image(
        input_path,
        accepted_machines=config.accepted_machines,
        elf_class=config.elf_class,
    )

    if config.check_destination:
        check_destination(output_path)

    summary = TraceSummary(
        input_path=image.path,
        output_path=output_path,
        machine=image.machine,
        entry_point=image.entry_point,
    )
    warnings: list[SegmentReadFailure] = []
    records = _counted(extract_records(image, warnings), summary.group_counts)

    summary.num_records = write_trace(output_path, records)
    summary.num_skipped = len(warnings)
    summary.num_segments = len(image.code_segments) - summary.num_skipped
    summary.warnings = [str(w) for w in warnings]
    summary.trace_sha256 = compute_file_hash(output_path)

    logger.info(f"Extracted {summary.num_records} instructions")
    if summary.num_skipped:
        logger.warning(f"{summary.num_skipped} executable segment(s) could not be read")
    logger.info(f"Trace file generated: {output_path}")

    return summary
