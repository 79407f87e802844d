"""Command-line interface for elftrace.

Provides commands for:
- Generating an instruction trace from an ELF image
- Inspecting an image's program header table
- Listing the opcode groups used in traces

``elf2trace INPUT OUTPUT`` is the two-argument form of ``elftrace trace``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import typer
from rich.console import Console
from rich.table import Table

from elftrace.config import TraceConfig
from elftrace.errors import ElfTraceError
from elftrace.utils.logging import get_logger

app = typer.Typer(
    name="elftrace",
    help="ELF executable segment instruction tracer",
    add_completion=False,
)

logger = get_logger(__name__)
console = Console()
err_console = Console(stderr=True)


def _fail(error: Union[Exception, str]) -> None:
    err_console.print(f"ERROR: {error}", style="bold red", markup=False, soft_wrap=True)
    raise typer.Exit(code=1)


def _load_config(
    config: Optional[Path],
    preset: Optional[str],
    arch: Optional[List[str]],
    log_level: Optional[str],
    log_file: Optional[Path],
) -> TraceConfig:
    if config is not None:
        cfg = TraceConfig.from_file(config)
    elif preset is not None:
        cfg = TraceConfig.from_preset(preset)
    else:
        cfg = TraceConfig()

    overrides = cfg.to_dict()
    if arch:
        overrides["accepted_machines"] = list(arch)
    if log_level:
        overrides["log_level"] = log_level
    if log_file:
        overrides["log_file"] = str(log_file)
    return TraceConfig.from_dict(overrides)


def trace(
    input_path: Path = typer.Argument(..., metavar="INPUT", help="Path to ELF file"),
    output_path: Path = typer.Argument(..., metavar="OUTPUT", help="Path of trace file to write"),
    arch: Optional[List[str]] = typer.Option(
        None, "--arch", "-a", help="Accepted e_machine name, e.g. EM_RISCV (repeatable)"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML or JSON config file"),
    preset: Optional[str] = typer.Option(None, help="Named config: riscv, riscv32, riscv64"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
    summary: bool = typer.Option(False, "--summary", help="Print per-group instruction counts"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging with annotated tracebacks"),
):
    """Write an instruction trace of INPUT's executable segments to OUTPUT."""
    from elftrace.pipeline import run_trace
    from elftrace.utils.logging import setup_logging

    try:
        cfg = _load_config(config, preset, arch, log_level, log_file)
    except ElfTraceError as e:
        _fail(e)

    try:
        setup_logging(
            level="DEBUG" if debug else cfg.log_level,
            log_file=Path(cfg.log_file) if cfg.log_file else None,
            json_output=cfg.json_logs,
            diagnose=debug,
        )
    except OSError as e:
        _fail(f"Cannot open log file {cfg.log_file}: {e.strerror or e}")

    try:
        result = run_trace(input_path, output_path, cfg)
    except ElfTraceError as e:
        if debug:
            logger.exception("Trace failed")
        _fail(e)

    if summary:
        table = Table(title=f"Instruction groups in {input_path}")
        table.add_column("Group")
        table.add_column("Count", justify="right")
        for group, count in sorted(result.group_counts.items(), key=lambda kv: (-kv[1], kv[0].value)):
            table.add_row(group.value, str(count))
        console.print(table)
        console.print(f"Segments traced: {result.num_segments}, skipped: {result.num_skipped}")
        console.print(f"Trace sha256: {result.trace_sha256}")


app.command("trace")(trace)

# Single-command app backing the ``elf2trace`` script
trace_app = typer.Typer(name="elf2trace", add_completion=False)
trace_app.command()(trace)


@app.command()
def info(
    input_path: Path = typer.Argument(..., metavar="INPUT", help="Path to ELF file"),
):
    """Show header and program headers of an ELF file."""
    from elftrace.container import SegmentScanner, open_image
    from elftrace.utils.hashing import compute_content_hash
    from elftrace.utils.logging import setup_logging
    from elftrace.utils.types import WORD_SIZE, SegmentFlag

    setup_logging(level="ERROR")

    try:
        image = open_image(input_path, accepted_machines=None)
    except ElfTraceError as e:
        _fail(e)

    console.print(f"File: {image.path}")
    console.print(f"SHA256: {compute_content_hash(image.raw)}")
    console.print(f"Type: {image.elf_type}")
    console.print(f"Machine: {image.machine} (ELF{image.elf_class.value}, {image.endianness.value}-endian)")
    console.print(f"Entry point: {image.entry_point:#x}")

    scanner = SegmentScanner(image)
    traced = {segment.index: len(data) // WORD_SIZE for segment, data in scanner}

    table = Table(title="Program Headers")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Flags")
    table.add_column("VirtAddr", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("FileSiz", justify="right")
    table.add_column("MemSiz", justify="right")
    table.add_column("Words", justify="right")

    for segment in image.segments:
        table.add_row(
            str(segment.index),
            segment.type,
            SegmentFlag.describe(segment.flags),
            f"{segment.load_address:#x}",
            f"{segment.offset:#x}",
            f"{segment.file_size:#x}",
            f"{segment.memory_size:#x}",
            str(traced[segment.index]) if segment.index in traced else "-",
        )

    console.print(table)

    for warning in scanner.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command()
def groups():
    """List the opcode groups and their selectors."""
    from elftrace.decoding import OPCODE_GROUPS

    table = Table(title="Operation Groups")
    table.add_column("Opcode[6:0]", justify="right")
    table.add_column("Group")

    for selector, group in sorted(OPCODE_GROUPS.items()):
        table.add_row(f"{selector:#04x}", group.value)
    table.add_row("other", "UNKNOWN")

    console.print(table)


@app.command()
def version():
    """Show elftrace version."""
    from elftrace import __version__

    console.print(f"elftrace v{__version__}")


def main():
    """Entry point for CLI."""
    app()


def elf2trace_main():
    """Entry point for the ``elf2trace INPUT OUTPUT`` command."""
    trace_app()


if __name__ == "__main__":
    main()
