"""Progress formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from supascan.cli.common.output import console
from supascan.core.extractor import ProgressCallback
from supascan.core.models import CollectionDescriptor, ExtractionRecord

_MAX_COLLECTION_NAME_WIDTH = 48


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _display_collection_label(
    descriptor: CollectionDescriptor,
    *,
    name_width: int = _MAX_COLLECTION_NAME_WIDTH,
) -> str:
    """
    Render a collection label for the progress bar.

    `<qualified name>  (<kind>)` with the kind column aligned on `name_width`.
    """
    short_name = _truncate(descriptor.qualified_name, _MAX_COLLECTION_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  ({descriptor.kind.value})"


def _outcome(record: ExtractionRecord) -> tuple[str, str]:
    """Return (text, style) summarizing one extracted record."""
    if record.error:
        return "error", "red"
    if record.pii_findings:
        return f"{record.row_count} rows, {len(record.pii_findings)} PII", "yellow"
    return f"{record.row_count} rows", "green"


@contextmanager
def extraction_progress() -> Iterator[ProgressCallback]:
    """
    Show an overall progress bar while collections are extracted.

    Yields a callback suitable for `run_extraction(progress=...)`. The bar is
    started on the first call: the number of collections is only known once
    discovery and selection are done, and interactive picking must not run
    under a live display.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[label]}[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn(
            "[{task.fields[style]}]{task.fields[outcome]}[/{task.fields[style]}]"
        ),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = None

    def _advance(record: ExtractionRecord, index: int, total: int) -> None:
        nonlocal task_id
        if task_id is None:
            progress.start()
            task_id = progress.add_task(
                "extract", total=max(total, 1), label="", outcome="", style="dim"
            )
        text, style = _outcome(record)
        progress.update(
            task_id,
            completed=index,
            label=_display_collection_label(record.descriptor),
            outcome=text,
            style=style,
        )

    try:
        yield _advance
    finally:
        if task_id is not None:
            progress.stop()
