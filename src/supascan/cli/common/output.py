"""Output formatting utilities for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from supascan.cli.common.tui_style import (
    QUESTIONARY_STYLE_CONFIRM,
    QUESTIONARY_STYLE_SECRET,
)

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts so they stand out from the audit log."""
        return f"[supascan] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def log_line(self, msg: str) -> None:
        """Echo one audit log line verbatim (no markup, no highlighting)."""
        console.print(msg, markup=False, highlight=False)

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        # Questionary renders `instruction=...` inline next to the echoed answer
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def password(self, message: str) -> str | None:
        """Prompt for a secret without echoing it. Returns None if cancelled."""
        prompt = questionary.password(
            self._q(message), style=QUESTIONARY_STYLE_SECRET, qmark="✦"
        )
        return prompt.ask()

    def collections_table(
        self, descriptors: Iterable[Any], title: str = "Collections"
    ) -> None:
        """
        Expects objects with .qualified_name .kind .graph_type_name
        (like supascan.core.models.CollectionDescriptor)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Collection", style="ok")
        t.add_column("Kind", style="meta")
        t.add_column("GraphQL type", style="meta")

        for d in descriptors:
            kind = d.kind.value if hasattr(d.kind, "value") else str(d.kind)
            t.add_row(d.qualified_name, kind, d.graph_type_name or "")

        console.print(t)

    def records_table(self, records: Iterable[Any], title: str = "Extraction") -> None:
        """Render one row per extracted collection (columns, rows, PII, error)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Collection", style="ok")
        t.add_column("Columns", justify="right")
        t.add_column("Rows", justify="right")
        t.add_column("PII", justify="right")
        t.add_column("Error", style="err")

        for r in records:
            columns = "?" if r.columns is None else str(len(r.columns))
            pii = str(len(r.pii_findings)) if r.pii_findings else ""
            t.add_row(
                r.descriptor.qualified_name,
                columns,
                str(r.row_count),
                f"[warn]{pii}[/]" if pii else "",
                escape(r.error or ""),
            )

        console.print(t)

    def pii_table(self, records: Iterable[Any], title: str = "Suspected PII") -> None:
        """
        Render PII findings of all records. Prints nothing when there are none.
        """
        rows = [(r, f) for r in records for f in r.pii_findings]
        if not rows:
            return

        t = Table(title=title, show_lines=False)
        t.add_column("Collection", style="ok")
        t.add_column("Column")
        t.add_column("Type", style="warn")
        t.add_column("Confidence")
        t.add_column("Examples", style="meta")

        for r, f in rows:
            confidence = f.confidence.value
            style = "err" if confidence == "value" else "meta"
            t.add_row(
                r.descriptor.qualified_name,
                f.column,
                f.pii_type,
                f"[{style}]{confidence}[/{style}]",
                escape(", ".join(f.examples)),
            )

        console.print(t)

    def buckets_table(self, audits: Iterable[Any], title: str = "Storage") -> None:
        """
        Expects objects with .name .public .object_count .list_error
        .public_url_check (like supascan.core.models.BucketAudit)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Bucket", style="ok")
        t.add_column("Public")
        t.add_column("Objects", justify="right")
        t.add_column("Reachable without auth")
        t.add_column("Error", style="err")

        for a in audits:
            check = a.public_url_check
            if check is None:
                reachable = ""
            elif check.verified > 0:
                reachable = f"[err]{check.verified}/{check.sample_size}[/]"
            else:
                reachable = f"[ok]0/{check.sample_size}[/]"
            t.add_row(
                a.name,
                "[warn]yes[/]" if a.public else "no",
                str(a.object_count),
                reachable,
                escape(a.list_error or ""),
            )

        console.print(t)


out = Out()
