"""CLI application for supascan."""

import typer

from supascan.cli.commands.scan import discover, scan
from supascan.cli.commands.storage import buckets

app = typer.Typer(
    help="supascan - Supabase discovery and exposure audit",
    no_args_is_help=True,
)

app.command(help="Run a full audit: discovery, extraction, PII and storage.")(scan)
app.command(help="Discover collections without extracting any data.")(discover)
app.command(help="Audit storage buckets for public exposure.")(buckets)


if __name__ == "__main__":
    app()
