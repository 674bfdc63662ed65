"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from supascan.cli.common.output import out

EXIT_RUNTIME = 1
EXIT_USAGE = 2


def die(msg: str, code: int = EXIT_RUNTIME) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(
    exc: Exception, *, message: str, code: int = EXIT_RUNTIME
) -> NoReturn:
    """
    Helper function to print an error message and exit with a given code.

    Keeps the original exception chained for debugging.
    """
    out.error(message)
    raise typer.Exit(code) from exc
