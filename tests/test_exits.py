import pytest
import typer

from supascan.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit


def test_die_exits_with_given_code():
    with pytest.raises(typer.Exit) as excinfo:
        die("URL is required", code=EXIT_USAGE)

    assert excinfo.value.exit_code == EXIT_USAGE


def test_warn_exit_defaults_to_success():
    with pytest.raises(typer.Exit) as excinfo:
        warn_exit("Cancelled.")

    assert excinfo.value.exit_code == 0


def test_exit_from_exc_chains_cause():
    cause = RuntimeError("connection refused")

    with pytest.raises(typer.Exit) as excinfo:
        exit_from_exc(cause, message="Connection failed")

    assert excinfo.value.exit_code == 1
    assert excinfo.value.__cause__ is cause
