"""Application context management for the CLI."""

from dataclasses import dataclass

from supascan.cli.common.exits import EXIT_USAGE, die, exit_from_exc
from supascan.cli.common.output import out
from supascan.core.adapters.supabaseapi import SupabaseAdapter
from supascan.core.auth import authenticate, check_connection, get_client
from supascan.core.config import ScanConfig
from supascan.core.errors import ConfigError, ConnectionFailed
from supascan.core.models import AuthUser
from supascan.core.runlog import RunLog


@dataclass
class ScanAppContext:
    """Application context holding the run configuration, log and adapter."""

    config: ScanConfig
    log: RunLog
    adapter: SupabaseAdapter


def resolve_password(
    email: str | None, password: str | None, token: str | None
) -> str | None:
    """Prompt for the password when an email is given without one (and no token)."""
    if not email or password or token:
        return password
    answer = out.password(f"Password for {email}:")
    if answer is None:
        die("Password prompt cancelled", code=EXIT_USAGE)
    return answer


def build_scan_context(config: ScanConfig, *, quiet: bool = False) -> ScanAppContext:
    """Build and return the application context with client, adapter and log.

    Args:
        config: Run configuration assembled from options / environment.
        quiet: If True, audit log lines are recorded but not echoed.

    Returns:
        ScanAppContext: Application context with a configured adapter.
    """
    try:
        adapter = get_client(config)
    except ConfigError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)
    log = RunLog(echo=None if quiet else out.log_line)
    return ScanAppContext(config=config, log=log, adapter=adapter)


def open_session(appctx: ScanAppContext) -> AuthUser | None:
    """Check connectivity and authenticate; exit with code 1 if unreachable."""
    try:
        check_connection(appctx.adapter, appctx.log)
    except ConnectionFailed as exc:
        exit_from_exc(exc, message=str(exc))
    return authenticate(appctx.adapter, appctx.config, appctx.log)
