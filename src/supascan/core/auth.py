"""Authentication helpers for Supabase.

This module centralizes creation of the Supabase client (wrapped in a
SupabaseAdapter), applies small but important normalization rules (such as
sanitizing the project URL), and decides which identity a run uses.
"""

from __future__ import annotations

from typing import Protocol

from supabase import ClientOptions, create_client

from supascan.core.adapters.supabaseapi import SupabaseAdapter
from supascan.core.config import ScanConfig
from supascan.core.errors import ConfigError, ConnectionFailed, describe_error
from supascan.core.models import AuthUser
from supascan.core.runlog import LogSink


class AuthAdapter(Protocol):
    """Interface for the identity operations used during a run."""

    def session_email(self) -> str | None:
        ...

    def user_for_token(self, token: str) -> AuthUser | None:
        ...

    def sign_in(self, email: str, password: str) -> AuthUser:
        ...

    def sign_out(self) -> None:
        ...


def _sanitize_url(url: str | None) -> str | None:
    """
    Normalize a project URL.

    - Removes query strings
    - Removes trailing slashes

    The SDK and the raw REST/GraphQL calls append paths to this value, so a
    trailing slash or query string would produce malformed URLs.
    """
    if not url:
        return url
    url = url.strip().split("?", 1)[0]
    return url.rstrip("/")


def get_client(config: ScanConfig) -> SupabaseAdapter:
    """
    Create a Supabase client for the configured project and wrap it.

    When a bearer token is configured it is attached as the Authorization
    header so every PostgREST and storage call runs as that user.
    """
    config.validate()
    url = _sanitize_url(config.service_url)
    options = None
    if config.bearer_token:
        options = ClientOptions(
            headers={"Authorization": f"Bearer {config.bearer_token}"}
        )
    try:
        if options is not None:
            client = create_client(url, config.api_key, options=options)
        else:
            client = create_client(url, config.api_key)
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(
            f"Could not create Supabase client: {describe_error(exc)}"
        ) from exc
    return SupabaseAdapter(
        client,
        service_url=url,
        api_key=config.api_key,
        bearer_token=config.bearer_token,
    )


def check_connection(adapter: AuthAdapter, log: LogSink) -> None:
    """Verify the service answers a session lookup; raise ConnectionFailed if not."""
    log.append("Testing Supabase connection...")
    try:
        email = adapter.session_email()
    except Exception as exc:  # noqa: BLE001
        log.append(f"Connection failed: {describe_error(exc)}")
        raise ConnectionFailed(f"Connection failed: {describe_error(exc)}") from exc
    log.append("Connection established")
    if email:
        log.append(f"   Authenticated as: {email}")
    else:
        log.append("   Anonymous access")


def authenticate(
    adapter: AuthAdapter, config: ScanConfig, log: LogSink
) -> AuthUser | None:
    """
    Authenticate the run, or return None to continue anonymously.

    A bearer token takes precedence over email/password. Authentication
    failures are logged and never abort the run.
    """
    if config.bearer_token:
        if config.email or config.password:
            log.append(
                "Both token and email/password provided - "
                "using bearer token (takes precedence)"
            )
        log.append("Authenticating with bearer token...")
        try:
            user = adapter.user_for_token(config.bearer_token)
        except Exception as exc:  # noqa: BLE001
            log.append(f"Bearer token authentication failed: {describe_error(exc)}")
            return None
        if user is None:
            log.append(
                "Bearer token authentication failed: No user found with this token"
            )
            return None
        _log_identity(log, "Bearer token authentication successful", user)
        return user

    if not config.email or not config.password:
        log.append("No credentials provided - proceeding with anonymous access")
        return None

    log.append("Authenticating with email/password...")
    try:
        user = adapter.sign_in(config.email, config.password)
    except Exception as exc:  # noqa: BLE001
        log.append(f"Email/password authentication failed: {describe_error(exc)}")
        return None
    _log_identity(log, "Email/password authentication successful", user)
    return user


def _log_identity(log: LogSink, headline: str, user: AuthUser) -> None:
    log.append(headline)
    log.append(f"   User ID: {user.id}")
    log.append(f"   Email: {user.email}")


def end_session(adapter: AuthAdapter, log: LogSink) -> None:
    """Sign out after an authenticated run; a failure is logged, not raised."""
    try:
        adapter.sign_out()
    except Exception as exc:  # noqa: BLE001
        log.append(f"Sign out failed: {describe_error(exc)}")
        return
    log.append("Signed out successfully")
