"""Error types raised by the supascan core."""

from __future__ import annotations


class ScanError(RuntimeError):
    """Base class for run-level failures."""


class ConfigError(ScanError):
    """Raised when required configuration is missing or unusable."""


class ConnectionFailed(ScanError):
    """Raised when the remote service cannot be reached at all."""


class AuthError(ScanError):
    """Raised when authentication against the remote service fails."""


def describe_error(exc: BaseException) -> str:
    """
    Return the verbatim message carried by an SDK exception.

    PostgREST, storage and auth errors expose a `message` attribute whose
    value is more useful than their `str()` (which is often a dict repr).
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(exc)
    return text or exc.__class__.__name__
