"""Run configuration for an audit.

The configuration is consumed, not owned, by the core: the CLI (or any other
frontend) builds a ScanConfig from options and environment variables and
hands it to the orchestrator.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from supascan.core.errors import ConfigError

_ENV_PREFIX = "SUPASCAN_"
_TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class ScanConfig:
    """
    Settings for a single audit run.

    Attributes:
        service_url: Project URL, e.g. https://abc.supabase.co.
        api_key: Public (anon) or service API key.
        email: Optional email for password sign-in.
        password: Optional password for password sign-in.
        bearer_token: Optional user JWT; takes precedence over email/password.
        fast_discovery: Skip the common-name brute force strategy.
        export_sql: Path the frontend should write the SQL schema export to.
    """

    service_url: str | None
    api_key: str | None
    email: str | None = None
    password: str | None = None
    bearer_token: str | None = None
    fast_discovery: bool = False
    export_sql: str | None = None

    @property
    def export_requested(self) -> bool:
        return bool(self.export_sql)

    def validate(self) -> None:
        """Raise ConfigError if the service URL or API key is missing."""
        if not self.service_url or not self.api_key:
            raise ConfigError("Missing required parameters: url and key")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ScanConfig":
        """Build a configuration from SUPASCAN_* environment variables."""
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(f"{_ENV_PREFIX}{name}", "").strip()
            return value or None

        fast = (_get("FAST_DISCOVERY") or "").lower() in _TRUTHY
        return cls(
            service_url=_get("URL"),
            api_key=_get("KEY"),
            email=_get("EMAIL"),
            password=_get("PASSWORD"),
            bearer_token=_get("TOKEN"),
            fast_discovery=fast,
            export_sql=_get("EXPORT_SQL"),
        )
