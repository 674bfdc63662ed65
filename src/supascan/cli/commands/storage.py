"""Commands for auditing storage buckets."""

from supascan.cli.common.context import (
    build_scan_context,
    open_session,
    resolve_password,
)
from supascan.cli.common.exits import warn_exit
from supascan.cli.common.options import (
    EmailOpt,
    KeyOpt,
    PasswordOpt,
    QuietOpt,
    TokenOpt,
    UrlOpt,
)
from supascan.cli.common.output import out
from supascan.core.auth import end_session
from supascan.core.config import ScanConfig
from supascan.core.storage import scan_storage


def buckets(
    url: str | None = UrlOpt,
    key: str | None = KeyOpt,
    email: str | None = EmailOpt,
    password: str | None = PasswordOpt,
    token: str | None = TokenOpt,
    quiet: bool = QuietOpt,
):
    """
    Index storage buckets and verify public URLs without credentials.
    """
    config = ScanConfig(
        service_url=url,
        api_key=key,
        email=email,
        password=resolve_password(email, password, token),
        bearer_token=token,
    )
    appctx = build_scan_context(config, quiet=quiet)

    try:
        user = open_session(appctx)
        audits = scan_storage(appctx.adapter, appctx.log)
        if user is not None:
            end_session(appctx.adapter, appctx.log)
    finally:
        appctx.adapter.close()

    if not audits:
        warn_exit("No storage buckets found (or no permission to list buckets)")

    out.buckets_table(audits, title="Storage buckets")
