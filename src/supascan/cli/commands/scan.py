"""Commands for discovering collections and running a full audit."""

import dataclasses
import json
from pathlib import Path

from supascan.cli.common.context import (
    ScanAppContext,
    build_scan_context,
    open_session,
    resolve_password,
)
from supascan.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from supascan.cli.common.options import (
    EmailOpt,
    ExportSqlOpt,
    FastDiscoveryOpt,
    JsonOpt,
    KeyOpt,
    NameOpt,
    NamespaceOpt,
    PasswordOpt,
    PickOpt,
    QuietOpt,
    TokenOpt,
    UrlOpt,
    UseOrOpt,
    YesOpt,
)
from supascan.cli.common.output import out
from supascan.cli.common.progress import extraction_progress
from supascan.cli.common.selector_builder import build_selector
from supascan.cli.tui import select_collections as tui_select_collections
from supascan.core.auth import end_session
from supascan.core.config import ScanConfig
from supascan.core.discovery import discover_collections
from supascan.core.errors import ConfigError, ScanError
from supascan.core.extractor import CollectionChooser, run_extraction
from supascan.core.models import CollectionDescriptor, RunResult
from supascan.core.selectors import CollectionSelector, select_collections
from supascan.core.sqlexport import render_schema_sql


def _make_chooser(
    selector: CollectionSelector | None, pick: bool
) -> CollectionChooser | None:
    if selector is None and not pick:
        return None

    def _choose(descriptors: list[CollectionDescriptor]) -> list[CollectionDescriptor]:
        chosen = (
            select_collections(descriptors, selector) if selector else list(descriptors)
        )
        if pick and chosen:
            chosen = tui_select_collections(chosen)
        return chosen

    return _choose


def _write_sql(result: RunResult, path: str) -> RunResult:
    """Write the SQL export; a write failure is reported but not fatal."""
    out.info("Generating SQL schema export...")
    try:
        Path(path).write_text(render_schema_sql(result.records), encoding="utf-8")
    except OSError as exc:
        out.error(f"Error writing SQL file: {exc}")
        return result
    out.success(f"SQL schema exported to: {path}")
    return dataclasses.replace(result, export_sql_path=path)


def _write_json(result: RunResult, path: str) -> None:
    try:
        Path(path).write_text(
            json.dumps(result.to_dict(), indent=2, default=str), encoding="utf-8"
        )
    except OSError as exc:
        exit_from_exc(exc, message=f"Error writing JSON file: {exc}")
    out.success(f"Run result written to: {path}")


def scan(
    url: str | None = UrlOpt,
    key: str | None = KeyOpt,
    email: str | None = EmailOpt,
    password: str | None = PasswordOpt,
    token: str | None = TokenOpt,
    fast_discovery: bool = FastDiscoveryOpt,
    export_sql: str | None = ExportSqlOpt,
    json_path: str | None = JsonOpt,
    quiet: bool = QuietOpt,
    name: str | None = NameOpt,
    namespace: list[str] = NamespaceOpt,
    use_or: bool = UseOrOpt,
    pick: bool = PickOpt,
    yes: bool = YesOpt,
):
    """
    Run a full audit: discovery, extraction, PII detection and storage.
    """
    selector = None
    if name or namespace:
        try:
            selector = build_selector(name=name, namespaces=namespace, use_or=use_or)
        except ValueError as e:
            die(str(e), code=EXIT_USAGE)

    config = ScanConfig(
        service_url=url,
        api_key=key,
        email=email,
        password=resolve_password(email, password, token),
        bearer_token=token,
        fast_discovery=fast_discovery,
        export_sql=export_sql,
    )
    appctx = build_scan_context(config, quiet=quiet)

    if not fast_discovery and not yes:
        out.warn("Full discovery probes ~150 common table names against the API.")
        if not out.confirm("Run full discovery?", default=True):
            appctx.adapter.close()
            warn_exit("Cancelled (use --fast-discovery to skip name probing)")

    try:
        with extraction_progress() as progress:
            result = run_extraction(
                config,
                adapter=appctx.adapter,
                log=appctx.log,
                choose=_make_chooser(selector, pick),
                progress=progress,
            )
    except ConfigError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)
    except ScanError as exc:
        exit_from_exc(exc, message=str(exc))
    finally:
        appctx.adapter.close()

    if config.export_requested:
        result = _write_sql(result, config.export_sql)
    if json_path:
        _write_json(result, json_path)

    if not result.records:
        warn_exit("No tables found or accessible", code=0)

    out.header("Audit summary")
    out.kv(
        {
            "Collections": len(result.records),
            "Authenticated": result.authenticated_email or "no (anonymous)",
            "Buckets": len(result.bucket_audits),
        }
    )
    out.records_table(result.records)
    out.pii_table(result.records)
    if result.bucket_audits:
        out.buckets_table(result.bucket_audits)


def discover(
    url: str | None = UrlOpt,
    key: str | None = KeyOpt,
    email: str | None = EmailOpt,
    password: str | None = PasswordOpt,
    token: str | None = TokenOpt,
    fast_discovery: bool = FastDiscoveryOpt,
    quiet: bool = QuietOpt,
):
    """
    Discover collections without extracting any data.
    """
    config = ScanConfig(
        service_url=url,
        api_key=key,
        email=email,
        password=resolve_password(email, password, token),
        bearer_token=token,
        fast_discovery=fast_discovery,
    )
    appctx: ScanAppContext = build_scan_context(config, quiet=quiet)

    try:
        user = open_session(appctx)
        descriptors = discover_collections(
            appctx.adapter, appctx.log, fast_discovery=fast_discovery
        )
        if user is not None:
            end_session(appctx.adapter, appctx.log)
    finally:
        appctx.adapter.close()

    if not descriptors:
        warn_exit("No tables found or accessible", code=0)

    out.collections_table(descriptors, title="Discovered collections")
