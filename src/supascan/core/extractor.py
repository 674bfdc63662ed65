"""Run orchestration: connect, discover, extract, audit storage.

The orchestrator owns the order of operations and the error taxonomy of a
run. Configuration and connectivity failures raise; everything below the run
level (a strategy, a collection, a bucket) is recovered, logged and reflected
in the result.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from supascan.core.auth import (
    authenticate,
    check_connection,
    end_session,
    get_client,
)
from supascan.core.columns import resolve_columns
from supascan.core.config import ScanConfig
from supascan.core.discovery import DiscoveryStrategy, discover_collections
from supascan.core.models import CollectionDescriptor, ExtractionRecord, RunResult
from supascan.core.pii import detect_pii
from supascan.core.runlog import LogSink, RunLog
from supascan.core.sampling import sample_rows
from supascan.core.storage import scan_storage

CollectionChooser = Callable[
    [list[CollectionDescriptor]], Sequence[CollectionDescriptor]
]
ProgressCallback = Callable[[ExtractionRecord, int, int], None]


def _describe_collection(d: CollectionDescriptor) -> str:
    suffix = f" [GraphQL: {d.graph_type_name}]" if d.graph_type_name else ""
    return f"   - {d.qualified_name}{suffix} ({d.kind.value})"


def extract_collection(
    adapter, descriptor: CollectionDescriptor, log: LogSink
) -> ExtractionRecord:
    """
    Extract columns, row count, sample rows and PII findings for one collection.

    Column resolution is skipped for GraphQL types. A sampling failure is
    stored on the record; the columns resolved before it are kept.
    """
    log.append("")
    log.append(
        f"Extracting data from table: {descriptor.qualified_name} "
        f"({descriptor.kind.value})"
    )
    if descriptor.is_graph_type:
        log.append(
            f"   GraphQL Type: {descriptor.graph_type_name} "
            f"({descriptor.field_count} fields)"
        )

    columns = None
    if not descriptor.is_graph_type:
        columns = resolve_columns(adapter, descriptor, log)
        if columns:
            log.append(f"   Columns ({len(columns)}):")
            for c in columns:
                nullable = ", nullable" if c.nullable else ""
                log.append(f"     - {c.name} ({c.data_type}{nullable})")

    sample = sample_rows(adapter, descriptor, log)
    findings = detect_pii(columns, sample.rows)
    return ExtractionRecord(
        descriptor=descriptor,
        columns=columns,
        row_count=sample.row_count,
        sample_rows=sample.rows,
        error=sample.error,
        pii_findings=tuple(findings),
    )


def run_extraction(
    config: ScanConfig,
    *,
    adapter=None,
    log: RunLog | None = None,
    strategies: Sequence[DiscoveryStrategy] | None = None,
    collection_delay: float = 0.5,
    choose: CollectionChooser | None = None,
    progress: ProgressCallback | None = None,
    max_parallel_discovery: int = 1,
) -> RunResult:
    """
    Run a full audit against one project.

    Args:
        config: Run configuration. URL and key are required.
        adapter: Backend adapter; built from `config` when omitted.
        log: Run log to append to; a fresh one is created when omitted.
        strategies: Discovery strategies; the default chain when omitted.
        collection_delay: Seconds to sleep between collection extractions.
        choose: Optional filter applied to the discovered collections before
            extraction (selectors, interactive picking).
        progress: Called as `progress(record, index, total)` after each
            collection has been extracted.
        max_parallel_discovery: Number of discovery strategies run at once.

    Returns:
        The RunResult. Zero discovered collections is a valid, empty result.

    Raises:
        ConfigError: If URL or key is missing or the client cannot be built.
        ConnectionFailed: If the connectivity check fails.
    """
    config.validate()
    log = log if log is not None else RunLog()

    log.append("Supabase Data Extractor Starting...")
    log.append(f"   URL: {config.service_url}")
    log.append(f"   Key: {config.api_key[:10]}...")

    if adapter is None:
        adapter = get_client(config)

    check_connection(adapter, log)
    user = authenticate(adapter, config, log)
    auth_used = user is not None
    email = user.email if user else None

    descriptors = discover_collections(
        adapter,
        log,
        strategies,
        fast_discovery=config.fast_discovery,
        max_parallel=max_parallel_discovery,
    )
    if not descriptors:
        log.append("No tables found or accessible")
        if auth_used:
            end_session(adapter, log)
        return RunResult(
            log=log.lines, authentication_used=auth_used, authenticated_email=email
        )

    log.append("")
    log.append(f"Found {len(descriptors)} accessible tables/views/types:")
    for d in descriptors:
        log.append(_describe_collection(d))

    if choose is not None:
        chosen = list(choose(descriptors))
        skipped = len(descriptors) - len(chosen)
        if skipped:
            log.append(f"   {skipped} collection(s) excluded by selection")
        descriptors = chosen

    log.append("")
    log.append("Starting data extraction...")
    records: list[ExtractionRecord] = []
    total = len(descriptors)
    for i, descriptor in enumerate(descriptors, start=1):
        if i > 1 and collection_delay > 0:
            time.sleep(collection_delay)
        record = extract_collection(adapter, descriptor, log)
        records.append(record)
        if progress is not None:
            progress(record, i, total)
    log.append("")
    log.append("Data extraction completed!")

    audits = scan_storage(adapter, log)

    if auth_used:
        end_session(adapter, log)

    return RunResult(
        log=log.lines,
        records=tuple(records),
        bucket_audits=tuple(audits),
        authentication_used=auth_used,
        authenticated_email=email,
    )
