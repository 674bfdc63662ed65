"""Row counting and sampling with field masking for auth user rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from supascan.core.errors import describe_error
from supascan.core.models import AUTH_NAMESPACE, CollectionDescriptor
from supascan.core.probing import QueryAdapter
from supascan.core.runlog import LogSink

SAMPLE_ROWS_COUNT = 3
MASK_TOKEN = "[MASKED]"
MASKED_FIELDS = ("encrypted_password", "email_confirmation_token", "recovery_token")


@dataclass(frozen=True)
class RowSample:
    """Outcome of sampling one collection."""

    row_count: int = 0
    rows: tuple[Mapping[str, Any], ...] = ()
    error: str | None = None


def is_auth_users(descriptor: CollectionDescriptor) -> bool:
    return descriptor.namespace == AUTH_NAMESPACE and descriptor.name == "users"


def mask_auth_user_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Replace present, non-empty sensitive fields with MASK_TOKEN.

    Absent or empty fields are left untouched, so masking never invents a
    value that was not there.
    """
    masked = dict(row)
    for key in MASKED_FIELDS:
        if masked.get(key):
            masked[key] = MASK_TOKEN
    return masked


def sample_rows(
    adapter: QueryAdapter, descriptor: CollectionDescriptor, log: LogSink
) -> RowSample:
    """
    Fetch the exact row count and the first rows of a collection.

    GraphQL-discovered collections get one retry under their original type
    name when the converted name fails. On failure the error message is kept
    verbatim and no rows are returned.
    """
    try:
        result = adapter.query(
            descriptor.name, namespace=descriptor.namespace, count=True
        )
    except Exception as exc:  # noqa: BLE001
        if not descriptor.graph_type_name:
            return _failed(descriptor, exc, log)
        log.append(f"   Trying GraphQL type name: {descriptor.graph_type_name}")
        try:
            result = adapter.query(
                descriptor.graph_type_name, namespace=descriptor.namespace, count=True
            )
        except Exception:  # noqa: BLE001
            return _failed(descriptor, exc, log)

    total = result.count if result.count is not None else len(result.data)
    log.append(f"   Total rows: {total}")

    rows = result.data[:SAMPLE_ROWS_COUNT]
    if not rows:
        log.append("   No data found in this table")
        return RowSample(row_count=total)

    if is_auth_users(descriptor):
        rows = [mask_auth_user_row(r) for r in rows]
    log.append(f"   Sample data (first {len(rows)} rows)")
    return RowSample(row_count=total, rows=tuple(rows))


def _failed(
    descriptor: CollectionDescriptor, exc: Exception, log: LogSink
) -> RowSample:
    message = describe_error(exc)
    log.append(f"   Error accessing table: {message}")
    if descriptor.namespace == AUTH_NAMESPACE:
        log.append(
            f"   Note: auth.{descriptor.name} may require admin privileges "
            "or service role key"
        )
    return RowSample(error=message)
