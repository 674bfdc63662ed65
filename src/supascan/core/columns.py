"""Column shape resolution through an ordered fallback chain.

Steps are tried in order and the first one that yields at least one column
wins. Each step is side-effect free on failure, so falling through is always
safe. When every step fails the resolver returns None, which callers must
treat as "unresolved" rather than "the collection has no columns".
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence

from supascan.core.errors import describe_error
from supascan.core.models import CollectionDescriptor, ColumnDescriptor
from supascan.core.probing import QueryAdapter
from supascan.core.runlog import LogSink

Columns = tuple[ColumnDescriptor, ...]


class ColumnsAdapter(QueryAdapter, Protocol):
    """Interface for the remote calls the resolver makes."""

    def rpc(self, fn: str, params: Mapping[str, Any] | None = None) -> Any:
        ...


def _as_bool(value: Any) -> bool:
    """Catalogs report nullability as 'YES'/'NO'; RPCs may return booleans."""
    if isinstance(value, str):
        return value.strip().upper() == "YES"
    if value is None:
        return True
    return bool(value)


def _column_from_catalog_row(
    row: Mapping[str, Any], position: int
) -> ColumnDescriptor:
    default = row.get("column_default")
    return ColumnDescriptor(
        name=row["column_name"],
        data_type=row.get("data_type") or "unknown",
        nullable=_as_bool(row.get("is_nullable")),
        default_value=None if default is None else str(default),
        ordinal_position=row.get("ordinal_position") or position,
    )


def _from_catalog(adapter: ColumnsAdapter, d: CollectionDescriptor) -> Columns:
    result = adapter.query(
        "columns",
        namespace="information_schema",
        columns=(
            "column_name",
            "data_type",
            "is_nullable",
            "column_default",
            "ordinal_position",
        ),
        eq={"table_name": d.name, "table_schema": d.namespace},
        order="ordinal_position",
    )
    return tuple(
        _column_from_catalog_row(row, i)
        for i, row in enumerate(result.data, start=1)
        if row.get("column_name")
    )


def _from_sample(adapter: ColumnsAdapter, d: CollectionDescriptor) -> Columns:
    adapter.query(d.name, namespace=d.namespace, limit=0)
    sample = adapter.query(d.name, namespace=d.namespace, limit=1)
    if not sample.data:
        return ()
    return tuple(
        ColumnDescriptor(name=key, ordinal_position=i)
        for i, key in enumerate(sample.data[0].keys(), start=1)
    )


def _from_rpc(adapter: ColumnsAdapter, d: CollectionDescriptor) -> Columns:
    data = adapter.rpc(
        "get_table_columns", {"table_name": d.name, "table_schema": d.namespace}
    )
    if not isinstance(data, list):
        return ()
    return tuple(
        _column_from_catalog_row(row, i)
        for i, row in enumerate(data, start=1)
        if isinstance(row, Mapping) and row.get("column_name")
    )


ResolverStep = Callable[[ColumnsAdapter, CollectionDescriptor], Columns]

RESOLVER_STEPS: tuple[tuple[str, ResolverStep], ...] = (
    ("information_schema.columns", _from_catalog),
    ("sample data", _from_sample),
    ("RPC get_table_columns", _from_rpc),
)


def resolve_columns(
    adapter: ColumnsAdapter,
    descriptor: CollectionDescriptor,
    log: LogSink,
    steps: Sequence[tuple[str, ResolverStep]] = RESOLVER_STEPS,
) -> Columns | None:
    """
    Resolve the column shape of a collection.

    Args:
        adapter: Backend adapter used for catalog, sample and RPC calls.
        descriptor: Collection to resolve. GraphQL types are never resolved.
        log: Audit log sink.
        steps: Ordered (label, step) pairs; defaults to RESOLVER_STEPS.

    Returns:
        The columns from the first step that found any, or None if every
        step failed or came back empty.
    """
    if descriptor.is_graph_type:
        return None

    target = f"{descriptor.namespace}.{descriptor.name}"
    log.append(f"     Getting columns for {target}...")
    for label, step in steps:
        try:
            columns = step(adapter, descriptor)
        except Exception as exc:  # noqa: BLE001
            log.append(f"     {label} failed: {describe_error(exc)}")
            continue
        if columns:
            log.append(f"     Found {len(columns)} columns via {label}")
            return columns

    log.append(f"     Could not retrieve column information for {target}")
    return None
