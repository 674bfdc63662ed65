"""Render extracted collection shapes as a best-effort SQL DDL script.

The output is lossy: columns inferred from sample data carry no type, so a
type is guessed from the column name. Nothing here touches the filesystem;
writing the script is left to the caller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from supascan.core.models import PRIMARY_NAMESPACE, ColumnDescriptor, ExtractionRecord

_NO_DEFAULT = "has_default"


def guess_column_type(name: str) -> str:
    """Guess a SQL type for a column whose catalog type is unknown."""
    cn = name.lower()
    if cn == "id":
        return "SERIAL PRIMARY KEY"
    if "id" in cn:
        return "INTEGER"
    if "email" in cn:
        return "VARCHAR(255)"
    if "phone" in cn:
        return "VARCHAR(20)"
    if "date" in cn or "time" in cn:
        return "TIMESTAMP"
    if "amount" in cn or "price" in cn or "cost" in cn:
        return "DECIMAL(10,2)"
    if "count" in cn or "quantity" in cn:
        return "INTEGER"
    if "is_" in cn or "has_" in cn or "active" in cn:
        return "BOOLEAN"
    return "TEXT"


def column_definition(column: ColumnDescriptor) -> str:
    if column.data_type and column.data_type != "unknown":
        sql_type = column.data_type.upper()
    else:
        sql_type = guess_column_type(column.name)
    definition = f'  "{column.name}" {sql_type}'
    if not column.nullable and "PRIMARY KEY" not in definition:
        definition += " NOT NULL"
    if column.default_value and column.default_value != _NO_DEFAULT:
        definition += f" DEFAULT {column.default_value}"
    return definition


def _table_sql(namespace: str, record: ExtractionRecord) -> str:
    d = record.descriptor
    target = f'"{namespace}"."{d.name}"'
    lines = [f"-- Table: {namespace}.{d.name}"]
    if record.columns:
        lines.append(f"CREATE TABLE IF NOT EXISTS {target} (")
        lines.append(",\n".join(column_definition(c) for c in record.columns))
        lines.append(");")
    else:
        lines.append("-- Note: Could not retrieve column information")
        lines.append(f"CREATE TABLE IF NOT EXISTS {target} ( id SERIAL PRIMARY KEY );")
    lines.append("")
    lines.append(
        f"COMMENT ON TABLE {target} IS "
        f"'{d.kind.value} - Discovered via data extraction';"
    )
    lines.append("")
    return "\n".join(lines) + "\n"


def render_schema_sql(
    records: Iterable[ExtractionRecord], *, generated_at: datetime | None = None
) -> str:
    """
    Render CREATE statements for every record, grouped by namespace.

    Namespaces appear in first-seen order. Non-primary namespaces get a
    CREATE SCHEMA statement; records with unresolved columns get a
    placeholder table.
    """
    records = list(records)
    generated_at = generated_at or datetime.now(timezone.utc)

    by_namespace: dict[str, list[ExtractionRecord]] = {}
    for r in records:
        by_namespace.setdefault(r.descriptor.namespace, []).append(r)

    parts = [
        "-- Supabase Database Schema Export\n"
        f"-- Generated on: {generated_at.isoformat()}\n"
        f"-- Total tables: {len(records)}\n\n"
    ]
    for namespace, group in by_namespace.items():
        parts.append(
            "-- ==============================================\n"
            f"-- Schema: {namespace}\n"
            "-- ==============================================\n\n"
        )
        if namespace != PRIMARY_NAMESPACE:
            parts.append(f'CREATE SCHEMA IF NOT EXISTS "{namespace}";\n\n')
        for r in group:
            parts.append(_table_sql(namespace, r))
        parts.append("\n")
    parts.append("-- Indexes and Constraints: add manually if needed.\n")
    return "".join(parts)
