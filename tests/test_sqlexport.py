from datetime import datetime, timezone

import pytest

from supascan.core.models import (
    CollectionDescriptor,
    CollectionKind,
    ColumnDescriptor,
    ExtractionRecord,
)
from supascan.core.sqlexport import (
    column_definition,
    guess_column_type,
    render_schema_sql,
)

GENERATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("id", "SERIAL PRIMARY KEY"),
        ("user_id", "INTEGER"),
        ("email", "VARCHAR(255)"),
        ("phone", "VARCHAR(20)"),
        ("created_at_time", "TIMESTAMP"),
        ("price", "DECIMAL(10,2)"),
        ("quantity", "INTEGER"),
        ("is_admin", "BOOLEAN"),
        ("bio", "TEXT"),
    ],
)
def test_guess_column_type(name, expected):
    assert guess_column_type(name) == expected


def test_column_definition_uses_catalog_type_and_constraints():
    column = ColumnDescriptor(
        name="total",
        data_type="numeric",
        nullable=False,
        default_value="0",
    )

    assert column_definition(column) == '  "total" NUMERIC NOT NULL DEFAULT 0'


def test_primary_key_guess_is_never_not_null():
    column = ColumnDescriptor(name="id", nullable=False)

    assert column_definition(column) == '  "id" SERIAL PRIMARY KEY'


def test_render_groups_by_namespace_and_creates_schemas():
    records = [
        ExtractionRecord(
            CollectionDescriptor(name="orders"),
            columns=(ColumnDescriptor(name="id"), ColumnDescriptor(name="email")),
        ),
        ExtractionRecord(CollectionDescriptor(name="users", namespace="auth")),
        ExtractionRecord(
            CollectionDescriptor(name="v_sales", kind=CollectionKind.VIEW),
            columns=(ColumnDescriptor(name="amount", data_type="numeric"),),
        ),
    ]

    sql = render_schema_sql(records, generated_at=GENERATED_AT)

    assert sql.startswith("-- Supabase Database Schema Export\n")
    assert "-- Generated on: 2024-05-01T12:00:00+00:00" in sql
    assert "-- Total tables: 3" in sql
    assert sql.index("-- Schema: public") < sql.index("-- Schema: auth")
    assert 'CREATE SCHEMA IF NOT EXISTS "auth";' in sql
    assert 'CREATE SCHEMA IF NOT EXISTS "public";' not in sql
    assert (
        'CREATE TABLE IF NOT EXISTS "public"."orders" (\n'
        '  "id" SERIAL PRIMARY KEY,\n'
        '  "email" VARCHAR(255)\n'
        ");"
    ) in sql
    assert (
        "-- Note: Could not retrieve column information\n"
        'CREATE TABLE IF NOT EXISTS "auth"."users" ( id SERIAL PRIMARY KEY );'
    ) in sql
    assert (
        "COMMENT ON TABLE \"public\".\"v_sales\" IS "
        "'VIEW - Discovered via data extraction';"
    ) in sql
    assert sql.endswith("-- Indexes and Constraints: add manually if needed.\n")
