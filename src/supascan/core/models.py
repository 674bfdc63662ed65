"""Core domain models for a supascan audit run.

These models represent discovered collections, their shapes, sampled data and
storage exposure in a simple, immutable form. They are intentionally free of
Supabase SDK types and UI/CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

PRIMARY_NAMESPACE = "public"
AUTH_NAMESPACE = "auth"


class CollectionKind(str, Enum):
    """
    Kind of a discovered collection.

    Values:
        BASE_TABLE: A regular table reported by a catalog or found by probing.
        VIEW: A view reported by the view catalog.
        GRAPH_TYPE: An object type exposed by the GraphQL endpoint.
    """

    BASE_TABLE = "BASE TABLE"
    VIEW = "VIEW"
    GRAPH_TYPE = "GRAPHQL_TYPE"


class Confidence(str, Enum):
    """Strength of the evidence behind a PII finding."""

    COLUMN_NAME_ONLY = "column_name"
    VALUE_MATCHED = "value"


@dataclass(frozen=True)
class CollectionDescriptor:
    """
    A queryable collection found by one of the discovery strategies.

    Attributes:
        name: Collection name. This is the de-duplication key.
        namespace: Schema the collection was found in (informational).
        kind: Table, view or GraphQL type.
        graph_type_name: Original GraphQL type name (GRAPH_TYPE only).
        field_count: Number of fields on the GraphQL type (GRAPH_TYPE only).
    """

    name: str
    namespace: str = PRIMARY_NAMESPACE
    kind: CollectionKind = CollectionKind.BASE_TABLE
    graph_type_name: str | None = None
    field_count: int | None = None

    @property
    def qualified_name(self) -> str:
        """`name` for the primary namespace, `namespace.name` otherwise."""
        if self.namespace == PRIMARY_NAMESPACE:
            return self.name
        return f"{self.namespace}.{self.name}"

    @property
    def is_graph_type(self) -> bool:
        return self.kind == CollectionKind.GRAPH_TYPE

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "kind": self.kind.value,
        }
        if self.is_graph_type:
            out["graphTypeName"] = self.graph_type_name
            out["fieldCount"] = self.field_count
        return out


@dataclass(frozen=True)
class ColumnDescriptor:
    """Shape of one column; `data_type` is "unknown" when inferred from data."""

    name: str
    data_type: str = "unknown"
    nullable: bool = True
    default_value: str | None = None
    ordinal_position: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dataType": self.data_type,
            "nullable": self.nullable,
            "defaultValue": self.default_value,
            "ordinalPosition": self.ordinal_position,
        }


@dataclass(frozen=True)
class PIIFinding:
    """A column suspected to hold personal data of a given type."""

    column: str
    pii_type: str
    confidence: Confidence
    examples: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "piiType": self.pii_type,
            "confidence": self.confidence.value,
            "examples": list(self.examples),
        }


@dataclass(frozen=True)
class ExtractionRecord:
    """
    Everything extracted for one discovered collection.

    `columns` is None when column resolution was unresolved (or not attempted,
    for GraphQL types). `error` is only set when row extraction failed; the
    remaining fields then hold their defaults.
    """

    descriptor: CollectionDescriptor
    columns: tuple[ColumnDescriptor, ...] | None = None
    row_count: int = 0
    sample_rows: tuple[Mapping[str, Any], ...] = ()
    error: str | None = None
    pii_findings: tuple[PIIFinding, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "descriptor": self.descriptor.to_dict(),
            "columns": (
                None
                if self.columns is None
                else [c.to_dict() for c in self.columns]
            ),
            "rowCount": self.row_count,
            "sampleRows": [dict(r) for r in self.sample_rows],
            "error": self.error,
            "piiFindings": [f.to_dict() for f in self.pii_findings],
        }


@dataclass(frozen=True)
class PublicUrlCheck:
    """How many sampled public URLs were reachable without credentials."""

    verified: int
    sample_size: int


@dataclass(frozen=True)
class BucketAudit:
    """Exposure audit result for a single storage bucket."""

    name: str
    public: bool
    file_size_limit: int | None = None
    object_count: int = 0
    sample_paths: tuple[str, ...] = ()
    list_error: str | None = None
    public_url_check: PublicUrlCheck | None = None

    def to_dict(self) -> dict[str, Any]:
        check = self.public_url_check
        return {
            "name": self.name,
            "public": self.public,
            "fileSizeLimit": self.file_size_limit,
            "objectCount": self.object_count,
            "samplePaths": list(self.sample_paths),
            "listError": self.list_error,
            "publicUrlCheck": (
                {"verified": check.verified, "sampleSize": check.sample_size}
                if check
                else None
            ),
        }


@dataclass(frozen=True)
class AuthUser:
    """The identity a run authenticated as."""

    id: str | None
    email: str | None = None


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a collection query plus the server-reported count."""

    data: list[dict[str, Any]] = field(default_factory=list)
    count: int | None = None


@dataclass(frozen=True)
class Bucket:
    """Lightweight representation of a storage bucket's configuration."""

    name: str
    public: bool = False
    file_size_limit: int | None = None


@dataclass(frozen=True)
class StorageEntry:
    """One entry of a storage listing (object or folder placeholder)."""

    name: str
    size: int | None = None


@dataclass(frozen=True)
class RunResult:
    """Top-level result of one audit run."""

    log: tuple[str, ...] = ()
    records: tuple[ExtractionRecord, ...] = ()
    bucket_audits: tuple[BucketAudit, ...] = ()
    authentication_used: bool = False
    authenticated_email: str | None = None
    export_sql_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the field names consumers rely on."""
        return {
            "log": list(self.log),
            "records": [r.to_dict() for r in self.records],
            "bucketAudits": [b.to_dict() for b in self.bucket_audits],
            "authenticationUsed": self.authentication_used,
            "authenticatedEmail": self.authenticated_email,
            "exportSqlPath": self.export_sql_path,
        }
