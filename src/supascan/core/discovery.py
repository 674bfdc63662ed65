"""Collection discovery: independent strategies folded through one merge.

Each strategy is a read-only probe that returns zero or more
CollectionDescriptor objects. Strategies never share state and never raise
past their own boundary: `DiscoveryStrategy.run` turns any failure into an
empty result plus a log line. The merged result is the stable, first
occurrence wins de-duplication of all strategy outputs in strategy order, so
catalog-sourced descriptors are preferred over heuristic ones.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence

from supascan.core.errors import describe_error
from supascan.core.models import (
    AUTH_NAMESPACE,
    PRIMARY_NAMESPACE,
    CollectionDescriptor,
    CollectionKind,
)
from supascan.core.probing import QueryAdapter, probe_collections
from supascan.core.runlog import LogSink

SCANNED_NAMESPACES = (PRIMARY_NAMESPACE, AUTH_NAMESPACE)

AUTH_COLLECTION_NAMES = (
    "users", "identities", "sessions", "refresh_tokens", "audit_log_entries",
    "instances", "schema_migrations", "flow_state", "saml_providers",
    "saml_relay_states", "sso_providers", "sso_domains", "mfa_factors",
    "mfa_challenges", "mfa_amr_claims", "one_time_tokens",
)

COMMON_COLLECTION_NAMES = (
    # users / auth
    "users", "user", "profiles", "user_profiles", "accounts", "members",
    "customers", "clients", "employees", "staff", "admins", "moderators",
    "auth_users", "roles", "permissions", "user_roles", "role_permissions",
    "sessions", "tokens", "api_keys", "auth_tokens", "refresh_tokens",
    # content
    "posts", "articles", "pages", "content", "blogs", "news", "stories",
    "comments", "replies", "reviews", "feedback", "testimonials",
    "categories", "tags", "topics", "subjects", "labels", "files", "uploads",
    "documents", "images", "videos", "audio", "attachments", "media",
    "assets", "resources",
    # commerce
    "products", "items", "inventory", "stock", "variants", "skus", "orders",
    "cart", "cart_items", "order_items", "purchases", "payments",
    "transactions", "invoices", "receipts", "billing", "shipping",
    "addresses", "coupons", "discounts", "promotions",
    # organisations
    "companies", "organizations", "departments", "teams", "groups",
    "branches", "offices", "locations", "places", "venues",
    # events
    "events", "appointments", "bookings", "reservations", "schedules",
    "calendar", "meetings", "slots", "availability",
    # messaging
    "messages", "notifications", "emails", "sms", "alerts", "chats",
    "conversations", "threads", "channels",
    # logging / analytics
    "logs", "audit_logs", "activity_logs", "access_logs", "error_logs",
    "analytics", "metrics", "stats", "reports", "tracking",
    # configuration
    "settings", "config", "configuration", "preferences", "options",
    "features", "flags", "toggles", "variables", "constants",
    # geography
    "countries", "states", "cities", "regions", "districts", "zones",
    "postcodes", "zipcodes", "coordinates", "maps",
    # social
    "friends", "followers", "following", "connections", "relationships",
    "likes", "favorites", "bookmarks", "shares", "votes",
    # project management
    "projects", "tasks", "todos", "issues", "tickets", "bugs", "milestones",
    "sprints", "boards", "workflows",
    # system
    "migrations", "seeds", "backups", "imports", "exports", "queues", "jobs",
    "workers", "processes", "crons", "audit", "history", "versions",
    "revisions", "changes", "temp", "temporary", "cache", "buffer",
)

BUILTIN_SCALARS = frozenset({"String", "Int", "Float", "Boolean", "ID"})
PAGINATION_SUFFIXES = ("Connection", "Edge", "PageInfo")

GRAPH_INTROSPECTION_QUERY = """
query IntrospectionQuery {
  __schema {
    queryType {
      name
      fields {
        name
        type {
          name
          kind
          ofType {
            name
            kind
            ofType { name kind }
          }
        }
      }
    }
    types { name kind fields { name type { name kind } } }
  }
}
"""


class DiscoveryAdapter(QueryAdapter, Protocol):
    """Interface for the remote calls made by discovery strategies."""

    def rpc(self, fn: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    def fetch_api_description(self) -> dict[str, Any]:
        ...

    def graphql(self, query: str) -> dict[str, Any]:
        ...


class DiscoveryStrategy(ABC):
    """
    Abstract base class for a discovery technique.

    Subclasses implement `discover`, which may raise freely; callers use
    `run`, which isolates failures so one broken channel never affects
    another.
    """

    label: str = "discovery"

    @abstractmethod
    def discover(
        self, adapter: DiscoveryAdapter, log: LogSink
    ) -> list[CollectionDescriptor]:
        """Return the collections this technique can see."""
        ...

    def run(
        self, adapter: DiscoveryAdapter, log: LogSink
    ) -> list[CollectionDescriptor]:
        """Run `discover`, degrading any failure to an empty result."""
        log.append(f"   Checking {self.label}...")
        try:
            found = self.discover(adapter, log)
        except Exception as exc:  # noqa: BLE001
            log.append(f"   {self.label} failed: {describe_error(exc)}")
            return []
        if found:
            log.append(f"   Found {len(found)} via {self.label}")
        else:
            log.append(f"   {self.label} returned no results")
        return found


class CatalogTablesStrategy(DiscoveryStrategy):
    """Base tables of one namespace from information_schema.tables."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        self.label = f"information_schema.tables ({namespace} schema)"

    def discover(self, adapter, log):
        result = adapter.query(
            "tables",
            namespace="information_schema",
            columns=("table_name", "table_schema", "table_type"),
            eq={"table_schema": self.namespace, "table_type": "BASE TABLE"},
        )
        return [
            CollectionDescriptor(
                name=row["table_name"],
                namespace=row.get("table_schema") or self.namespace,
            )
            for row in result.data
            if row.get("table_name")
        ]


class SystemCatalogStrategy(DiscoveryStrategy):
    """Tables of all scanned namespaces from pg_catalog.pg_tables."""

    label = "pg_tables"

    def discover(self, adapter, log):
        result = adapter.query(
            "pg_tables",
            namespace="pg_catalog",
            columns=("tablename", "schemaname"),
            in_={"schemaname": SCANNED_NAMESPACES},
        )
        return [
            CollectionDescriptor(name=row["tablename"], namespace=row["schemaname"])
            for row in result.data
            if row.get("tablename") and row.get("schemaname")
        ]


class RpcTableNamesStrategy(DiscoveryStrategy):
    """
    Table names returned by a `get_table_names` database function.

    Most projects do not define it; absence is the common case and yields
    nothing without a retry.
    """

    label = "RPC get_table_names"

    def __init__(self, function_name: str = "get_table_names"):
        self.function_name = function_name

    def discover(self, adapter, log):
        try:
            data = adapter.rpc(self.function_name)
        except Exception:  # noqa: BLE001
            return []
        if not isinstance(data, list):
            return []
        out: list[CollectionDescriptor] = []
        for item in data:
            name = item.get("table_name") if isinstance(item, Mapping) else item
            if isinstance(name, str) and name:
                out.append(CollectionDescriptor(name=name))
        return out


class ViewCatalogStrategy(DiscoveryStrategy):
    """Views of all scanned namespaces from information_schema.views."""

    label = "information_schema.views"

    def discover(self, adapter, log):
        result = adapter.query(
            "views",
            namespace="information_schema",
            columns=("table_name", "table_schema"),
            in_={"table_schema": SCANNED_NAMESPACES},
        )
        return [
            CollectionDescriptor(
                name=row["table_name"],
                namespace=row["table_schema"],
                kind=CollectionKind.VIEW,
            )
            for row in result.data
            if row.get("table_name") and row.get("table_schema")
        ]


class AuthProbeStrategy(DiscoveryStrategy):
    """Direct zero-row probes of the well-known auth schema tables."""

    label = "known auth schema tables"

    def __init__(self, names: Sequence[str] = AUTH_COLLECTION_NAMES):
        self.names = tuple(names)

    def discover(self, adapter, log):
        found = probe_collections(
            adapter, self.names, AUTH_NAMESPACE, batch_size=1, pause=0
        )
        for name in found:
            log.append(f"     Found auth table: {name}")
        return [CollectionDescriptor(name=n, namespace=AUTH_NAMESPACE) for n in found]


class ApiDescriptionStrategy(DiscoveryStrategy):
    """Collection names taken from the REST endpoint's OpenAPI paths."""

    label = "REST API introspection"

    def discover(self, adapter, log):
        document = adapter.fetch_api_description()
        return [
            CollectionDescriptor(name=name)
            for name in collection_names_from_paths((document or {}).get("paths") or {})
        ]


class GraphIntrospectionStrategy(DiscoveryStrategy):
    """Queryable object types exposed by the GraphQL endpoint."""

    label = "GraphQL introspection"

    def discover(self, adapter, log):
        try:
            response = adapter.graphql(GRAPH_INTROSPECTION_QUERY)
        except Exception:  # noqa: BLE001
            log.append("   GraphQL endpoint not accessible or disabled")
            return []
        schema = ((response or {}).get("data") or {}).get("__schema")
        if not schema:
            return []

        found = graph_collections(schema)
        for d in found:
            log.append(
                f"     Found queryable GraphQL type: {d.graph_type_name} -> "
                f"{d.name} ({d.field_count} fields)"
            )
        query_fields = (schema.get("queryType") or {}).get("fields") or []
        log.append(
            f"   Analyzed {len(query_fields)} Query fields, "
            f"found {len(found)} queryable object types"
        )
        return found


class CommonNameStrategy(DiscoveryStrategy):
    """Brute force probing of generic table names, paced in batches."""

    label = "common table names"

    def __init__(
        self,
        names: Sequence[str] = COMMON_COLLECTION_NAMES,
        *,
        batch_size: int = 10,
        batch_pause: float = 0.1,
    ):
        self.names = tuple(names)
        self.batch_size = batch_size
        self.batch_pause = batch_pause

    def discover(self, adapter, log):
        found = probe_collections(
            adapter,
            self.names,
            PRIMARY_NAMESPACE,
            batch_size=self.batch_size,
            pause=self.batch_pause,
        )
        if found:
            log.append(f"     Found: {', '.join(found)}")
        return [CollectionDescriptor(name=n) for n in found]


def collection_names_from_paths(paths: Iterable[str]) -> list[str]:
    """
    Extract collection names from OpenAPI path keys.

    Keeps paths like `/orders`; drops the root path, parameterised paths and
    nested ones such as `/rpc/fn`.
    """
    names: list[str] = []
    for path in paths:
        if not path.startswith("/") or "{" in path:
            continue
        name = path[1:]
        if name and "/" not in name:
            names.append(name)
    return names


def graph_type_to_collection_name(type_name: str) -> str:
    """Convert `UserProfile` to `user_profile`."""
    return re.sub(r"^_", "", re.sub(r"([A-Z])", r"_\1", type_name).lower())


def _leaf_type_name(type_ref: Mapping[str, Any] | None) -> str | None:
    """Unwrap LIST/NON_NULL wrappers down to the named type."""
    while type_ref and type_ref.get("ofType"):
        type_ref = type_ref["ofType"]
    return (type_ref or {}).get("name")


def graph_collections(schema: Mapping[str, Any]) -> list[CollectionDescriptor]:
    """
    Find the queryable object types in an introspection `__schema` payload.

    A type is queryable when it is the leaf return type of a root Query field,
    is an OBJECT with at least one field, and is not a pagination wrapper.
    """
    query_fields = (schema.get("queryType") or {}).get("fields") or []
    returned: set[str] = set()
    for f in query_fields:
        leaf = _leaf_type_name(f.get("type"))
        if leaf and not leaf.startswith("__") and leaf not in BUILTIN_SCALARS:
            returned.add(leaf)

    out: list[CollectionDescriptor] = []
    for t in schema.get("types") or []:
        name = t.get("name")
        fields = t.get("fields") or []
        if (
            name in returned
            and t.get("kind") == "OBJECT"
            and fields
            and not name.endswith(PAGINATION_SUFFIXES)
        ):
            out.append(
                CollectionDescriptor(
                    name=graph_type_to_collection_name(name),
                    kind=CollectionKind.GRAPH_TYPE,
                    graph_type_name=name,
                    field_count=len(fields),
                )
            )
    return out


def default_strategies(
    fast_discovery: bool = False,
    *,
    batch_size: int = 10,
    batch_pause: float = 0.1,
) -> list[DiscoveryStrategy]:
    """Return the strategy chain in invocation order."""
    strategies: list[DiscoveryStrategy] = [
        CatalogTablesStrategy(PRIMARY_NAMESPACE),
        CatalogTablesStrategy(AUTH_NAMESPACE),
        SystemCatalogStrategy(),
        RpcTableNamesStrategy(),
        ViewCatalogStrategy(),
        AuthProbeStrategy(),
        ApiDescriptionStrategy(),
        GraphIntrospectionStrategy(),
    ]
    if not fast_discovery:
        strategies.append(
            CommonNameStrategy(batch_size=batch_size, batch_pause=batch_pause)
        )
    return strategies


def merge_descriptors(
    descriptors: Iterable[CollectionDescriptor],
    on_duplicate: Callable[[CollectionDescriptor, CollectionDescriptor], None]
    | None = None,
) -> list[CollectionDescriptor]:
    """
    De-duplicate descriptors by name, keeping the first occurrence.

    Order is preserved. `on_duplicate(kept, dropped)` is called for every
    descriptor that loses to an earlier one with the same name.
    """
    kept: dict[str, CollectionDescriptor] = {}
    for d in descriptors:
        first = kept.get(d.name)
        if first is None:
            kept[d.name] = d
        elif on_duplicate is not None:
            on_duplicate(first, d)
    return list(kept.values())


def discover_collections(
    adapter: DiscoveryAdapter,
    log: LogSink,
    strategies: Sequence[DiscoveryStrategy] | None = None,
    *,
    fast_discovery: bool = False,
    max_parallel: int = 1,
) -> list[CollectionDescriptor]:
    """
    Run every strategy and merge their results.

    Strategies run one after the other by default; with `max_parallel > 1`
    they run in a thread pool. Either way results are folded in strategy
    order, so the merged output does not depend on scheduling.
    """
    if max_parallel < 1:
        raise ValueError("max_parallel must be >= 1")
    if strategies is None:
        strategies = default_strategies(fast_discovery)

    log.append("Fetching schema information...")
    brute_force = any(isinstance(s, CommonNameStrategy) for s in strategies)
    if fast_discovery and not brute_force:
        log.append("   Skipping comprehensive table name discovery (fast mode enabled)")

    if max_parallel == 1:
        batches = [s.run(adapter, log) for s in strategies]
    else:
        with ThreadPoolExecutor(max_workers=max_parallel) as pool:
            batches = list(pool.map(lambda s: s.run(adapter, log), strategies))

    def _report(kept: CollectionDescriptor, dropped: CollectionDescriptor) -> None:
        if dropped.namespace != kept.namespace:
            log.append(
                f"   {dropped.qualified_name} shadowed by {kept.qualified_name} "
                "(same name, different schema)"
            )
        elif dropped.is_graph_type and not kept.is_graph_type:
            log.append(
                f"   GraphQL type {dropped.graph_type_name} merged into "
                f"{kept.qualified_name}"
            )

    merged = merge_descriptors(
        (d for batch in batches for d in batch), on_duplicate=_report
    )
    log.append(f"   Total unique tables/views discovered: {len(merged)}")
    return merged
