"""Existence probing for collections.

A collection "exists" for the caller when a zero-row select against it
succeeds. This module contains the single-name probe and the rate-limited
batch prober used by the brute force and auth discovery strategies. Like the
rest of the core it is synchronous; concurrency within a batch uses a thread
pool so the pacing behaviour stays explicit and predictable.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Protocol, Sequence

from supascan.core.models import PRIMARY_NAMESPACE, QueryResult


class QueryAdapter(Protocol):
    """Interface for issuing collection queries."""

    def query(
        self,
        name: str,
        *,
        namespace: str = PRIMARY_NAMESPACE,
        columns: Sequence[str] = ("*",),
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Sequence[Any]] | None = None,
        order: str | None = None,
        limit: int | None = None,
        count: bool = False,
    ) -> QueryResult:
        """Select from `namespace.name`, raising on any server error."""
        ...


def collection_exists(
    adapter: QueryAdapter, name: str, namespace: str = PRIMARY_NAMESPACE
) -> bool:
    """Return True if a zero-row query against the collection succeeds."""
    try:
        adapter.query(name, namespace=namespace, limit=0)
    except Exception:  # noqa: BLE001
        return False
    return True


def probe_collections(
    adapter: QueryAdapter,
    names: Sequence[str],
    namespace: str = PRIMARY_NAMESPACE,
    *,
    batch_size: int = 10,
    pause: float = 0.1,
) -> list[str]:
    """
    Probe many collection names in rate-limited batches.

    Names inside a batch are probed concurrently; batches run one after the
    other with `pause` seconds between them.

    Args:
        adapter: Backend adapter used to issue the zero-row queries.
        names: Candidate collection names.
        namespace: Namespace every candidate is probed in.
        batch_size: Number of names probed concurrently.
        pause: Seconds to sleep between two batches.

    Returns:
        The names that exist, in input order.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    if not names:
        return []

    found: list[str] = []

    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, len(names), batch_size):
            batch = list(names[start : start + batch_size])
            hits = pool.map(
                lambda n: collection_exists(adapter, n, namespace), batch
            )
            found.extend(n for n, ok in zip(batch, hits) if ok)

            if start + batch_size < len(names) and pause > 0:
                time.sleep(pause)

    return found
