import threading

import pytest

from supascan.core.models import QueryResult
from supascan.core.probing import collection_exists, probe_collections


class _ProbeAdapterStub:
    def __init__(self, existing: set[str]):
        self.existing = existing
        self.calls: list[tuple[str, str, int | None]] = []
        self._lock = threading.Lock()

    def query(self, name, *, namespace="public", limit=None, **kwargs):
        with self._lock:
            self.calls.append((name, namespace, limit))
        if name not in self.existing:
            raise RuntimeError(f'relation "{namespace}.{name}" does not exist')
        return QueryResult(data=[])


def test_collection_exists_uses_zero_row_probe():
    adapter = _ProbeAdapterStub({"orders"})

    assert collection_exists(adapter, "orders") is True
    assert collection_exists(adapter, "missing") is False
    assert adapter.calls == [("orders", "public", 0), ("missing", "public", 0)]


def test_probe_collections_rejects_non_positive_batch_size():
    with pytest.raises(ValueError, match="batch_size"):
        probe_collections(_ProbeAdapterStub(set()), ["a"], batch_size=0)


def test_probe_collections_returns_empty_on_empty_input():
    assert probe_collections(_ProbeAdapterStub(set()), [], pause=0) == []


def test_probe_collections_keeps_input_order():
    names = [f"t{i}" for i in range(25)]
    adapter = _ProbeAdapterStub({"t3", "t24", "t11", "t0"})

    found = probe_collections(adapter, names, batch_size=4, pause=0)

    assert found == ["t0", "t3", "t11", "t24"]
    assert len(adapter.calls) == 25


def test_probe_collections_pauses_between_batches_only(monkeypatch):
    sleeps: list[float] = []
    monkeypatch.setattr("supascan.core.probing.time.sleep", sleeps.append)

    probe_collections(
        _ProbeAdapterStub(set()), [f"t{i}" for i in range(25)], batch_size=10
    )

    assert sleeps == [0.1, 0.1]


def test_probe_collections_uses_given_namespace():
    adapter = _ProbeAdapterStub({"users"})

    found = probe_collections(adapter, ["users", "sessions"], "auth", pause=0)

    assert found == ["users"]
    assert {ns for _, ns, _ in adapter.calls} == {"auth"}
