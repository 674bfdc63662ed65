from types import SimpleNamespace

import httpx
import pytest

from supascan.core.adapters.supabaseapi import SupabaseAdapter
from supascan.core.errors import AuthError


class _Request:
    def __init__(self, log, data):
        self.log = log
        self.data = data

    def __getattr__(self, name):
        def _chain(*args, **kwargs):
            self.log.append((name, args, kwargs))
            return self

        return _chain

    def execute(self):
        return SimpleNamespace(data=self.data, count=len(self.data))


class _ClientStub:
    def __init__(self, data=(), buckets=(), entries=(), user=None):
        self.log: list[tuple] = []
        self.data = list(data)
        self.entries = list(entries)
        self.schema_clients: list[_SchemaClientStub] = []
        self.auth = SimpleNamespace(
            sign_in_with_password=lambda creds: SimpleNamespace(user=user),
            get_user=lambda token: SimpleNamespace(user=user),
            sign_out=lambda: None,
        )
        self.storage = SimpleNamespace(
            list_buckets=lambda: list(buckets),
            from_=lambda bucket: SimpleNamespace(
                list=lambda prefix, opts: self._list(bucket, prefix, opts),
                get_public_url=lambda path: f"https://cdn/{bucket}/{path}",
            ),
        )

    def _list(self, bucket, prefix, opts):
        self.log.append(("list", (bucket, prefix), opts))
        return self.entries

    @property
    def postgrest(self):
        return self

    def schema(self, namespace):
        self.log.append(("schema", (namespace,), {}))
        schema_client = _SchemaClientStub(self, namespace)
        self.schema_clients.append(schema_client)
        return schema_client


class _SchemaClientStub:
    def __init__(self, owner, namespace):
        self.owner = owner
        self.namespace = namespace
        self.closed = False

    def table(self, name):
        self.owner.log.append(("table", (name,), {}))
        return _Request(self.owner.log, self.owner.data)

    def aclose(self):
        self.closed = True


def _adapter(client, handler=None):
    http = httpx.Client(transport=httpx.MockTransport(handler or (lambda r: None)))
    return SupabaseAdapter(
        client, service_url="https://abc.supabase.co", api_key="anon", http=http
    )


def test_query_builds_filters_on_the_namespace():
    client = _ClientStub(data=[{"table_name": "orders"}])

    result = _adapter(client).query(
        "tables",
        namespace="information_schema",
        columns=("table_name",),
        eq={"table_schema": "public"},
        in_={"table_type": ("BASE TABLE",)},
        order="table_name",
        limit=5,
        count=True,
    )

    assert result.data == [{"table_name": "orders"}]
    assert result.count == 1
    assert [entry[0] for entry in client.log] == [
        "schema",
        "table",
        "select",
        "eq",
        "in_",
        "order",
        "limit",
    ]
    assert client.log[2] == ("select", ("table_name",), {"count": "exact"})
    assert client.log[4] == ("in_", ("table_type", ["BASE TABLE"]), {})


def test_queries_reuse_one_schema_client_per_namespace():
    client = _ClientStub(data=[])
    adapter = _adapter(client)

    adapter.query("orders")
    adapter.query("customers")
    adapter.query("users", namespace="auth")

    assert [(s.namespace, s.closed) for s in client.schema_clients] == [
        ("public", False),
        ("auth", False),
    ]

    adapter.close()

    assert all(s.closed for s in client.schema_clients)


def test_sign_out_closes_cached_schema_clients():
    client = _ClientStub(data=[])
    adapter = _adapter(client)

    adapter.query("orders")
    adapter.sign_out()
    adapter.query("orders")

    assert [s.closed for s in client.schema_clients] == [True, False]


def test_sign_in_without_user_raises():
    with pytest.raises(AuthError):
        _adapter(_ClientStub(user=None)).sign_in("a@x.io", "pw")


def test_user_for_token_maps_user():
    user = SimpleNamespace(id="u1", email="a@x.io")

    found = _adapter(_ClientStub(user=user)).user_for_token("jwt")

    assert (found.id, found.email) == ("u1", "a@x.io")


def test_list_buckets_and_objects_are_mapped():
    client = _ClientStub(
        buckets=[
            SimpleNamespace(name="avatars", public=True, file_size_limit=1024),
            SimpleNamespace(name="docs", public=False, file_size_limit=None),
        ],
        entries=[
            {"name": "a.png", "metadata": {"size": 10}},
            {"name": "folder", "metadata": None},
            {"name": ""},
        ],
    )
    adapter = _adapter(client)

    buckets = adapter.list_buckets()
    entries = adapter.list_objects("avatars", "", limit=500, offset=0)

    assert [(b.name, b.public, b.file_size_limit) for b in buckets] == [
        ("avatars", True, 1024),
        ("docs", False, None),
    ]
    assert [(e.name, e.size) for e in entries] == [("a.png", 10), ("folder", None)]
    assert client.log[-1][2]["limit"] == 500


def test_api_description_sends_credentials():
    seen = {}

    def _handler(request):
        seen.update(url=str(request.url), headers=request.headers)
        return httpx.Response(200, json={"paths": {"/orders": {}}})

    document = _adapter(_ClientStub(), _handler).fetch_api_description()

    assert document == {"paths": {"/orders": {}}}
    assert seen["url"] == "https://abc.supabase.co/rest/v1/"
    assert seen["headers"]["apikey"] == "anon"
    assert seen["headers"]["authorization"] == "Bearer anon"


def test_graphql_errors_propagate():
    adapter = _adapter(_ClientStub(), lambda r: httpx.Response(404))

    with pytest.raises(httpx.HTTPStatusError):
        adapter.graphql("{ __schema { types { name } } }")


def test_public_reachability_uses_no_credentials():
    seen = []

    def _handler(request):
        seen.append(request.headers)
        if request.url.path.endswith("ok.png"):
            return httpx.Response(200, content=b"png")
        if request.url.path.endswith("down.png"):
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(400)

    adapter = _adapter(_ClientStub(), _handler)

    assert adapter.is_publicly_reachable("https://cdn/avatars/ok.png") is True
    assert adapter.is_publicly_reachable("https://cdn/avatars/private.png") is False
    assert adapter.is_publicly_reachable("https://cdn/avatars/down.png") is False
    assert all("authorization" not in h and "apikey" not in h for h in seen)
