from supascan.core.models import CollectionDescriptor, CollectionKind, QueryResult
from supascan.core.runlog import RunLog
from supascan.core.sampling import (
    MASK_TOKEN,
    SAMPLE_ROWS_COUNT,
    mask_auth_user_row,
    sample_rows,
)


class _QueryAdapterStub:
    def __init__(self, tables: dict):
        self.tables = tables
        self.calls: list[tuple[str, str, bool]] = []

    def query(self, name, *, namespace="public", count=False, **kwargs):
        self.calls.append((namespace, name, count))
        result = self.tables.get((namespace, name))
        if result is None:
            raise RuntimeError(f'relation "{namespace}.{name}" does not exist')
        if isinstance(result, Exception):
            raise result
        return result


def test_mask_auth_user_row_masks_only_present_values():
    row = {
        "id": "u1",
        "email": "a@x.io",
        "encrypted_password": "$2a$10$abc",
        "recovery_token": "",
    }

    masked = mask_auth_user_row(row)

    assert masked == {
        "id": "u1",
        "email": "a@x.io",
        "encrypted_password": MASK_TOKEN,
        "recovery_token": "",
    }
    assert "email_confirmation_token" not in masked
    assert row["encrypted_password"] == "$2a$10$abc"


def test_sample_rows_uses_exact_count_and_first_rows():
    rows = [{"id": i} for i in range(10)]
    adapter = _QueryAdapterStub({("public", "orders"): QueryResult(rows, count=42)})
    log = RunLog()

    sample = sample_rows(adapter, CollectionDescriptor(name="orders"), log)

    assert sample.row_count == 42
    assert list(sample.rows) == rows[:SAMPLE_ROWS_COUNT]
    assert sample.error is None
    assert adapter.calls == [("public", "orders", True)]
    assert "   Total rows: 42" in log.lines


def test_sample_rows_falls_back_to_returned_length():
    adapter = _QueryAdapterStub(
        {("public", "orders"): QueryResult([{"id": 1}, {"id": 2}], count=None)}
    )

    sample = sample_rows(adapter, CollectionDescriptor(name="orders"), RunLog())

    assert sample.row_count == 2


def test_sample_rows_empty_collection():
    adapter = _QueryAdapterStub({("public", "orders"): QueryResult([], count=0)})
    log = RunLog()

    sample = sample_rows(adapter, CollectionDescriptor(name="orders"), log)

    assert (sample.row_count, sample.rows, sample.error) == (0, (), None)
    assert "   No data found in this table" in log.lines


def test_auth_users_rows_are_masked():
    rows = [{"id": "u1", "encrypted_password": "$2a$10$abc"}]
    adapter = _QueryAdapterStub({("auth", "users"): QueryResult(rows, count=1)})

    sample = sample_rows(
        adapter, CollectionDescriptor(name="users", namespace="auth"), RunLog()
    )

    assert sample.rows == ({"id": "u1", "encrypted_password": MASK_TOKEN},)


def test_users_outside_auth_namespace_are_not_masked():
    rows = [{"id": "u1", "encrypted_password": "plain"}]
    adapter = _QueryAdapterStub({("public", "users"): QueryResult(rows, count=1)})

    sample = sample_rows(adapter, CollectionDescriptor(name="users"), RunLog())

    assert sample.rows[0]["encrypted_password"] == "plain"


def test_failure_keeps_message_verbatim_and_hints_for_auth():
    adapter = _QueryAdapterStub(
        {("auth", "sessions"): RuntimeError("permission denied for table sessions")}
    )
    log = RunLog()

    sample = sample_rows(
        adapter, CollectionDescriptor(name="sessions", namespace="auth"), log
    )

    assert sample.error == "permission denied for table sessions"
    assert sample.row_count == 0
    assert sample.rows == ()
    assert any("may require admin privileges" in line for line in log.lines)


def test_graph_type_retries_with_original_type_name():
    descriptor = CollectionDescriptor(
        name="user_profile",
        kind=CollectionKind.GRAPH_TYPE,
        graph_type_name="UserProfile",
        field_count=2,
    )
    adapter = _QueryAdapterStub(
        {("public", "UserProfile"): QueryResult([{"id": 1}], count=1)}
    )

    sample = sample_rows(adapter, descriptor, RunLog())

    assert sample.row_count == 1
    assert [name for _, name, _ in adapter.calls] == ["user_profile", "UserProfile"]


def test_graph_type_retry_failure_reports_first_error():
    descriptor = CollectionDescriptor(
        name="user_profile",
        kind=CollectionKind.GRAPH_TYPE,
        graph_type_name="UserProfile",
    )

    sample = sample_rows(_QueryAdapterStub({}), descriptor, RunLog())

    assert sample.error == 'relation "public.user_profile" does not exist'
