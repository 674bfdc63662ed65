from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence

import httpx
from postgrest import SyncPostgrestClient
from supabase import Client

from supascan.core.errors import AuthError
from supascan.core.models import (
    PRIMARY_NAMESPACE,
    AuthUser,
    Bucket,
    QueryResult,
    StorageEntry,
)

_SORT_BY_NAME = {"column": "name", "order": "asc"}


class SupabaseAdapter:
    """Adapter around the Supabase SDK (auth, PostgREST, storage) plus raw HTTP."""

    def __init__(
        self,
        client: Client,
        *,
        service_url: str,
        api_key: str,
        bearer_token: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.client = client
        self.service_url = service_url
        self.api_key = api_key
        self.bearer_token = bearer_token
        self.http = http or httpx.Client(timeout=timeout, follow_redirects=True)
        # Each PostgREST schema client owns an HTTP session; one per namespace.
        # Cleared on sign-in and sign-out so the new Authorization header applies.
        self._postgrest: dict[str, SyncPostgrestClient] = {}
        self._postgrest_lock = threading.Lock()

    def _credential_headers(self) -> dict[str, str]:
        """Headers for calls made outside the SDK (REST description, GraphQL)."""
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.bearer_token or self.api_key}",
        }

    # -- auth -----------------------------------------------------------------

    def session_email(self) -> str | None:
        """Return the email of the current session, or None when anonymous."""
        session = self.client.auth.get_session()
        if not session or not getattr(session, "user", None):
            return None
        return getattr(session.user, "email", None)

    def user_for_token(self, token: str) -> AuthUser | None:
        """Resolve the user a bearer token belongs to."""
        response = self.client.auth.get_user(token)
        user = getattr(response, "user", None)
        if not user:
            return None
        return AuthUser(
            id=getattr(user, "id", None), email=getattr(user, "email", None)
        )

    def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email/password; the SDK raises on bad credentials."""
        response = self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        self._drop_schema_clients()
        user = getattr(response, "user", None)
        if not user:
            raise AuthError("Sign-in returned no user.")
        return AuthUser(
            id=getattr(user, "id", None),
            email=getattr(user, "email", None) or email,
        )

    def sign_out(self) -> None:
        self.client.auth.sign_out()
        self._drop_schema_clients()

    # -- data -----------------------------------------------------------------

    def _schema_client(self, namespace: str) -> SyncPostgrestClient:
        with self._postgrest_lock:
            schema_client = self._postgrest.get(namespace)
            if schema_client is None:
                schema_client = self.client.postgrest.schema(namespace)
                self._postgrest[namespace] = schema_client
            return schema_client

    def _drop_schema_clients(self) -> None:
        with self._postgrest_lock:
            stale = list(self._postgrest.values())
            self._postgrest.clear()
        for schema_client in stale:
            schema_client.aclose()

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
        """Run a select against `namespace.name`; PostgREST errors propagate."""
        builder = self._schema_client(namespace).table(name)
        request = builder.select(*columns, count="exact" if count else None)
        for column, value in (eq or {}).items():
            request = request.eq(column, value)
        for column, values in (in_ or {}).items():
            request = request.in_(column, list(values))
        if order:
            request = request.order(order)
        if limit is not None:
            request = request.limit(limit)
        response = request.execute()
        return QueryResult(data=list(response.data or []), count=response.count)

    def rpc(self, fn: str, params: Mapping[str, Any] | None = None) -> Any:
        """Invoke a Postgres function through PostgREST and return its data."""
        return self.client.rpc(fn, dict(params or {})).execute().data

    # -- storage --------------------------------------------------------------

    def list_buckets(self) -> list[Bucket]:
        """List storage buckets visible to the current principal."""
        out: list[Bucket] = []
        for b in self.client.storage.list_buckets():
            name = getattr(b, "name", None) or getattr(b, "id", None)
            if not name:
                continue
            out.append(
                Bucket(
                    name=name,
                    public=getattr(b, "public", False) is True,
                    file_size_limit=getattr(b, "file_size_limit", None),
                )
            )
        return out

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        *,
        limit: int,
        offset: int = 0,
    ) -> list[StorageEntry]:
        """List one page of entries directly under `prefix`."""
        entries = self.client.storage.from_(bucket).list(
            prefix,
            {"limit": limit, "offset": offset, "sortBy": _SORT_BY_NAME},
        )
        out: list[StorageEntry] = []
        for e in entries or []:
            name = e.get("name")
            if not name:
                continue
            metadata = e.get("metadata") or {}
            out.append(StorageEntry(name=name, size=metadata.get("size")))
        return out

    def public_url(self, bucket: str, path: str) -> str:
        return self.client.storage.from_(bucket).get_public_url(path)

    # -- raw HTTP -------------------------------------------------------------

    def fetch_api_description(self) -> dict[str, Any]:
        """Fetch the OpenAPI document served at /rest/v1/."""
        headers = self._credential_headers()
        headers["Accept"] = "application/openapi+json"
        response = self.http.get(f"{self.service_url}/rest/v1/", headers=headers)
        response.raise_for_status()
        return response.json()

    def graphql(self, query: str) -> dict[str, Any]:
        """POST a query to /graphql/v1 and return the decoded response body."""
        response = self.http.post(
            f"{self.service_url}/graphql/v1",
            headers=self._credential_headers(),
            json={"query": query},
        )
        response.raise_for_status()
        return response.json()

    def is_publicly_reachable(self, url: str) -> bool:
        """GET `url` without any credentials; True only on a 2xx response."""
        try:
            response = self.http.get(url)
        except httpx.HTTPError:
            return False
        return response.is_success

    def close(self) -> None:
        self._drop_schema_clients()
        self.http.close()
