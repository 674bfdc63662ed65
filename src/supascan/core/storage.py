"""Storage bucket indexing and public exposure verification.

Buckets are scanned one after the other. For each bucket the root level is
listed page by page (pagination is inherently sequential), likely folders are
listed one level deep, and everything stops at a global per-bucket cap. For
buckets configured public, a handful of object URLs are fetched without
credentials: a configured-public bucket is not necessarily reachable, and a
successful anonymous fetch is definitive proof of exposure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from supascan.core.errors import describe_error
from supascan.core.models import (
    Bucket,
    BucketAudit,
    PublicUrlCheck,
    StorageEntry,
)
from supascan.core.runlog import LogSink

STORAGE_INDEX_LIMIT = 2000
FIRST_PAGE_SIZE = 500
NEXT_PAGE_SIZE = 200
FOLDER_PAGE_SIZE = 100
MAX_FOLDER_PREFIXES = 30
SAMPLE_PATHS_SHOWN = 10
PUBLIC_VERIFY_SAMPLE = 5


class StorageAdapter(Protocol):
    """Interface for the storage calls made by the scanner."""

    def list_buckets(self) -> list[Bucket]:
        ...

    def list_objects(
        self, bucket: str, prefix: str = "", *, limit: int, offset: int = 0
    ) -> list[StorageEntry]:
        ...

    def public_url(self, bucket: str, path: str) -> str:
        ...

    def is_publicly_reachable(self, url: str) -> bool:
        ...


@dataclass(frozen=True)
class IndexedObject:
    """An indexed object path and its size, when the listing reported one."""

    path: str
    size: int | None = None

    def display(self) -> str:
        if self.size is None:
            return self.path
        return f"{self.path} ({self.size} bytes)"


@dataclass(frozen=True)
class BucketIndex:
    """Objects indexed for one bucket plus the first listing error, if any."""

    objects: tuple[IndexedObject, ...] = ()
    error: str | None = None


def index_bucket(
    adapter: StorageAdapter,
    bucket: str,
    log: LogSink,
    *,
    limit: int = STORAGE_INDEX_LIMIT,
) -> BucketIndex:
    """
    Index up to `limit` objects of a bucket.

    The root is listed with a first page of 500 entries and further pages of
    200 until a short page signals the end. Root entries without a `.` are
    treated as possible folders; up to 30 of them are listed one level deep.
    """
    objects: list[IndexedObject] = []

    def _add(path: str, size: int | None) -> bool:
        if len(objects) >= limit:
            return False
        objects.append(IndexedObject(path=path, size=size))
        return True

    try:
        page = adapter.list_objects(bucket, "", limit=FIRST_PAGE_SIZE)
    except Exception as exc:  # noqa: BLE001
        message = describe_error(exc)
        log.append(f"      List objects failed: {message}")
        return BucketIndex(error=message)

    error: str | None = None
    requested = FIRST_PAGE_SIZE
    offset = 0
    while True:
        for entry in page:
            if not _add(entry.name, entry.size):
                break
        offset += len(page)
        if len(page) < requested or len(objects) >= limit:
            break
        requested = NEXT_PAGE_SIZE
        try:
            page = adapter.list_objects(bucket, "", limit=requested, offset=offset)
        except Exception as exc:  # noqa: BLE001
            error = describe_error(exc)
            log.append(f"      List objects (offset {offset}) failed: {error}")
            break

    folders = [o.path for o in objects if o.path and "." not in o.path]
    for prefix in folders[:MAX_FOLDER_PREFIXES]:
        if len(objects) >= limit:
            break
        try:
            entries = adapter.list_objects(bucket, prefix, limit=FOLDER_PAGE_SIZE)
        except Exception as exc:  # noqa: BLE001
            log.append(f"      List {prefix}/ failed: {describe_error(exc)}")
            continue
        for entry in entries:
            if not _add(f"{prefix}/{entry.name}", entry.size):
                break

    return BucketIndex(objects=tuple(objects), error=error)


def verify_public_access(
    adapter: StorageAdapter,
    bucket: str,
    objects: tuple[IndexedObject, ...],
    *,
    sample_size: int = PUBLIC_VERIFY_SAMPLE,
) -> PublicUrlCheck:
    """Fetch the public URL of the first objects without credentials."""
    sample = objects[:sample_size]
    verified = 0
    for obj in sample:
        try:
            url = adapter.public_url(bucket, obj.path)
            reachable = bool(url) and adapter.is_publicly_reachable(url)
        except Exception:  # noqa: BLE001
            reachable = False
        if reachable:
            verified += 1
    return PublicUrlCheck(verified=verified, sample_size=len(sample))


def audit_bucket(
    adapter: StorageAdapter, bucket: Bucket, log: LogSink
) -> BucketAudit:
    """Index one bucket and, when it is configured public, verify exposure."""
    log.append("")
    log.append(f"   Bucket: {bucket.name}")
    log.append(f"      Public (config): {'YES' if bucket.public else 'No'}")
    if bucket.file_size_limit is not None:
        log.append(f"      File size limit: {bucket.file_size_limit}")

    index = index_bucket(adapter, bucket.name, log)
    objects = index.objects
    sample_paths = tuple(o.display() for o in objects[:SAMPLE_PATHS_SHOWN])

    if objects:
        log.append(f"      Indexed objects: {len(objects)}")
        for p in sample_paths:
            log.append(f"         - {p}")
        if len(objects) > SAMPLE_PATHS_SHOWN:
            log.append(f"         ... and {len(objects) - SAMPLE_PATHS_SHOWN} more")
    elif index.error is None:
        log.append("      Indexed objects: 0 (empty or no list permission).")

    check: PublicUrlCheck | None = None
    if bucket.public and objects:
        check = verify_public_access(adapter, bucket.name, objects)
        log.append(
            f"      Public URL check: {check.verified}/{check.sample_size} "
            "sample URLs reachable without auth"
        )
        if check.verified > 0:
            log.append(
                "      Bucket is exposed publicly; content can be accessed by "
                "anyone with object paths."
            )

    return BucketAudit(
        name=bucket.name,
        public=bucket.public,
        file_size_limit=bucket.file_size_limit,
        object_count=len(objects),
        sample_paths=sample_paths,
        list_error=index.error,
        public_url_check=check,
    )


def scan_storage(adapter: StorageAdapter, log: LogSink) -> list[BucketAudit]:
    """Audit every visible bucket; a failure in one never stops the others."""
    log.append("")
    log.append("Storage bucket security analysis...")
    try:
        buckets = adapter.list_buckets()
    except Exception as exc:  # noqa: BLE001
        log.append(f"   Could not list storage buckets: {describe_error(exc)}")
        return []
    if not buckets:
        log.append("   No storage buckets found (or no permission to list buckets).")
        return []
    log.append(f"   Found {len(buckets)} bucket(s).")

    audits: list[BucketAudit] = []
    for bucket in buckets:
        try:
            audits.append(audit_bucket(adapter, bucket, log))
        except Exception as exc:  # noqa: BLE001
            message = describe_error(exc)
            log.append(f"      Bucket scan failed: {message}")
            audits.append(
                BucketAudit(name=bucket.name, public=bucket.public, list_error=message)
            )

    log.append("")
    log.append("   Storage bucket analysis completed.")
    return audits
