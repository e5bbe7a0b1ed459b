"""GraphQL query ID discovery and caching."""

from pathlib import Path

from ..config import get_query_ids_cache_path, load_settings
from .cache import QueryIdCache, SnapshotInfo
from .constants import DEFAULT_QUERY_IDS, DISCOVERY_OPERATIONS, DISCOVERY_PAGES, QUERY_ID_TTL_MS
from .discovery import (
    DiscoveryResult,
    discover_bundle_urls,
    discover_query_ids,
    extract_bundle_urls,
    extract_operations,
    scan_bundles,
)
from .store import FileQueryIdStore, MemoryQueryIdStore, QueryIdStore, parse_snapshot


def create_default_cache(path: Path | None = None) -> QueryIdCache:
    """Build the file-backed cache configured for this user."""
    settings = load_settings().query_ids

    def _discover() -> DiscoveryResult:
        return discover_query_ids(
            operations=DISCOVERY_OPERATIONS,
            pages=DISCOVERY_PAGES,
            batch_size=settings.bundle_batch_size,
            timeout=settings.discovery_timeout_seconds,
        )

    return QueryIdCache(
        FileQueryIdStore(path or get_query_ids_cache_path()),
        discover=_discover,
        ttl_ms=int(settings.ttl_hours * 60 * 60 * 1000),
    )


__all__ = [
    "DEFAULT_QUERY_IDS",
    "DISCOVERY_OPERATIONS",
    "DISCOVERY_PAGES",
    "QUERY_ID_TTL_MS",
    "DiscoveryResult",
    "FileQueryIdStore",
    "MemoryQueryIdStore",
    "QueryIdCache",
    "QueryIdStore",
    "SnapshotInfo",
    "create_default_cache",
    "discover_bundle_urls",
    "discover_query_ids",
    "extract_bundle_urls",
    "extract_operations",
    "parse_snapshot",
    "scan_bundles",
]
