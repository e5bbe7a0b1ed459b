"""Process-local query ID cache backed by a durable store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from ..errors import DiscoveryError
from ..models.query_ids import QueryIdDiscovery, QueryIdSnapshot
from .constants import QUERY_ID_TTL_MS
from .discovery import DiscoveryResult, discover_query_ids
from .store import QueryIdStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotInfo:
    snapshot: QueryIdSnapshot
    location: str
    age: timedelta
    is_fresh: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueryIdCache:
    """Owns the current query ID snapshot and its freshness policy.

    The durable copy is read lazily, once per cache object, and only re-read
    after ``clear_memory()``. A successful refresh writes the store first and
    then swaps the in-memory snapshot, so the two never disagree.
    """

    def __init__(
        self,
        store: QueryIdStore,
        discover: Callable[[], DiscoveryResult] | None = None,
        ttl_ms: int = QUERY_ID_TTL_MS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms
        self._discover = discover or discover_query_ids
        self._clock = clock
        self._snapshot: QueryIdSnapshot | None = None
        self._loaded = False

    def snapshot(self) -> QueryIdSnapshot | None:
        if not self._loaded:
            self._snapshot = self.store.load()
            self._loaded = True
        return self._snapshot

    def snapshot_info(self) -> SnapshotInfo | None:
        snapshot = self.snapshot()
        if snapshot is None:
            return None
        now = self._clock()
        return SnapshotInfo(
            snapshot=snapshot,
            location=self.store.location,
            age=snapshot.age(now),
            is_fresh=snapshot.is_fresh(now),
        )

    def get(self, operation: str) -> str:
        """Return the cached query ID for *operation*, or an empty string."""
        snapshot = self.snapshot()
        if snapshot is None:
            return ""
        return snapshot.ids.get(operation, "")

    def clear_memory(self) -> None:
        """Forget the in-memory snapshot so the next access reloads the store."""
        self._snapshot = None
        self._loaded = False

    def refresh(self, force: bool = False) -> QueryIdSnapshot | None:
        """Re-run discovery unless the current snapshot is still fresh.

        Discovery or storage failures are logged and leave the current snapshot
        in place; the current (possibly None) snapshot is returned.
        """
        current = self.snapshot()
        if not force and current is not None and current.is_fresh(self._clock()):
            return current

        log.info("Refreshing query IDs from client bundles (force=%s)", force)
        try:
            result = self._discover()
        except DiscoveryError as e:
            log.warning("Query ID discovery failed: %s", e)
            return current

        try:
            snapshot = QueryIdSnapshot(
                fetched_at=self._clock(),
                ttl_ms=self.ttl_ms,
                ids={op: entry.query_id for op, entry in result.ids.items()},
                discovery=QueryIdDiscovery(pages=list(result.pages), bundles=result.bundles),
            )
        except ValidationError as e:
            log.warning("Discovered query IDs could not form a snapshot: %s", e.errors(include_url=False))
            return current
        if not snapshot.ids:
            log.warning("Query ID discovery returned no valid IDs; keeping current snapshot")
            return current

        try:
            self.store.save(snapshot)
        except OSError as e:
            log.error("Could not write query ID cache %s: %s", self.store.location, e)
            return current

        self._snapshot = snapshot
        self._loaded = True
        log.info("Stored %d query IDs in %s", len(snapshot.ids), self.store.location)
        return snapshot
