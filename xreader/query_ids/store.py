"""Storage backends for query ID snapshots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from ..models.query_ids import QueryIdSnapshot

log = logging.getLogger(__name__)


class QueryIdStore(Protocol):
    """Durable home of the current snapshot."""

    @property
    def location(self) -> str: ...

    def load(self) -> QueryIdSnapshot | None: ...

    def save(self, snapshot: QueryIdSnapshot) -> None: ...


def parse_snapshot(raw: Any) -> QueryIdSnapshot | None:
    """Validate a decoded cache document, returning None for any bad shape."""
    if not isinstance(raw, dict):
        return None
    try:
        return QueryIdSnapshot.model_validate(raw)
    except ValidationError as e:
        log.debug("Ignoring invalid query ID cache: %s", e.errors(include_url=False))
        return None


class FileQueryIdStore:
    """JSON file store. Writes go to a temp file that is renamed into place."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def load(self) -> QueryIdSnapshot | None:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Could not read query ID cache %s: %s", self.path, e)
            return None
        return parse_snapshot(raw)

    def save(self, snapshot: QueryIdSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_json(), f, indent=2)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryQueryIdStore:
    """In-memory store for tests and ephemeral sessions."""

    def __init__(self, snapshot: QueryIdSnapshot | None = None) -> None:
        self.snapshot = snapshot
        self.loads = 0
        self.saves = 0

    @property
    def location(self) -> str:
        return "<memory>"

    def load(self) -> QueryIdSnapshot | None:
        self.loads += 1
        return self.snapshot

    def save(self, snapshot: QueryIdSnapshot) -> None:
        self.saves += 1
        self.snapshot = snapshot
