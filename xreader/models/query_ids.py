"""Pydantic models for discovered GraphQL query IDs."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_QUERY_ID = re.compile(r"^[a-zA-Z0-9_-]+$")


def is_valid_query_id(value: Any) -> bool:
    """Return True when *value* looks like an opaque query ID token."""
    return isinstance(value, str) and bool(VALID_QUERY_ID.match(value))


class QueryIdDiscovery(BaseModel):
    """Where a snapshot's IDs were found."""

    model_config = ConfigDict(frozen=True)

    pages: list[str]
    bundles: list[str]


class QueryIdSnapshot(BaseModel):
    """One immutable generation of the operation name to query ID mapping.

    Serialized with the camelCase field names of the cache file
    (``fetchedAt``, ``ttlMs``, ``ids``, ``discovery``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fetched_at: datetime = Field(alias="fetchedAt")
    ttl_ms: int = Field(alias="ttlMs", gt=0)
    ids: dict[str, str]
    discovery: QueryIdDiscovery

    @field_validator("fetched_at", mode="before")
    @classmethod
    def _require_timestamp_string(cls, value: Any) -> Any:
        # ISO-8601 strings or datetimes only; epoch numbers are rejected
        if not isinstance(value, (str, datetime)):
            raise ValueError("fetchedAt must be an ISO-8601 string")
        return value

    @field_validator("fetched_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("ids", mode="before")
    @classmethod
    def _drop_invalid_ids(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            raise ValueError("ids must be an object")
        cleaned: dict[str, str] = {}
        for operation, query_id in value.items():
            if not isinstance(query_id, str):
                continue
            query_id = query_id.strip()
            if is_valid_query_id(query_id):
                cleaned[str(operation)] = query_id
        return cleaned

    @property
    def ttl(self) -> timedelta:
        return timedelta(milliseconds=self.ttl_ms)

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the snapshot was fetched, never negative."""
        now = now or datetime.now(timezone.utc)
        return max(timedelta(0), now - self.fetched_at)

    def is_fresh(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.fetched_at <= self.ttl

    def to_json(self) -> dict[str, Any]:
        """Return the cache file representation."""
        return {
            "fetchedAt": self.fetched_at.isoformat(),
            "ttlMs": self.ttl_ms,
            "ids": dict(self.ids),
            "discovery": {
                "pages": list(self.discovery.pages),
                "bundles": list(self.discovery.bundles),
            },
        }
