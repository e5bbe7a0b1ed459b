"""Query ID dispatch: try known IDs, refresh once on rotation, retry once."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..errors import DispatchError
from ..query_ids import DEFAULT_QUERY_IDS, QueryIdCache

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    """The server rejected the query ID itself (HTTP 404): it has rotated away."""


@dataclass(frozen=True)
class Failure:
    """Transport-level or malformed-response failure."""

    status: int | None
    message: str


@dataclass(frozen=True)
class ApplicationError:
    """The request went through but the API reported a semantic error."""

    message: str


Outcome = Success[T] | NotFound | Failure | ApplicationError


def unique_ids(*groups: Iterable[str | None]) -> list[str]:
    """Flatten ID groups, dropping empties and duplicates while keeping order."""
    ordered: list[str] = []
    seen: set[str] = set()
    for group in groups:
        for value in group:
            if not value or value in seen:
                continue
            seen.add(value)
            ordered.append(value)
    return ordered


class QueryIdDispatcher:
    """Runs a request against candidate query IDs for one operation.

    Phase one tries the cached ID, the hardcoded fallback and any caller extras,
    in that order, returning the first success. If that phase exhausts and at
    least one candidate answered ``NotFound``, the cache is force-refreshed once
    and the refreshed candidates (minus those already rejected) are tried once.
    There is never more than one refresh per ``execute`` call.
    """

    def __init__(self, cache: QueryIdCache, fallback_ids: dict[str, str] | None = None) -> None:
        self.cache = cache
        self.fallback_ids = DEFAULT_QUERY_IDS if fallback_ids is None else fallback_ids

    def candidates(self, operation: str, extra_ids: Iterable[str] = ()) -> list[str]:
        return unique_ids([self.cache.get(operation), self.fallback_ids.get(operation)], extra_ids)

    def execute(
        self,
        operation: str,
        extra_ids: Iterable[str],
        attempt: Callable[[str], Outcome[T]],
    ) -> T:
        """Return the first successful value, or raise ``DispatchError``."""
        last_error = ""
        rejected: list[str] = []

        def _run(query_ids: list[str]) -> Success[T] | None:
            nonlocal last_error
            for query_id in query_ids:
                outcome = attempt(query_id)
                if isinstance(outcome, Success):
                    return outcome
                if isinstance(outcome, NotFound):
                    log.debug("%s query ID %s rejected (404)", operation, query_id)
                    rejected.append(query_id)
                else:
                    last_error = outcome.message
                    log.debug("%s via %s failed: %s", operation, query_id, outcome.message)
            return None

        result = _run(self.candidates(operation, extra_ids))
        if result is not None:
            return result.value

        if rejected:
            log.info("%s: query IDs %s rotated, refreshing", operation, ", ".join(rejected))
            self.cache.refresh(force=True)
            retry_ids = [qid for qid in self.candidates(operation) if qid not in rejected]
            result = _run(retry_ids)
            if result is not None:
                return result.value

        raise DispatchError(operation, last_error or f"Failed to execute {operation}")
