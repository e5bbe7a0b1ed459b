"""Tests for query ID dispatch with refresh-on-rotation."""

import pytest
from conftest import NOW, make_snapshot

from xreader.errors import DispatchError
from xreader.fetcher.dispatch import (
    ApplicationError,
    Failure,
    NotFound,
    QueryIdDispatcher,
    Success,
    unique_ids,
)
from xreader.query_ids import MemoryQueryIdStore, QueryIdCache


class RecordingAttempt:
    """Attempt function returning scripted outcomes per query ID."""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls: list[str] = []

    def __call__(self, query_id):
        self.calls.append(query_id)
        return self.outcomes.get(query_id, NotFound())


class StubCache:
    """Cache double with a scripted post-refresh ID and a refresh counter."""

    def __init__(self, current="", refreshed=None):
        self.current = current
        self.refreshed = refreshed
        self.refreshes = 0

    def get(self, operation):
        return self.current

    def refresh(self, force=False):
        self.refreshes += 1
        if self.refreshed is not None:
            self.current = self.refreshed


def test_unique_ids_keeps_order_and_drops_empties():
    assert unique_ids(["a", "", None, "b"], ["a", "c", "b"]) == ["a", "b", "c"]


class TestCandidates:
    def test_cache_then_fallback_then_extras(self):
        dispatcher = QueryIdDispatcher(StubCache("cached"), fallback_ids={"Op": "fallback"})
        assert dispatcher.candidates("Op", ["extra1", "fallback", "extra2"]) == [
            "cached",
            "fallback",
            "extra1",
            "extra2",
        ]

    def test_cache_equal_to_fallback_tried_once(self):
        dispatcher = QueryIdDispatcher(StubCache("same"), fallback_ids={"Op": "same"})
        assert dispatcher.candidates("Op") == ["same"]

    def test_no_cache_entry(self):
        dispatcher = QueryIdDispatcher(StubCache(""), fallback_ids={"Op": "fallback"})
        assert dispatcher.candidates("Op") == ["fallback"]


class TestExecute:
    def test_first_success_short_circuits(self):
        cache = StubCache("cached")
        attempt = RecordingAttempt({"cached": Success("ok"), "fallback": Success("unused")})
        dispatcher = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"})

        assert dispatcher.execute("Op", [], attempt) == "ok"
        assert attempt.calls == ["cached"]
        assert cache.refreshes == 0

    def test_falls_through_to_next_candidate(self):
        attempt = RecordingAttempt({"cached": Failure(500, "HTTP 500: oops"), "fallback": Success(7)})
        dispatcher = QueryIdDispatcher(StubCache("cached"), fallback_ids={"Op": "fallback"})

        assert dispatcher.execute("Op", [], attempt) == 7
        assert attempt.calls == ["cached", "fallback"]

    def test_all_not_found_refreshes_exactly_once(self):
        cache = StubCache("cached")
        attempt = RecordingAttempt({})
        dispatcher = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"})

        with pytest.raises(DispatchError, match="Failed to execute Op"):
            dispatcher.execute("Op", ["extra"], attempt)

        assert cache.refreshes == 1
        assert attempt.calls == ["cached", "fallback", "extra"]

    def test_refreshed_id_succeeds(self):
        cache = StubCache("stale", refreshed="fresh")
        attempt = RecordingAttempt({"fresh": Success("done")})
        dispatcher = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"})

        assert dispatcher.execute("Op", [], attempt) == "done"
        assert attempt.calls == ["stale", "fallback", "fresh"]
        assert cache.refreshes == 1

    def test_no_refresh_without_not_found(self):
        cache = StubCache("cached")
        attempt = RecordingAttempt({"cached": Failure(None, "timed out"), "fallback": ApplicationError("bad")})
        dispatcher = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"})

        with pytest.raises(DispatchError, match="^bad$"):
            dispatcher.execute("Op", [], attempt)

        assert cache.refreshes == 0

    def test_last_error_message_reported(self):
        cache = StubCache("cached")
        attempt = RecordingAttempt({"cached": Failure(429, "HTTP 429: slow down"), "fallback": NotFound()})
        dispatcher = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"})

        with pytest.raises(DispatchError) as excinfo:
            dispatcher.execute("Op", [], attempt)

        assert str(excinfo.value) == "HTTP 429: slow down"
        assert excinfo.value.operation == "Op"
        assert cache.refreshes == 1

    def test_real_cache_refresh_uses_new_snapshot(self):
        class Rotating:
            calls = 0

            def __call__(self):
                from xreader.query_ids.discovery import DiscoveredQueryId, DiscoveryResult

                self.calls += 1
                return DiscoveryResult(ids={"Op": DiscoveredQueryId("rotated", "main.js")}, pages=[])

        store = MemoryQueryIdStore(make_snapshot({"Op": "old"}))
        discover = Rotating()
        cache = QueryIdCache(store, discover=discover, clock=lambda: NOW)
        attempt = RecordingAttempt({"rotated": Success("fresh data")})

        result = QueryIdDispatcher(cache, fallback_ids={"Op": "fallback"}).execute("Op", [], attempt)

        assert result == "fresh data"
        assert discover.calls == 1
        assert attempt.calls == ["old", "fallback", "rotated"]
        assert store.snapshot.ids == {"Op": "rotated"}
