"""Shared pytest fixtures for xreader tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the package to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from xreader.models import Cookies, QueryIdDiscovery, QueryIdSnapshot  # noqa: E402
from xreader.query_ids import MemoryQueryIdStore, QueryIdCache  # noqa: E402

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point config, home and credentials at a throwaway directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XREADER_QUERY_IDS_CACHE", str(tmp_path / "query-ids-cache.json"))
    for name in ("AUTH_TOKEN", "CT0", "TWITTER_AUTH_TOKEN", "TWITTER_CT0"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def cookies():
    return Cookies(auth_token="tok", ct0="csrf", source="test")


def make_snapshot(ids: dict[str, str], fetched_at: datetime = NOW, ttl_ms: int = 24 * 60 * 60 * 1000):
    return QueryIdSnapshot(
        fetched_at=fetched_at, ttl_ms=ttl_ms, ids=ids, discovery=QueryIdDiscovery(pages=[], bundles=[])
    )


class FakeDiscover:
    """Callable discovery stub that counts invocations."""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def memory_cache():
    """Cache over an empty in-memory store whose discovery always fails."""
    from xreader.errors import DiscoveryError

    discover = FakeDiscover(error=DiscoveryError("offline"))
    cache = QueryIdCache(MemoryQueryIdStore(), discover=discover, clock=lambda: NOW)
    cache.discover_stub = discover
    return cache


# ============================================================================
# GraphQL payload builders
# ============================================================================


def raw_user(screen_name="alice", name="Alice", rest_id="42", legacy=True):
    fields = {"screen_name": screen_name, "name": name}
    user = {"__typename": "User", "rest_id": rest_id}
    if legacy:
        user["legacy"] = fields
    else:
        user["core"] = fields
    return user


def raw_tweet(tweet_id="100", text="hello", user=None, **extra):
    legacy = {
        "full_text": text,
        "created_at": "Wed Jan 15 12:00:00 +0000 2026",
        "favorite_count": 5,
        "retweet_count": 2,
        "reply_count": 1,
        "conversation_id_str": tweet_id,
    }
    legacy.update(extra.pop("legacy", {}))
    tweet = {
        "__typename": "Tweet",
        "rest_id": tweet_id,
        "core": {"user_results": {"result": user or raw_user()}},
        "legacy": legacy,
    }
    tweet.update(extra)
    return tweet


def item_entry(tweet, entry_id=None):
    return {
        "entryId": entry_id or f"tweet-{tweet.get('rest_id')}",
        "content": {"itemContent": {"tweet_results": {"result": tweet}}},
    }


def cursor_entry(value, cursor_type="Bottom", nested=False):
    cursor = {"cursorType": cursor_type, "value": value}
    content = {"itemContent": cursor} if nested else cursor
    return {"entryId": f"cursor-{cursor_type.lower()}", "content": content}

