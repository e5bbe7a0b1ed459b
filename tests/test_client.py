"""Tests for XReaderClient against a mocked GraphQL transport."""

import json

import httpx
import pytest
from conftest import NOW, cursor_entry, item_entry, make_snapshot, raw_tweet, raw_user

from xreader.fetcher import XReaderClient
from xreader.fetcher.constants import BEARER_TOKEN, SEARCH_PAGE_DELAY, USER_TWEETS_PAGE_DELAY
from xreader.models import Cookies
from xreader.query_ids import DEFAULT_QUERY_IDS, MemoryQueryIdStore, QueryIdCache

# ============================================================================
# Fixtures
# ============================================================================


class FakeServer:
    """Routes requests by GraphQL operation name (the last path segment)."""

    def __init__(self):
        self.handlers = {}
        self.requests: list[httpx.Request] = []

    def on(self, operation, handler):
        self.handlers[operation] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        operation = request.url.path.rsplit("/", 1)[-1]
        handler = self.handlers.get(operation)
        if handler is None:
            return httpx.Response(404, text="not found")
        result = handler(request)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    def query_ids(self, operation):
        return [r.url.path.split("/")[-2] for r in self.requests if r.url.path.endswith(f"/{operation}")]


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def make_client(server, memory_cache):
    sleeps: list[float] = []

    def _make(cache=None, **kwargs):
        client = XReaderClient(
            Cookies(auth_token="tok", ct0="csrf"),
            cache=cache or memory_cache,
            http=httpx.Client(transport=httpx.MockTransport(server)),
            sleep=sleeps.append,
            **kwargs,
        )
        client.sleeps = sleeps
        return client

    return _make


def variables_of(request: httpx.Request) -> dict:
    return json.loads(request.url.params["variables"])


def timeline(*entries, path):
    data = {"instructions": [{"type": "TimelineAddEntries", "entries": list(entries)}]}
    for key in reversed(path):
        data = {key: data}
    return {"data": data}


SEARCH_PATH = ("search_by_raw_query", "search_timeline", "timeline")
USER_TWEETS_PATH = ("user", "result", "timeline", "timeline")
BOOKMARKS_PATH = ("bookmark_timeline_v2", "timeline")


# ============================================================================
# Construction and transport
# ============================================================================


class TestConstruction:
    @pytest.mark.parametrize("cookies", [Cookies(auth_token="tok"), Cookies(ct0="csrf"), Cookies()])
    def test_requires_both_cookies(self, cookies, memory_cache):
        with pytest.raises(ValueError, match="auth_token and ct0"):
            XReaderClient(cookies, cache=memory_cache)

    def test_quote_depth_floored_at_zero(self, make_client):
        assert make_client(quote_depth=-3).quote_depth == 0

    def test_request_headers(self, server, make_client):
        server.on("SearchTimeline", lambda r: timeline(path=SEARCH_PATH))
        client = make_client()

        client.search("hello")

        request = server.requests[0]
        assert request.method == "POST"
        assert request.headers["authorization"] == f"Bearer {BEARER_TOKEN}"
        assert request.headers["x-csrf-token"] == "csrf"
        assert request.headers["cookie"] == "auth_token=tok; ct0=csrf"
        assert request.headers["x-client-uuid"] == client.client_uuid
        assert len(request.headers["x-client-transaction-id"]) == 32

    def test_transaction_id_differs_per_request(self, server, make_client):
        server.on("SearchTimeline", lambda r: timeline(path=SEARCH_PATH))
        client = make_client()
        client.search("one")
        client.search("two")

        ids = {r.headers["x-client-transaction-id"] for r in server.requests}
        assert len(ids) == 2


# ============================================================================
# Search
# ============================================================================


class TestSearch:
    def test_parses_tweets_and_cursor(self, server, make_client):
        server.on(
            "SearchTimeline",
            lambda r: timeline(item_entry(raw_tweet("1")), cursor_entry("cur1"), path=SEARCH_PATH),
        )

        result = make_client().search("rate hike", count=50)

        assert result.success
        assert [t.id for t in result.tweets] == ["1"]
        assert result.next_cursor == "cur1"
        variables = variables_of(server.requests[0])
        assert variables["rawQuery"] == "rate hike"
        assert variables["product"] == "Latest"
        assert variables["count"] == 20
        assert json.loads(server.requests[0].content)["queryId"] == DEFAULT_QUERY_IDS["SearchTimeline"]

    def test_graphql_errors_fail(self, server, make_client):
        server.on("SearchTimeline", lambda r: {"errors": [{"message": "Bad"}, {"message": "Worse"}]})
        result = make_client().search("x")

        assert not result.success
        assert result.error == "Bad, Worse"

    def test_http_error_body_truncated(self, server, make_client):
        server.on("SearchTimeline", lambda r: httpx.Response(503, text="x" * 500))
        result = make_client().search("x")

        assert not result.success
        assert result.error == "HTTP 503: " + "x" * 200

    def test_timeout_is_failure_result(self, server, make_client):
        def hang(request):
            raise httpx.ReadTimeout("timed out", request=request)

        server.on("SearchTimeline", hang)
        result = make_client(timeout=2).search("x")

        assert not result.success
        assert "timed out" in result.error

    def test_non_json_body(self, server, make_client):
        server.on("SearchTimeline", lambda r: httpx.Response(200, text="<html>"))
        result = make_client().search("x")
        assert not result.success
        assert "Invalid JSON" in result.error


# ============================================================================
# Query ID rotation
# ============================================================================


class TestRotation:
    def test_cached_id_tried_first(self, server, make_client):
        store = MemoryQueryIdStore(make_snapshot({"SearchTimeline": "cachedId"}))
        cache = QueryIdCache(store, discover=lambda: None, clock=lambda: NOW)
        server.on("SearchTimeline", lambda r: timeline(path=SEARCH_PATH))

        assert make_client(cache=cache).search("x").success
        assert server.query_ids("SearchTimeline") == ["cachedId"]

    def test_all_404_refreshes_once_then_fails(self, server, make_client, memory_cache):
        result = make_client().search("x")

        assert not result.success
        assert result.error == "Failed to execute SearchTimeline"
        assert memory_cache.discover_stub.calls == 1
        assert server.query_ids("SearchTimeline") == [DEFAULT_QUERY_IDS["SearchTimeline"]]

    def test_refresh_that_cannot_build_snapshot_is_failure_result(self, server, make_client):
        from xreader.query_ids.discovery import DiscoveredQueryId, DiscoveryResult

        def discover():
            return DiscoveryResult(ids={"SearchTimeline": DiscoveredQueryId("newId", "main.js")}, pages=[])

        cache = QueryIdCache(MemoryQueryIdStore(), discover=discover, ttl_ms=0, clock=lambda: NOW)

        result = make_client(cache=cache).search("x")

        assert not result.success
        assert result.error == "Failed to execute SearchTimeline"

    def test_refresh_recovers(self, server, make_client):
        from xreader.query_ids.discovery import DiscoveredQueryId, DiscoveryResult

        def discover():
            return DiscoveryResult(ids={"Bookmarks": DiscoveredQueryId("newBookmarksId", "main.js")}, pages=[])

        cache = QueryIdCache(MemoryQueryIdStore(), discover=discover, clock=lambda: NOW)

        def handler(request):
            if "/newBookmarksId/" in request.url.path:
                return timeline(item_entry(raw_tweet("5")), path=BOOKMARKS_PATH)
            return httpx.Response(404)

        server.on("Bookmarks", handler)

        result = make_client(cache=cache).get_bookmarks()

        assert result.success
        assert [t.id for t in result.tweets] == ["5"]
        assert server.query_ids("Bookmarks") == [
            DEFAULT_QUERY_IDS["Bookmarks"],
            "tmd4ifV8RHltzn8ymGg1aw",
            "newBookmarksId",
        ]


# ============================================================================
# Tweet detail and replies
# ============================================================================


class TestTweetDetail:
    def test_tweet_result_path(self, server, make_client):
        server.on("TweetDetail", lambda r: {"data": {"tweetResult": {"result": raw_tweet("77", "detail")}}})

        result = make_client().get_tweet("77")

        assert result.success
        assert result.tweet.text == "detail"
        assert variables_of(server.requests[0])["focalTweetId"] == "77"
        assert "fieldToggles" in server.requests[0].url.params

    def test_found_in_conversation(self, server, make_client):
        server.on(
            "TweetDetail",
            lambda r: {
                "data": {
                    "threaded_conversation_with_injections_v2": {
                        "instructions": [{"entries": [item_entry(raw_tweet("1")), item_entry(raw_tweet("2"))]}]
                    }
                }
            },
        )
        assert make_client().get_tweet("2").tweet.id == "2"

    def test_missing_tweet_tries_extra_id(self, server, make_client):
        server.on("TweetDetail", lambda r: {"data": {}})

        result = make_client().get_tweet("1")

        assert not result.success
        assert result.error == "Tweet not found in response"
        assert server.query_ids("TweetDetail") == [DEFAULT_QUERY_IDS["TweetDetail"], "aFvUsJm2c-oDkJV75blV6g"]

    def test_replies_filtered_to_direct_replies(self, server, make_client):
        focal = raw_tweet("1")
        reply = raw_tweet("2", legacy={"in_reply_to_status_id_str": "1"})
        nested = raw_tweet("3", legacy={"in_reply_to_status_id_str": "2"})
        server.on(
            "TweetDetail",
            lambda r: {
                "data": {
                    "threaded_conversation_with_injections_v2": {
                        "instructions": [{"entries": [item_entry(focal), item_entry(reply), item_entry(nested)]}]
                    }
                }
            },
        )

        result = make_client().get_replies("1")

        assert [t.id for t in result.tweets] == ["2"]


# ============================================================================
# User timelines and lookup
# ============================================================================


class TestUserTweets:
    @pytest.mark.parametrize("message", ["User has been suspended", "User not found"])
    def test_soft_failure(self, server, make_client, message):
        server.on("UserTweets", lambda r: {"errors": [{"message": message}]})

        result = make_client().get_user_tweets("42")

        assert not result.success
        assert result.error == message
        assert len(server.requests) == 1

    def test_variables(self, server, make_client):
        server.on("UserTweets", lambda r: timeline(item_entry(raw_tweet("1")), path=USER_TWEETS_PATH))

        result = make_client().get_user_tweets("42", count=5, cursor="abc")

        assert result.success
        variables = variables_of(server.requests[0])
        assert variables["userId"] == "42"
        assert variables["count"] == 5
        assert variables["cursor"] == "abc"


class TestUserLookup:
    def test_success(self, server, make_client):
        server.on("UserByScreenName", lambda r: {"data": {"user": {"result": raw_user("alice", "Alice", "42")}}})

        result = make_client().get_user_by_username("@alice")

        assert result.success
        assert (result.user_id, result.username, result.name) == ("42", "alice", "Alice")
        assert variables_of(server.requests[0])["screen_name"] == "alice"

    def test_unavailable_is_soft_failure(self, server, make_client):
        server.on("UserByScreenName", lambda r: {"data": {"user": {"result": {"__typename": "UserUnavailable"}}}})

        result = make_client().get_user_by_username("ghost")

        assert not result.success
        assert result.error == "User @ghost not found or unavailable"
        assert len(server.requests) == 1

    def test_rest_fallback(self, server, make_client):
        server.on("UserByScreenName", lambda r: httpx.Response(500, text="down"))
        server.on("show.json", lambda r: {"id_str": "99", "screen_name": "Bob", "name": "Bob B"})

        result = make_client().get_user_by_username("bob")

        assert result.success
        assert result.user_id == "99"
        assert result.username == "Bob"
        assert server.requests[-1].url.params["screen_name"] == "bob"

    def test_rest_fallback_failure_keeps_graphql_error(self, server, make_client):
        server.on("UserByScreenName", lambda r: httpx.Response(500, text="down"))

        result = make_client().get_user_by_username("bob")

        assert not result.success
        assert result.error == "HTTP 500: down"


class TestFollowLists:
    def test_followers(self, server, make_client):
        def user_entry(user):
            return {"content": {"itemContent": {"user_results": {"result": user}}}}

        server.on(
            "Followers",
            lambda r: timeline(
                user_entry(raw_user("a", "A", "1")), user_entry(raw_user("b", "B", "2")), cursor_entry("next"),
                path=USER_TWEETS_PATH,
            ),
        )

        result = make_client().get_followers("42")

        assert result.success
        assert [u.username for u in result.users] == ["a", "b"]
        assert result.next_cursor == "next"


# ============================================================================
# Pagination
# ============================================================================


class TestPagination:
    def test_collects_pages_in_cursor_order(self, server, make_client):
        pages = {
            None: timeline(
                item_entry(raw_tweet("1")), item_entry(raw_tweet("2")), cursor_entry("c1"), path=SEARCH_PATH
            ),
            "c1": timeline(
                item_entry(raw_tweet("2")), item_entry(raw_tweet("3")), cursor_entry("c2"), path=SEARCH_PATH
            ),
            "c2": timeline(cursor_entry("c3"), path=SEARCH_PATH),
        }
        server.on("SearchTimeline", lambda r: pages[variables_of(r).get("cursor")])
        client = make_client()

        result = client.search_all("x", count=10)

        assert result.success
        assert [t.id for t in result.tweets] == ["1", "2", "3"]
        assert result.next_cursor is None
        assert [variables_of(r).get("cursor") for r in server.requests] == [None, "c1", "c2"]
        assert client.sleeps == [SEARCH_PAGE_DELAY, SEARCH_PAGE_DELAY]

    def test_stops_at_count(self, server, make_client):
        server.on(
            "UserTweets",
            lambda r: timeline(
                *(item_entry(raw_tweet(str(i))) for i in range(5)), cursor_entry("more"), path=USER_TWEETS_PATH
            ),
        )
        client = make_client()

        result = client.get_user_tweets_all("42", count=3)

        assert [t.id for t in result.tweets] == ["0", "1", "2"]
        assert variables_of(server.requests[0])["count"] == 3
        assert len(server.requests) == 1
        assert client.sleeps == []

    def test_stops_when_cursor_repeats(self, server, make_client):
        counter = iter(range(100))
        server.on(
            "UserTweets",
            lambda r: timeline(
                item_entry(raw_tweet(str(next(counter)))), cursor_entry("same"), path=USER_TWEETS_PATH
            ),
        )
        client = make_client()

        result = client.get_user_tweets_all("42", count=10)

        assert len(result.tweets) == 2
        assert client.sleeps == [USER_TWEETS_PAGE_DELAY]

    def test_max_pages_returns_next_cursor(self, server, make_client):
        counter = iter(range(100))

        def page(request):
            n = next(counter)
            return timeline(item_entry(raw_tweet(str(n))), cursor_entry(f"c{n}"), path=BOOKMARKS_PATH)

        server.on("Bookmarks", page)

        result = make_client().get_bookmarks_all(max_pages=2)

        assert result.success
        assert [t.id for t in result.tweets] == ["0", "1"]
        assert result.next_cursor == "c1"

    def test_page_failure_fails_whole_call(self, server, make_client):
        server.on("SearchTimeline", lambda r: {"errors": [{"message": "Rate limit exceeded"}]})
        result = make_client().search_all("x", count=40)
        assert not result.success
        assert result.error == "Rate limit exceeded"
