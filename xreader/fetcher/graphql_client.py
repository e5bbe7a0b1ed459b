"""Read-only client for the X web GraphQL API.

Provides search, user timelines, tweet detail, replies, bookmarks, follow lists
and user lookup. There are no write operations.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
import uuid
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from ..errors import DispatchError
from ..models.auth import Cookies
from ..models.results import TweetResult, TweetsResult, UserResult, UsersResult
from ..models.tweet import Tweet
from ..query_ids import QueryIdCache, create_default_cache
from . import features as ft
from .constants import (
    BEARER_TOKEN,
    BOOKMARKS_EXTRA_IDS,
    BOOKMARKS_PAGE_DELAY,
    GRAPHQL_URL,
    MAX_PAGE_SIZE,
    SEARCH_PAGE_DELAY,
    TWEET_DETAIL_EXTRA_IDS,
    USER_AGENT,
    USER_BY_SCREEN_NAME_EXTRA_IDS,
    USER_SHOW_URLS,
    USER_TWEETS_PAGE_DELAY,
)
from .dispatch import ApplicationError, Failure, NotFound, Outcome, QueryIdDispatcher, Success
from .extractors import (
    _dig,
    extract_cursor,
    find_tweet_in_instructions,
    parse_tweet,
    parse_tweets_from_instructions,
    parse_user,
    parse_users_from_instructions,
)

log = logging.getLogger(__name__)

_SOFT_FAILURE_MARKERS = ("suspended", "not found")


def _encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def graphql_error_message(data: dict[str, Any]) -> str | None:
    """Join the messages of a GraphQL ``errors`` array, if any."""
    errors = data.get("errors")
    if not isinstance(errors, list) or not errors:
        return None
    messages = [str(e.get("message", "")) for e in errors if isinstance(e, dict)]
    return ", ".join(m for m in messages if m) or "Unknown GraphQL error"


def _is_soft_failure(message: str | None) -> bool:
    return bool(message) and any(marker in message for marker in _SOFT_FAILURE_MARKERS)


def _detail_variables(tweet_id: str) -> dict[str, Any]:
    return {
        "focalTweetId": tweet_id,
        "with_rux_injections": False,
        "rankingMode": "Relevance",
        "includePromotedContent": True,
        "withCommunity": True,
        "withQuickPromoteEligibilityTweetFields": True,
        "withBirdwatchNotes": True,
        "withVoice": True,
    }


class XReaderClient:
    """Cookie-authenticated GraphQL client.

    Every public read method returns a result value. Query ID rotation is handled
    by ``QueryIdDispatcher``; only when all candidates fail does a method return
    ``success=False``.
    """

    def __init__(
        self,
        cookies: Cookies,
        *,
        timeout: float | None = None,
        quote_depth: int = 1,
        cache: QueryIdCache | None = None,
        http: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not cookies.auth_token or not cookies.ct0:
            raise ValueError("Both auth_token and ct0 cookies are required")

        self.auth_token = cookies.auth_token
        self.ct0 = cookies.ct0
        self.cookie_header = f"auth_token={self.auth_token}; ct0={self.ct0}"
        self.timeout = timeout if timeout and timeout > 0 else None
        self.quote_depth = max(0, int(quote_depth))
        self.client_uuid = str(uuid.uuid4())

        self.cache = cache if cache is not None else create_default_cache()
        self.dispatcher = QueryIdDispatcher(self.cache)
        self._owns_http = http is None
        self.http = http or httpx.Client(timeout=self.timeout, follow_redirects=True)
        self._sleep = sleep

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> XReaderClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- HTTP ---------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "*/*",
            "accept-language": "en-US,en;q=0.9",
            "authorization": f"Bearer {BEARER_TOKEN}",
            "x-csrf-token": self.ct0,
            "x-twitter-auth-type": "OAuth2Session",
            "x-twitter-active-user": "yes",
            "x-twitter-client-language": "en",
            "x-client-uuid": self.client_uuid,
            "x-client-transaction-id": secrets.token_hex(16),
            "cookie": self.cookie_header,
            "user-agent": USER_AGENT,
            "content-type": "application/json",
            "origin": "https://x.com",
            "referer": "https://x.com/",
        }

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response | Failure:
        try:
            return self.http.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except httpx.TimeoutException:
            return Failure(None, f"Request timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            return Failure(None, f"Request failed: {e}")

    def _graphql(
        self,
        query_id: str,
        operation: str,
        variables: dict[str, Any],
        features: dict[str, Any],
        parse: Callable[[dict[str, Any]], Outcome],
        field_toggles: dict[str, Any] | None = None,
        method: str = "GET",
    ) -> Outcome:
        """Issue one GraphQL request with a specific query ID and classify the result."""
        url = f"{GRAPHQL_URL}/{query_id}/{operation}"
        params = {"variables": _encode(variables)}
        kwargs: dict[str, Any] = {}
        if method == "POST":
            kwargs["content"] = _encode({"features": features, "queryId": query_id})
        else:
            params["features"] = _encode(features)
            if field_toggles is not None:
                params["fieldToggles"] = _encode(field_toggles)

        response = self._send(method, url, params=params, **kwargs)
        if isinstance(response, Failure):
            return response
        if response.status_code == 404:
            return NotFound()
        if not response.is_success:
            return Failure(response.status_code, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
        except ValueError:
            return Failure(response.status_code, f"Invalid JSON in {operation} response")
        if not isinstance(data, dict):
            return Failure(response.status_code, f"Unexpected {operation} response shape")
        return parse(data)

    def _dispatch(self, operation: str, extra_ids: Iterable[str], attempt: Callable[[str], Outcome]) -> Any:
        return self.dispatcher.execute(operation, extra_ids, attempt)

    # -- Parsers ------------------------------------------------------------

    def _timeline_parser(
        self,
        operation: str,
        path: tuple[str, ...],
        include_raw: bool,
        soft_errors: bool = False,
        strict_errors: bool = False,
    ) -> Callable[[dict[str, Any]], Outcome]:
        def _parse(data: dict[str, Any]) -> Outcome:
            message = graphql_error_message(data)
            if message and strict_errors:
                return ApplicationError(message)
            if soft_errors and _is_soft_failure(message):
                return Success(TweetsResult(success=False, error=message))

            instructions = _dig(data, "data", *path)
            if not isinstance(instructions, list):
                return ApplicationError(message or f"No {operation} timeline in response")

            tweets = parse_tweets_from_instructions(instructions, self.quote_depth, include_raw)
            return Success(TweetsResult(success=True, tweets=tweets, next_cursor=extract_cursor(instructions)))

        return _parse

    # -- Search -------------------------------------------------------------

    def search(
        self,
        query: str,
        count: int = 20,
        cursor: str | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        """Search latest tweets matching *query*."""
        variables: dict[str, Any] = {
            "rawQuery": query,
            "count": min(count, MAX_PAGE_SIZE),
            "querySource": "typed_query",
            "product": "Latest",
        }
        if cursor:
            variables["cursor"] = cursor

        parse = self._timeline_parser(
            "SearchTimeline",
            ("search_by_raw_query", "search_timeline", "timeline", "instructions"),
            include_raw,
            strict_errors=True,
        )

        def attempt(query_id: str) -> Outcome:
            return self._graphql(
                query_id, "SearchTimeline", variables, ft.search_features(), parse, method="POST"
            )

        try:
            return self._dispatch("SearchTimeline", (), attempt)
        except DispatchError as e:
            return TweetsResult(success=False, error=str(e))

    # -- Tweet detail -------------------------------------------------------

    def get_tweet(self, tweet_id: str, include_raw: bool = False) -> TweetResult:
        """Fetch a single tweet by ID."""

        def parse(data: dict[str, Any]) -> Outcome:
            instructions = _dig(data, "data", "threaded_conversation_with_injections_v2", "instructions")
            raw = _dig(data, "data", "tweetResult", "result") or find_tweet_in_instructions(instructions, tweet_id)
            tweet = parse_tweet(raw, self.quote_depth, include_raw)
            if tweet is None:
                return ApplicationError(graphql_error_message(data) or "Tweet not found in response")
            return Success(TweetResult(success=True, tweet=tweet))

        def attempt(query_id: str) -> Outcome:
            return self._graphql(
                query_id,
                "TweetDetail",
                _detail_variables(tweet_id),
                ft.tweet_detail_features(),
                parse,
                field_toggles=ft.tweet_detail_field_toggles(),
            )

        try:
            return self._dispatch("TweetDetail", TWEET_DETAIL_EXTRA_IDS, attempt)
        except DispatchError as e:
            return TweetResult(success=False, error=str(e))

    def get_replies(self, tweet_id: str, include_raw: bool = False) -> TweetsResult:
        """Fetch the direct replies to a tweet from its conversation thread."""

        def parse(data: dict[str, Any]) -> Outcome:
            instructions = _dig(data, "data", "threaded_conversation_with_injections_v2", "instructions")
            if not isinstance(instructions, list):
                return ApplicationError(graphql_error_message(data) or "No conversation in response")
            tweets = parse_tweets_from_instructions(instructions, self.quote_depth, include_raw)
            replies = [t for t in tweets if t.in_reply_to_status_id == tweet_id]
            return Success(TweetsResult(success=True, tweets=replies))

        def attempt(query_id: str) -> Outcome:
            return self._graphql(
                query_id,
                "TweetDetail",
                _detail_variables(tweet_id),
                ft.tweet_detail_features(),
                parse,
                field_toggles=ft.tweet_detail_field_toggles(),
            )

        try:
            return self._dispatch("TweetDetail", (), attempt)
        except DispatchError as e:
            return TweetsResult(success=False, error=str(e))

    # -- Timelines ----------------------------------------------------------

    def get_user_tweets(
        self,
        user_id: str,
        count: int = 20,
        cursor: str | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        """Fetch a page of a user's tweets."""
        variables: dict[str, Any] = {
            "userId": user_id,
            "count": min(count, MAX_PAGE_SIZE),
            "includePromotedContent": False,
            "withQuickPromoteEligibilityTweetFields": True,
            "withVoice": True,
        }
        if cursor:
            variables["cursor"] = cursor

        parse = self._timeline_parser(
            "UserTweets",
            ("user", "result", "timeline", "timeline", "instructions"),
            include_raw,
            soft_errors=True,
        )

        def attempt(query_id: str) -> Outcome:
            return self._graphql(
                query_id,
                "UserTweets",
                variables,
                ft.user_tweets_features(),
                parse,
                field_toggles=ft.user_tweets_field_toggles(),
            )

        try:
            return self._dispatch("UserTweets", (), attempt)
        except DispatchError as e:
            return TweetsResult(success=False, error=str(e))

    def get_bookmarks(
        self,
        count: int = 20,
        cursor: str | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        """Fetch a page of the authenticated user's bookmarks."""
        variables: dict[str, Any] = {
            "count": min(count, MAX_PAGE_SIZE),
            "includePromotedContent": False,
            "withDownvotePerspective": False,
            "withReactionsMetadata": False,
            "withReactionsPerspective": False,
        }
        if cursor:
            variables["cursor"] = cursor

        parse = self._timeline_parser(
            "Bookmarks", ("bookmark_timeline_v2", "timeline", "instructions"), include_raw
        )

        def attempt(query_id: str) -> Outcome:
            return self._graphql(query_id, "Bookmarks", variables, ft.bookmarks_features(), parse)

        try:
            return self._dispatch("Bookmarks", BOOKMARKS_EXTRA_IDS, attempt)
        except DispatchError as e:
            return TweetsResult(success=False, error=str(e))

    # -- Follow lists -------------------------------------------------------

    def _follow_list(self, operation: str, user_id: str, count: int, cursor: str | None) -> UsersResult:
        variables: dict[str, Any] = {
            "userId": user_id,
            "count": min(count, MAX_PAGE_SIZE),
            "includePromotedContent": False,
        }
        if cursor:
            variables["cursor"] = cursor

        def parse(data: dict[str, Any]) -> Outcome:
            message = graphql_error_message(data)
            if _is_soft_failure(message):
                return Success(UsersResult(success=False, error=message))
            instructions = _dig(data, "data", "user", "result", "timeline", "timeline", "instructions")
            if not isinstance(instructions, list):
                return ApplicationError(message or f"No {operation} timeline in response")
            return Success(
                UsersResult(
                    success=True,
                    users=parse_users_from_instructions(instructions),
                    next_cursor=extract_cursor(instructions),
                )
            )

        def attempt(query_id: str) -> Outcome:
            return self._graphql(query_id, operation, variables, ft.follow_list_features(), parse)

        try:
            return self._dispatch(operation, (), attempt)
        except DispatchError as e:
            return UsersResult(success=False, error=str(e))

    def get_followers(self, user_id: str, count: int = 20, cursor: str | None = None) -> UsersResult:
        return self._follow_list("Followers", user_id, count, cursor)

    def get_following(self, user_id: str, count: int = 20, cursor: str | None = None) -> UsersResult:
        return self._follow_list("Following", user_id, count, cursor)

    # -- User lookup --------------------------------------------------------

    def get_user_by_username(self, username: str) -> UserResult:
        """Resolve a handle to a user ID, falling back to the REST endpoint."""
        handle = username[1:] if username.startswith("@") else username
        variables = {"screen_name": handle, "withSafetyModeUserFields": True}

        def parse(data: dict[str, Any]) -> Outcome:
            result = _dig(data, "data", "user", "result")
            if _dig(result, "__typename") == "UserUnavailable":
                return Success(UserResult(success=False, error=f"User @{handle} not found or unavailable"))
            user = parse_user(result)
            if user is None:
                return ApplicationError(graphql_error_message(data) or f"User @{handle} not found in response")
            return Success(UserResult(success=True, user_id=user.id, username=user.username, name=user.name))

        def attempt(query_id: str) -> Outcome:
            return self._graphql(
                query_id,
                "UserByScreenName",
                variables,
                ft.user_by_screen_name_features(),
                parse,
                field_toggles=ft.user_by_screen_name_field_toggles(),
            )

        last_error = ""
        try:
            return self._dispatch("UserByScreenName", USER_BY_SCREEN_NAME_EXTRA_IDS, attempt)
        except DispatchError as e:
            log.info("GraphQL user lookup for @%s failed (%s), trying REST", handle, e)
            last_error = str(e)

        fallback = self._lookup_user_rest(handle)
        if fallback is not None:
            return fallback
        return UserResult(success=False, error=last_error or "Unknown error looking up user")

    def _lookup_user_rest(self, handle: str) -> UserResult | None:
        for url in USER_SHOW_URLS:
            response = self._send("GET", url, params={"screen_name": handle})
            if isinstance(response, Failure):
                log.debug("REST lookup via %s failed: %s", url, response.message)
                continue
            if not response.is_success:
                log.debug("REST lookup via %s returned HTTP %d", url, response.status_code)
                continue
            try:
                data = response.json()
            except ValueError:
                continue
            if not isinstance(data, dict):
                continue
            user_id = data.get("id_str") or (str(data["id"]) if data.get("id") else None)
            if user_id:
                return UserResult(
                    success=True,
                    user_id=user_id,
                    username=data.get("screen_name") or handle,
                    name=data.get("name"),
                )
        return None

    # -- Pagination ---------------------------------------------------------

    def _paginate(
        self,
        fetch_page: Callable[[str | None, int], TweetsResult],
        count: int | None,
        max_pages: int | None,
        delay: float,
    ) -> TweetsResult:
        """Collect pages in cursor order until a stop condition holds."""
        collected: list[Tweet] = []
        seen: set[str] = set()
        cursor: str | None = None
        pages = 0

        while count is None or len(collected) < count:
            remaining = MAX_PAGE_SIZE if count is None else min(MAX_PAGE_SIZE, count - len(collected))
            page = fetch_page(cursor, remaining)
            if not page.success:
                return TweetsResult(success=False, error=page.error)

            pages += 1
            added = 0
            for tweet in page.tweets:
                if tweet.id in seen:
                    continue
                seen.add(tweet.id)
                collected.append(tweet)
                added += 1
                if count is not None and len(collected) >= count:
                    break

            if not page.next_cursor or page.next_cursor == cursor or added == 0:
                break
            if max_pages and pages >= max_pages:
                return TweetsResult(success=True, tweets=collected, next_cursor=page.next_cursor)
            cursor = page.next_cursor
            if count is None or len(collected) < count:
                self._sleep(delay)

        return TweetsResult(success=True, tweets=collected)

    def search_all(
        self,
        query: str,
        count: int,
        max_pages: int | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        return self._paginate(
            lambda cursor, size: self.search(query, size, cursor=cursor, include_raw=include_raw),
            count,
            max_pages,
            SEARCH_PAGE_DELAY,
        )

    def get_user_tweets_all(
        self,
        user_id: str,
        count: int,
        max_pages: int | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        return self._paginate(
            lambda cursor, size: self.get_user_tweets(user_id, size, cursor=cursor, include_raw=include_raw),
            count,
            max_pages,
            USER_TWEETS_PAGE_DELAY,
        )

    def get_bookmarks_all(
        self,
        count: int | None = None,
        max_pages: int | None = None,
        include_raw: bool = False,
    ) -> TweetsResult:
        return self._paginate(
            lambda cursor, _size: self.get_bookmarks(MAX_PAGE_SIZE, cursor=cursor, include_raw=include_raw),
            count,
            max_pages,
            BOOKMARKS_PAGE_DELAY,
        )
