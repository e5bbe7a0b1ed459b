"""Normalize X GraphQL payloads into Tweet and User records.

Raw payloads are treated as untyped trees. Every field is read through ``_dig``
and every known schema variant is checked explicitly, in precedence order.
Nodes that cannot produce a valid record are dropped, never partially built.
"""

import html
from collections.abc import Iterator
from typing import Any

from ..models.tweet import ArticlePreview, Tweet, TweetAuthor, TweetMedia
from ..models.user import User

_MEDIA_TYPES = {"photo": "image", "video": "video", "animated_gif": "gif"}
_PLAYABLE_TYPES = {"video", "animated_gif"}
_VIDEO_CONTENT_TYPE = "video/mp4"


def _dig(obj: Any, *path: str) -> Any:
    """Follow *path* through nested dicts, returning None at the first missing hop."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _first_non_empty(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped:
                return stripped
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def _article_parts(result: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]] | None:
    article = result.get("article")
    if not isinstance(article, dict):
        return None
    inner = _dig(article, "article_results", "result")
    if not isinstance(inner, dict):
        inner = article
    return article, inner


def _article_text_from_blocks(article_result: dict[str, Any]) -> str | None:
    """Fallback article body from ``content_state`` blocks."""
    blocks = _dig(article_result, "content_state", "blocks")
    if not isinstance(blocks, list):
        return None

    parts: list[str] = []
    for block in blocks:
        text = _first_non_empty(_dig(block, "text"))
        if text:
            parts.append(text)

    if not parts:
        return None
    return "\n".join(parts)


def _extract_article_text(result: dict[str, Any]) -> str | None:
    parts = _article_parts(result)
    if parts is None:
        return None
    article, inner = parts

    title = _first_non_empty(inner.get("title"), article.get("title"))
    body = _first_non_empty(
        inner.get("plain_text"),
        article.get("plain_text"),
        _dig(inner, "body", "text"),
        _dig(inner, "content", "text"),
        _dig(article, "body", "text"),
        _dig(article, "content", "text"),
    ) or _article_text_from_blocks(inner)

    if body and title and not body.startswith(title):
        return f"{title}\n{body}"
    return body or title


def _extract_note_text(result: dict[str, Any]) -> str | None:
    note = _dig(result, "note_tweet", "note_tweet_results", "result")
    if not isinstance(note, dict):
        return None
    text = _first_non_empty(
        note.get("text"),
        _dig(note, "richtext", "text"),
        _dig(note, "rich_text", "text"),
        _dig(note, "content", "text"),
    )
    return html.unescape(text) if text else None


def _extract_legacy_text(result: dict[str, Any]) -> str | None:
    text = _first_non_empty(_dig(result, "legacy", "full_text"))
    return html.unescape(text) if text else None


def extract_tweet_text(result: dict[str, Any]) -> str | None:
    """Best text for a tweet: article, then long-form note, then legacy text."""
    return _extract_article_text(result) or _extract_note_text(result) or _extract_legacy_text(result)


# ---------------------------------------------------------------------------
# Media and article preview
# ---------------------------------------------------------------------------


def _best_video_url(variants: Any) -> str | None:
    """Highest-bitrate mp4 variant, or the first mp4 when none declares a bitrate."""
    if not isinstance(variants, list):
        return None
    mp4s = [
        v
        for v in variants
        if isinstance(v, dict) and v.get("content_type") == _VIDEO_CONTENT_TYPE and isinstance(v.get("url"), str)
    ]
    with_bitrate = [v for v in mp4s if _as_int(v.get("bitrate")) is not None]
    if with_bitrate:
        return max(with_bitrate, key=lambda v: _as_int(v.get("bitrate")) or 0)["url"]
    if mp4s:
        return mp4s[0]["url"]
    return None


def _parse_media_entity(entity: Any) -> TweetMedia | None:
    if not isinstance(entity, dict):
        return None
    raw_type = entity.get("type")
    url = _as_str(entity.get("media_url_https"))
    media_type = _MEDIA_TYPES.get(raw_type) if isinstance(raw_type, str) else None
    if not media_type or not url:
        return None

    fields: dict[str, Any] = {"type": media_type, "url": url}

    sizes = entity.get("sizes") if isinstance(entity.get("sizes"), dict) else {}
    size = sizes.get("large") if isinstance(sizes.get("large"), dict) else sizes.get("medium")
    if isinstance(size, dict):
        fields["width"] = _as_int(size.get("w"))
        fields["height"] = _as_int(size.get("h"))
    if sizes.get("small"):
        fields["preview_url"] = f"{url}:small"

    if raw_type in _PLAYABLE_TYPES:
        video_info = entity.get("video_info")
        fields["video_url"] = _best_video_url(_dig(video_info, "variants"))
        fields["duration_ms"] = _as_int(_dig(video_info, "duration_millis"))

    return TweetMedia(**fields)


def extract_media(result: dict[str, Any]) -> list[TweetMedia]:
    entities = _dig(result, "legacy", "extended_entities", "media") or _dig(result, "legacy", "entities", "media")
    if not isinstance(entities, list):
        return []
    items = (_parse_media_entity(entity) for entity in entities)
    return [item for item in items if item is not None]


def extract_article_preview(result: dict[str, Any]) -> ArticlePreview | None:
    parts = _article_parts(result)
    if parts is None:
        return None
    article, inner = parts
    title = _first_non_empty(inner.get("title"), article.get("title"))
    if not title:
        return None
    return ArticlePreview(
        title=title,
        preview_text=_first_non_empty(inner.get("preview_text"), article.get("preview_text")),
    )


# ---------------------------------------------------------------------------
# Tweets
# ---------------------------------------------------------------------------


def unwrap_tweet(obj: Any) -> dict[str, Any] | None:
    """Unwrap ``TweetWithVisibilityResults``-style envelopes (``{"tweet": {...}}``)."""
    if not isinstance(obj, dict):
        return None
    inner = obj.get("tweet")
    if isinstance(inner, dict):
        return inner
    return obj


def _extract_author(result: dict[str, Any]) -> tuple[str | None, str | None, str | None]:
    """Return (user_id, username, name); legacy fields win over the newer core shape."""
    user = _dig(result, "core", "user_results", "result")
    username = _first_non_empty(_dig(user, "legacy", "screen_name"), _dig(user, "core", "screen_name"))
    name = _first_non_empty(_dig(user, "legacy", "name"), _dig(user, "core", "name"))
    return _as_str(_dig(user, "rest_id")), username, name


def parse_tweet(raw: Any, quote_depth: int = 1, include_raw: bool = False) -> Tweet | None:
    """Parse one raw tweet result into a Tweet, or None when it is not a valid tweet.

    Quoted tweets are parsed recursively with ``quote_depth - 1``; at depth 0 no
    quoted tweet is produced regardless of what the payload contains.
    """
    result = unwrap_tweet(raw)
    if result is None:
        return None

    tweet_id = _as_str(result.get("rest_id"))
    user_id, username, name = _extract_author(result)
    if not tweet_id or not username:
        return None

    text = extract_tweet_text(result)
    if not text:
        return None

    quoted_tweet = None
    if quote_depth > 0:
        quoted_raw = unwrap_tweet(_dig(result, "quoted_status_result", "result"))
        if quoted_raw is not None:
            quoted_tweet = parse_tweet(quoted_raw, quote_depth - 1, include_raw)

    legacy = result.get("legacy") if isinstance(result.get("legacy"), dict) else {}

    return Tweet(
        id=tweet_id,
        text=text,
        author=TweetAuthor(username=username, name=name or username),
        author_id=user_id,
        created_at=_as_str(legacy.get("created_at")),
        reply_count=_as_int(legacy.get("reply_count")),
        retweet_count=_as_int(legacy.get("retweet_count")),
        like_count=_as_int(legacy.get("favorite_count")),
        conversation_id=_as_str(legacy.get("conversation_id_str")),
        in_reply_to_status_id=_as_str(legacy.get("in_reply_to_status_id_str")),
        quoted_tweet=quoted_tweet,
        media=extract_media(result),
        article=extract_article_preview(result),
        raw=result if include_raw else None,
    )


# ---------------------------------------------------------------------------
# Timeline instructions
# ---------------------------------------------------------------------------


def _instruction_entries(instructions: Any) -> Iterator[dict[str, Any]]:
    """Yield entries in traversal order.

    Covers ``entries`` lists (TimelineAddEntries), single ``entry`` objects
    (TimelinePinEntry, TimelineReplaceEntry) and ``moduleItems``
    (TimelineAddToModule), which are yielded as one synthetic module entry.
    """
    if not isinstance(instructions, list):
        return
    for inst in instructions:
        if not isinstance(inst, dict):
            continue
        single = inst.get("entry")
        if isinstance(single, dict):
            yield single
        entries = inst.get("entries")
        if isinstance(entries, list):
            for entry in entries:
                if isinstance(entry, dict):
                    yield entry
        module_items = inst.get("moduleItems")
        if isinstance(module_items, list):
            yield {"content": {"items": module_items}}


def _tweet_results_from_entry(entry: dict[str, Any]) -> list[dict[str, Any]]:
    """Collect raw tweet results from the nesting shapes an entry can take."""
    results: list[dict[str, Any]] = []

    def _push(candidate: Any) -> None:
        tweet = unwrap_tweet(candidate)
        if tweet is not None and tweet.get("rest_id"):
            results.append(tweet)

    content = entry.get("content")
    _push(_dig(content, "itemContent", "tweet_results", "result"))
    _push(_dig(content, "item", "itemContent", "tweet_results", "result"))

    items = _dig(content, "items")
    if isinstance(items, list):
        for item in items:
            _push(_dig(item, "item", "itemContent", "tweet_results", "result"))
            _push(_dig(item, "itemContent", "tweet_results", "result"))
            _push(_dig(item, "content", "itemContent", "tweet_results", "result"))
    return results


def iter_tweet_results(instructions: Any) -> Iterator[dict[str, Any]]:
    """Yield every raw tweet result in the instructions, in traversal order."""
    for entry in _instruction_entries(instructions):
        yield from _tweet_results_from_entry(entry)


def parse_tweets_from_instructions(
    instructions: Any,
    quote_depth: int = 1,
    include_raw: bool = False,
) -> list[Tweet]:
    """Parse tweets from timeline instructions, deduplicated by id (first wins)."""
    tweets: list[Tweet] = []
    seen: set[str] = set()

    for raw in iter_tweet_results(instructions):
        tweet = parse_tweet(raw, quote_depth, include_raw)
        if tweet is None or tweet.id in seen:
            continue
        seen.add(tweet.id)
        tweets.append(tweet)
    return tweets


def _cursor_nodes(entry: dict[str, Any]) -> Iterator[Any]:
    content = entry.get("content")
    yield content
    yield _dig(content, "itemContent")
    items = _dig(content, "items")
    if isinstance(items, list):
        for item in items:
            yield _dig(item, "itemContent")
            yield _dig(item, "item", "itemContent")


def extract_cursor(instructions: Any, cursor_type: str = "Bottom") -> str | None:
    """Return the first non-empty cursor value of the given type."""
    for entry in _instruction_entries(instructions):
        for node in _cursor_nodes(entry):
            if not isinstance(node, dict) or node.get("cursorType") != cursor_type:
                continue
            value = node.get("value")
            if isinstance(value, str) and value:
                return value
    return None


def find_tweet_in_instructions(instructions: Any, tweet_id: str) -> dict[str, Any] | None:
    """Find the raw tweet result with *tweet_id*."""
    for raw in iter_tweet_results(instructions):
        if raw.get("rest_id") == tweet_id:
            return raw
    return None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def parse_user(raw: Any) -> User | None:
    """Parse one raw user result, unwrapping ``UserWithVisibilityResults``."""
    if not isinstance(raw, dict):
        return None
    if raw.get("__typename") == "UserWithVisibilityResults" and isinstance(raw.get("user"), dict):
        raw = raw["user"]
    if raw.get("__typename") != "User":
        return None

    legacy = raw.get("legacy") if isinstance(raw.get("legacy"), dict) else {}
    core = raw.get("core") if isinstance(raw.get("core"), dict) else {}
    user_id = _as_str(raw.get("rest_id"))
    username = _first_non_empty(legacy.get("screen_name"), core.get("screen_name"))
    if not user_id or not username:
        return None

    verified = raw.get("is_blue_verified")
    return User(
        id=user_id,
        username=username,
        name=_first_non_empty(legacy.get("name"), core.get("name")) or username,
        description=_as_str(legacy.get("description")),
        followers_count=_as_int(legacy.get("followers_count")),
        following_count=_as_int(legacy.get("friends_count")),
        is_blue_verified=verified if isinstance(verified, bool) else None,
        profile_image_url=_as_str(legacy.get("profile_image_url_https")) or _as_str(_dig(raw, "avatar", "image_url")),
        created_at=_as_str(legacy.get("created_at")) or _as_str(core.get("created_at")),
    )


def parse_users_from_instructions(instructions: Any) -> list[User]:
    """Parse user entries (followers/following timelines)."""
    users: list[User] = []
    for entry in _instruction_entries(instructions):
        user = parse_user(_dig(entry, "content", "itemContent", "user_results", "result"))
        if user is not None:
            users.append(user)
    return users
