"""Plain-text and JSON rendering of tweets and users."""

import json
from collections.abc import Sequence

from pydantic import BaseModel

from .models.tweet import Tweet
from .models.user import User

SEPARATOR = "─" * 50
QUOTE_PREVIEW_CHARS = 100


def _to_json(items: Sequence[BaseModel]) -> str:
    return json.dumps([item.model_dump(mode="json", exclude_none=True) for item in items], indent=2)


def tweets_to_json(tweets: Sequence[Tweet]) -> str:
    return _to_json(tweets)


def users_to_json(users: Sequence[User]) -> str:
    return _to_json(users)


def format_tweet(tweet: Tweet, separator: bool = True) -> str:
    """Render one tweet as a block of lines: header, text, stats, link, extras."""
    header = f"@{tweet.author.username} ({tweet.author.name})"
    if tweet.created_at:
        header += f"  {tweet.created_at}"
    lines = [header, tweet.text]

    stats = []
    if tweet.like_count is not None:
        stats.append(f"❤️ {tweet.like_count}")
    if tweet.retweet_count is not None:
        stats.append(f"\U0001f501 {tweet.retweet_count}")
    if tweet.reply_count is not None:
        stats.append(f"\U0001f4ac {tweet.reply_count}")
    if stats:
        lines.append("  ".join(stats))

    lines.append(f"\U0001f517 https://x.com/i/status/{tweet.id}")

    if tweet.quoted_tweet:
        quoted = tweet.quoted_tweet
        lines.append(f"  ↪ Quoting @{quoted.author.username}: {quoted.text[:QUOTE_PREVIEW_CHARS]}…")

    for media in tweet.media:
        if media.video_url:
            lines.append(f"  \U0001f3ac {media.video_url}")
        else:
            lines.append(f"  \U0001f5bc️ {media.url}")

    if separator:
        lines.append(SEPARATOR)
    return "\n".join(lines)


def format_tweets(tweets: Sequence[Tweet], json_output: bool = False, empty_message: str = "No tweets found.") -> str:
    if json_output:
        return tweets_to_json(tweets)
    if not tweets:
        return empty_message
    return "\n".join(format_tweet(t) for t in tweets)


def format_user(user: User) -> str:
    lines = [f"@{user.username} ({user.name})  id={user.id}"]
    if user.description:
        lines.append(user.description)
    counts = []
    if user.followers_count is not None:
        counts.append(f"{user.followers_count} followers")
    if user.following_count is not None:
        counts.append(f"{user.following_count} following")
    if counts:
        lines.append(", ".join(counts))
    return "\n".join(lines)


def format_users(users: Sequence[User], json_output: bool = False, empty_message: str = "No users found.") -> str:
    if json_output:
        return users_to_json(users)
    if not users:
        return empty_message
    return f"\n{SEPARATOR}\n".join(format_user(u) for u in users)
