"""Pydantic models for normalized tweets."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

MediaType = Literal["image", "video", "gif"]


class TweetAuthor(BaseModel):
    """Author reference embedded in a tweet."""

    model_config = ConfigDict(frozen=True)

    username: str
    name: str


class TweetMedia(BaseModel):
    """A single media attachment."""

    model_config = ConfigDict(frozen=True)

    type: MediaType
    url: str
    width: int | None = None
    height: int | None = None
    preview_url: str | None = None
    video_url: str | None = None
    duration_ms: int | None = None


class ArticlePreview(BaseModel):
    """Title and teaser of an X native article."""

    model_config = ConfigDict(frozen=True)

    title: str
    preview_text: str | None = None


class Tweet(BaseModel):
    """Normalized tweet, independent of the GraphQL schema variant it came from."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    author: TweetAuthor
    author_id: str | None = None
    created_at: str | None = None
    reply_count: int | None = None
    retweet_count: int | None = None
    like_count: int | None = None
    conversation_id: str | None = None
    in_reply_to_status_id: str | None = None
    quoted_tweet: Tweet | None = None
    media: list[TweetMedia] = []
    article: ArticlePreview | None = None
    raw: dict[str, Any] | None = None

    @property
    def url(self) -> str:
        return f"https://x.com/{self.author.username}/status/{self.id}"


# Rebuild Tweet to resolve the quoted_tweet self-reference
Tweet.model_rebuild()
