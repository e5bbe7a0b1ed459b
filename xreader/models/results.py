"""Result values returned by client read operations.

Every read operation returns one of these instead of raising, so callers only
check ``success`` and read ``error`` on failure.
"""

from __future__ import annotations

from pydantic import BaseModel

from .tweet import Tweet
from .user import User


class TweetsResult(BaseModel):
    """A page (or several merged pages) of tweets."""

    success: bool
    error: str | None = None
    tweets: list[Tweet] = []
    next_cursor: str | None = None


class TweetResult(BaseModel):
    """A single tweet lookup."""

    success: bool
    error: str | None = None
    tweet: Tweet | None = None


class UsersResult(BaseModel):
    """A page of user profiles (followers, following)."""

    success: bool
    error: str | None = None
    users: list[User] = []
    next_cursor: str | None = None


class UserResult(BaseModel):
    """A username to user ID lookup."""

    success: bool
    error: str | None = None
    user_id: str | None = None
    username: str | None = None
    name: str | None = None
