"""Pydantic models for the x-reader application."""

from __future__ import annotations

from .auth import Cookies, ResolvedCookies
from .config import (
    AuthConfig,
    ClientConfig,
    QueryIdsConfig,
    XReaderConfig,
)
from .query_ids import QueryIdDiscovery, QueryIdSnapshot, is_valid_query_id
from .results import TweetResult, TweetsResult, UserResult, UsersResult
from .tweet import ArticlePreview, Tweet, TweetAuthor, TweetMedia
from .user import User

__all__ = [
    "ArticlePreview",
    "AuthConfig",
    "ClientConfig",
    "Cookies",
    "QueryIdDiscovery",
    "QueryIdSnapshot",
    "QueryIdsConfig",
    "ResolvedCookies",
    "Tweet",
    "TweetAuthor",
    "TweetMedia",
    "TweetResult",
    "TweetsResult",
    "User",
    "UserResult",
    "UsersResult",
    "XReaderConfig",
    "is_valid_query_id",
]
