"""GraphQL client, dispatch and response normalization for the X web API."""

from .dispatch import ApplicationError, Failure, NotFound, Outcome, QueryIdDispatcher, Success
from .extractors import (
    extract_cursor,
    extract_tweet_text,
    find_tweet_in_instructions,
    parse_tweet,
    parse_tweets_from_instructions,
    parse_user,
    parse_users_from_instructions,
)
from .graphql_client import XReaderClient, graphql_error_message

__all__ = [
    "ApplicationError",
    "Failure",
    "NotFound",
    "Outcome",
    "QueryIdDispatcher",
    "Success",
    "XReaderClient",
    "extract_cursor",
    "extract_tweet_text",
    "find_tweet_in_instructions",
    "graphql_error_message",
    "parse_tweet",
    "parse_tweets_from_instructions",
    "parse_user",
    "parse_users_from_instructions",
]
