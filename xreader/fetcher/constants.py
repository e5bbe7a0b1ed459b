"""Constants for the X web GraphQL endpoints."""

# Public bearer token shipped with the X web client.
BEARER_TOKEN = (
    "AAAAAAAAAAAAAAAAAAAAANRILgAAAAAAnNwIzUejRCOuH5E6I8xnZz4puTs%3D1Zv7ttfk8LF81IUq16cHjhLTvJu4FA33AGWWjCpTnA"
)

GRAPHQL_URL = "https://x.com/i/api/graphql"

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

# Historical IDs tried after the cached and fallback IDs.
TWEET_DETAIL_EXTRA_IDS = ("aFvUsJm2c-oDkJV75blV6g",)
BOOKMARKS_EXTRA_IDS = ("tmd4ifV8RHltzn8ymGg1aw",)
USER_BY_SCREEN_NAME_EXTRA_IDS = ("qW5u-DAuXpMEG0zA1F7UGQ", "sLVLhk0bGj3MVFEKTdax1w")

USER_SHOW_URLS = (
    "https://x.com/i/api/1.1/users/show.json",
    "https://api.twitter.com/1.1/users/show.json",
)

# Largest page the timeline endpoints accept.
MAX_PAGE_SIZE = 20

# Seconds between paginated requests.
SEARCH_PAGE_DELAY = 0.5
USER_TWEETS_PAGE_DELAY = 1.0
BOOKMARKS_PAGE_DELAY = 0.5
