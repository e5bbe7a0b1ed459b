"""Query ID fallbacks and bundle discovery patterns."""

import re

# Fallback query IDs. X rotates these periodically; discovery keeps them current.
DEFAULT_QUERY_IDS: dict[str, str] = {
    "TweetDetail": "97JF30KziU00483E_8elBA",
    "SearchTimeline": "M1jEez78PEfVfbQLvlWMvQ",
    "UserTweets": "Wms1GvIiHXAPBaCr9KblaA",
    "UserArticlesTweets": "8zBy9h4L90aDL02RsBcCFg",
    "Bookmarks": "RV1g3b8n_SGOHwkqKYSCFw",
    "BookmarkFolderTimeline": "KJIQpsvxrTfRIlbaRIySHQ",
    "Following": "BEkNpEt5pNETESoqMsTEGA",
    "Followers": "kuFUYP9eV1FPoEy4N-pi7w",
    "Likes": "JR2gceKucIKcVNB_9JkhsA",
    "HomeTimeline": "edseUwk9sP5Phz__9TIRnA",
    "HomeLatestTimeline": "iOEZpOdfekFsxSlPQCQtPg",
    "GenericTimelineById": "uGSr7alSjR9v6QJAIaqSKQ",
    "AboutAccountQuery": "zs_jFPFT78rBpXv9Z3U2YQ",
    "UserByScreenName": "xc8f1g7BYqr6VTzTbvNlGw",
}

# Operations looked up in client bundles during discovery
DISCOVERY_OPERATIONS: list[str] = list(DEFAULT_QUERY_IDS)

# Pages whose HTML references the client bundles
DISCOVERY_PAGES: list[str] = [
    "https://x.com/?lang=en",
    "https://x.com/explore",
    "https://x.com/notifications",
    "https://x.com/settings/profile",
]

DISCOVERY_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

BUNDLE_URL_RE = re.compile(r"https://abs\.twimg\.com/responsive-web/client-web(?:-legacy)?/[A-Za-z0-9.-]+\.js")

# Keys may appear bare (queryId:"...") or quoted ("queryId":"...").
_QID = r"""["']?queryId["']?\s*[:=]\s*["']([^"']+)["']"""
_OP = r"""["']?operationName["']?\s*[:=]\s*["']([^"']+)["']"""

# (pattern, operation group, query ID group), tried in order.
QUERY_ID_PATTERNS: list[tuple[re.Pattern[str], int, int]] = [
    (re.compile(r"e\.exports=\{" + _QID + r"\s*,\s*" + _OP), 2, 1),
    (re.compile(r"e\.exports=\{" + _OP + r"\s*,\s*" + _QID), 1, 2),
    (re.compile(_OP + r"(.{0,4000}?)" + _QID), 1, 3),
    (re.compile(_QID + r"(.{0,4000}?)" + _OP), 3, 1),
]

QUERY_ID_TTL_MS = 24 * 60 * 60 * 1000  # 24 hours

BUNDLE_BATCH_SIZE = 6
