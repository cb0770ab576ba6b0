"""
Fixed policy constants for search and result presentation.

These values are business rules, not deployment settings, so they live
here rather than in config.py.
"""

# Provider results farther than this are dropped after extraction
MAX_DISTANCE_MILES = 100.0

# Container keys the model is asked to return results under
LIST_KEY_PROVIDERS = "providers"
LIST_KEY_EVENTS = "events"

# Canned progress phrases for the streaming relay, each sent at most once
STREAM_STATUS_MESSAGES = (
    "Locating pharmacies...",
    "Checking distribution points...",
    "Finding community resources...",
    "Verifying availability...",
    "Compiling results...",
)
EVENT_STREAM_STATUS_MESSAGES = (
    "Scanning local calendars...",
    "Checking event details...",
    "Matching events to your business...",
    "Verifying dates...",
    "Compiling results...",
)

# Relevance ranking used when sorting results (unknown labels sort last)
RELEVANCE_ORDER = {
    "High": 0,
    "Medium": 1,
    "General": 2,
}

# Placeholder distance for entries without a parseable distance when sorting
UNKNOWN_DISTANCE_MILES = 9999.0

# Keyword heuristics for the results page filters.
# Known to be fuzzy: matched as lowercase substrings of description/tags.
FREE_KEYWORDS = (
    "free",
    "no cost",
    "no-cost",
    "at no charge",
    "without charge",
)
ONLINE_KEYWORDS = (
    "online",
    "mail-order",
    "mail order",
    "by mail",
    "virtual",
    "telehealth",
    "ships",
)
