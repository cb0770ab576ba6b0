"""
Response Extractor - turn free-form model output into ResultEntry lists.

The completion API is asked for JSON but nothing guarantees it, so
extraction degrades in two tiers and never raises:

1. Structured: find the `{ ... "<list_key>" ... }` block in the text, parse
   it as JSON and map the named array field-for-field. When the outermost
   block does not parse, the first JSON object holding the array wins.
2. Heuristic: scan the text line by line for numbered/bulleted titles and
   `Date:` / `Time:` / `Location:` / URL / description lines.

The tier that produced the entries is reported through ExtractionResult so
callers can tell "reliable" from "best effort" results, although current
callers treat both the same.

Provider searches additionally drop entries reported more than
MAX_DISTANCE_MILES away (see filter_by_distance).
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from naloxone_finder.schemas.search import ResultEntry
from naloxone_finder.utils.constants import LIST_KEY_PROVIDERS, MAX_DISTANCE_MILES

logger = logging.getLogger(__name__)


class ExtractionTier(str, Enum):
    STRUCTURED = "structured"
    HEURISTIC = "heuristic"
    EMPTY = "empty"


@dataclass
class ExtractionResult:
    """Entries plus the tier that produced them."""
    tier: ExtractionTier
    entries: List[ResultEntry] = field(default_factory=list)


# =============================================================================
# TIER 1: STRUCTURED EXTRACTION
# =============================================================================

_OPTIONAL_TEXT_FIELDS = (
    "time",
    "location",
    "distance",
    "relevance_score",
    "registration_url",
    "organizer",
)

_TRAILING_COMMA_RE = re.compile(r',(\s*[}\]])')
_CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def _json_block_pattern(list_key: str) -> re.Pattern:
    return re.compile(r'\{[\s\S]*"' + re.escape(list_key) + r'"[\s\S]*\}')


def _repair_json(text: str) -> str:
    """Fix the most common LLM JSON mistakes (trailing commas, control chars)."""
    text = _TRAILING_COMMA_RE.sub(r'\1', text)
    return _CONTROL_CHARS_RE.sub('', text)


def _load_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass
    try:
        return json.loads(_repair_json(text))
    except (ValueError, RecursionError) as e:
        logger.warning(f"JSON parsing of the outermost block failed: {e}")
        return None


def _holds_list(parsed: Any, list_key: str) -> bool:
    return isinstance(parsed, dict) and isinstance(parsed.get(list_key), list)


def _scan_for_object(content: str, list_key: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JSON value at each `{` in turn and return the first object
    holding a `list_key` array. Used when stray braces in the surrounding
    prose break the outermost-block match.
    """
    decoder = json.JSONDecoder()
    start = content.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(content, start)
        except (ValueError, RecursionError):
            parsed = None
        if _holds_list(parsed, list_key):
            return parsed
        start = content.find("{", start + 1)
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _entry_from_item(item: Dict[str, Any]) -> ResultEntry:
    tags = item.get("tags")
    values: Dict[str, Any] = {
        "title": _as_text(item.get("title")) or "",
        "date": _as_text(item.get("date")) or "",
        "description": _as_text(item.get("description")) or "",
        "tags": [str(tag) for tag in tags if tag is not None] if isinstance(tags, list) else [],
    }
    for name in _OPTIONAL_TEXT_FIELDS:
        values[name] = _as_text(item.get(name))
    return ResultEntry(**values)


def extract_structured(content: str, list_key: str = LIST_KEY_PROVIDERS) -> Optional[List[ResultEntry]]:
    """
    Pull the `list_key` array out of a JSON object embedded in `content`.

    Returns:
        The mapped entries (possibly empty) when a JSON object with an array
        under `list_key` was found, otherwise None.
    """
    match = _json_block_pattern(list_key).search(content)
    if not match:
        logger.info("No JSON structure found in response")
        return None

    logger.info("Found JSON structure in response")
    parsed = _load_json(match.group(0))
    if not _holds_list(parsed, list_key):
        parsed = _scan_for_object(content, list_key)
    if parsed is None:
        logger.info(f"No JSON object with a '{list_key}' array found, falling back to text parsing")
        return None

    items = parsed[list_key]
    entries = [_entry_from_item(item) for item in items if isinstance(item, dict)]
    skipped = len(items) - len(entries)
    if skipped:
        logger.warning(f"Skipped {skipped} non-object items in '{list_key}' array")
    logger.info(f"Extracted {len(entries)} {list_key} from JSON")
    return entries


# =============================================================================
# TIER 2: HEURISTIC LINE PARSING
# =============================================================================

_TITLE_MARKER_RE = re.compile(r'^\d+\.|^-|^\*')
_LEADING_BULLET_RE = re.compile(r'^-|^\*')
_DATE_PREFIX_RE = re.compile(r'^.*date:', re.IGNORECASE)
_TIME_PREFIX_RE = re.compile(r'^.*time:', re.IGNORECASE)
_LOCATION_PREFIX_RE = re.compile(r'^.*location:', re.IGNORECASE)
_URL_RE = re.compile(r'(https?://\S+|www\.\S+)', re.IGNORECASE)
_DESCRIPTION_LABEL_RE = re.compile(r'^Description:', re.IGNORECASE)

MIN_DESCRIPTION_LENGTH = 20


def _labelled_value(line: str, prefix: re.Pattern) -> str:
    value = prefix.sub('', line, count=1)
    return _LEADING_BULLET_RE.sub('', value, count=1).strip()


def _new_entry(line: str) -> Dict[str, Any]:
    title = _TITLE_MARKER_RE.sub('', line, count=1).strip().replace('**', '')
    return {"title": title, "date": "", "description": "", "tags": []}


def parse_entries_from_text(content: str) -> List[ResultEntry]:
    """
    Best-effort scrape of a numbered/bulleted list.

    A line starting with "1." / "-" / "*" (and not mentioning "Date" or
    "Link") opens a new entry. Labelled lines fill in date, time and
    location, the first URL becomes the registration link, and the first
    long unlabelled line becomes the description.

    Only entries with a title and either a date or a description are kept.
    """
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}

    for raw_line in content.split('\n'):
        line = raw_line.strip()
        if not line:
            continue

        lowered = line.lower()
        if _TITLE_MARKER_RE.match(line) and 'Date' not in line and 'Link' not in line:
            if current.get("title"):
                entries.append(current)
            current = _new_entry(line)
        elif 'date:' in lowered:
            current["date"] = _labelled_value(line, _DATE_PREFIX_RE)
        elif 'time:' in lowered:
            current["time"] = _labelled_value(line, _TIME_PREFIX_RE)
        elif 'location:' in lowered:
            current["location"] = _labelled_value(line, _LOCATION_PREFIX_RE)
        elif 'http' in lowered or 'www.' in line:
            url_match = _URL_RE.search(line)
            if url_match:
                current["registration_url"] = url_match.group(0)
        elif current.get("title") and not current.get("description") and len(line) > MIN_DESCRIPTION_LENGTH:
            current["description"] = _DESCRIPTION_LABEL_RE.sub('', line, count=1).strip()

    if current.get("title"):
        entries.append(current)

    return [
        ResultEntry(**entry)
        for entry in entries
        if entry.get("title") and (entry.get("date") or entry.get("description"))
    ]


# =============================================================================
# POST-PROCESSING
# =============================================================================

_DISTANCE_NUMBER_RE = re.compile(r'(\d+(?:\.\d+)?)')


def parse_distance_miles(distance: Optional[str]) -> Optional[float]:
    """First number in a free-text distance ("3.2 miles" -> 3.2), or None."""
    if not distance:
        return None
    match = _DISTANCE_NUMBER_RE.search(distance)
    if not match:
        return None
    return float(match.group(1))


def filter_by_distance(entries: List[ResultEntry], max_miles: float = MAX_DISTANCE_MILES) -> List[ResultEntry]:
    """
    Drop entries reported farther than `max_miles`.

    Entries without a distance, or whose distance has no number in it,
    are kept.
    """
    kept = []
    for entry in entries:
        miles = parse_distance_miles(entry.distance)
        if miles is None:
            logger.debug(f"Entry '{entry.title}' has no parseable distance ({entry.distance!r}), keeping it")
            kept.append(entry)
        elif miles <= max_miles:
            kept.append(entry)
        else:
            logger.debug(f"Entry '{entry.title}' is {miles} miles away, filtering out")

    logger.info(f"Distance filter kept {len(kept)} of {len(entries)} entries")
    return kept


# =============================================================================
# ENTRY POINTS
# =============================================================================

def extract_entries(content: str, list_key: str = LIST_KEY_PROVIDERS) -> ExtractionResult:
    """
    Run both extraction tiers over `content`. Never raises.

    The heuristic tier only runs when no `list_key` array could be
    recovered from embedded JSON.
    """
    if not isinstance(content, str) or not content.strip():
        return ExtractionResult(tier=ExtractionTier.EMPTY)

    structured = extract_structured(content, list_key)
    if structured is not None:
        tier = ExtractionTier.STRUCTURED if structured else ExtractionTier.EMPTY
        return ExtractionResult(tier=tier, entries=structured)

    logger.info("Using text parsing fallback...")
    heuristic = parse_entries_from_text(content)
    if not heuristic:
        return ExtractionResult(tier=ExtractionTier.EMPTY)
    return ExtractionResult(tier=ExtractionTier.HEURISTIC, entries=heuristic)


def parse_entries(
    content: str,
    list_key: str = LIST_KEY_PROVIDERS,
    apply_distance_filter: bool = True,
) -> List[ResultEntry]:
    """Extract entries and, for provider searches, apply the distance filter."""
    result = extract_entries(content, list_key)
    logger.info(f"Extraction tier={result.tier.value}, entries={len(result.entries)}")
    if apply_distance_filter:
        return filter_by_distance(result.entries)
    return result.entries
