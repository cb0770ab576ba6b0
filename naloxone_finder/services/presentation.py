"""
Presentation Service - results page rules.

Pure functions that arrange a result list for display: hide past events,
apply the free/paid and online/physical filters, sort, and page through
results for "load more". Nothing here talks to the network or keeps state
between calls; the client sends the list it holds with every request.

The free/paid and online/physical classifications are keyword heuristics
over the entry text and will misclassify some entries.
"""

import logging
import re
from datetime import date, datetime
from typing import List, Optional, Tuple

from naloxone_finder.schemas.results import ResultsView, ResultsViewRequest, ResultViewEntry
from naloxone_finder.schemas.search import ResultEntry
from naloxone_finder.services.extractor import parse_distance_miles
from naloxone_finder.utils.constants import (
    FREE_KEYWORDS,
    ONLINE_KEYWORDS,
    RELEVANCE_ORDER,
    UNKNOWN_DISTANCE_MILES,
)

logger = logging.getLogger(__name__)

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
)
_ISO_DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2}')


def parse_entry_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an entry's free-text date.

    Accepts ISO dates (also when embedded, e.g. "2025-03-01 (Saturday)")
    and a few common US spellings. Returns None when nothing matches.
    """
    if not value:
        return None
    text = value.strip()
    iso = _ISO_DATE_RE.search(text)
    if iso:
        try:
            return date.fromisoformat(iso.group(0))
        except ValueError:
            return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


# =============================================================================
# FILTERS
# =============================================================================

def upcoming_entries(entries: List[ResultEntry], today: date) -> List[ResultEntry]:
    """Drop entries dated before `today`; undated or unparseable entries stay."""
    kept = []
    for entry in entries:
        entry_date = parse_entry_date(entry.date)
        if entry_date is None or entry_date >= today:
            kept.append(entry)
    return kept


def _entry_text(entry: ResultEntry) -> str:
    parts = [entry.description, entry.title, " ".join(entry.tags)]
    return " ".join(parts).lower()


def is_free(entry: ResultEntry) -> bool:
    """True when the entry text advertises free access."""
    text = _entry_text(entry)
    return any(keyword in text for keyword in FREE_KEYWORDS)


def is_online(entry: ResultEntry) -> bool:
    """True for mail-order / online programs and entries without a location."""
    text = _entry_text(entry)
    if any(keyword in text for keyword in ONLINE_KEYWORDS):
        return True
    return not (entry.location or "").strip()


def filter_entries(entries: List[ResultEntry], cost: str = "all", access: str = "all") -> List[ResultEntry]:
    """
    Apply the cost and access filters.

    cost: "all" | "free" | "paid" (paid means "not advertised as free")
    access: "all" | "online" | "physical"
    """
    filtered = entries
    if cost == "free":
        filtered = [entry for entry in filtered if is_free(entry)]
    elif cost == "paid":
        filtered = [entry for entry in filtered if not is_free(entry)]

    if access == "online":
        filtered = [entry for entry in filtered if is_online(entry)]
    elif access == "physical":
        filtered = [entry for entry in filtered if not is_online(entry)]

    return filtered


# =============================================================================
# SORTING & PAGING
# =============================================================================

def _date_key(entry: ResultEntry) -> date:
    return parse_entry_date(entry.date) or date.max


def _distance_key(entry: ResultEntry) -> float:
    miles = parse_distance_miles(entry.distance)
    return UNKNOWN_DISTANCE_MILES if miles is None else miles


def _relevance_key(entry: ResultEntry) -> int:
    return RELEVANCE_ORDER.get(entry.relevance_score or "", len(RELEVANCE_ORDER))


_SORT_KEYS = {
    "date": _date_key,
    "distance": _distance_key,
    "relevance": _relevance_key,
}


def sort_entries(entries: List[ResultEntry], sort_by: str = "date") -> List[ResultEntry]:
    """
    Sort entries for display (stable).

    - date: soonest first, undated last
    - distance: closest first, unknown distance last
    - relevance: High, Medium, General, then anything else
    """
    key = _SORT_KEYS.get(sort_by)
    if key is None:
        raise ValueError(f"Unknown sort option: {sort_by}")
    return sorted(entries, key=key)


def paginate(entries: List[ResultEntry], page: int, page_size: int) -> Tuple[List[ResultEntry], bool]:
    """
    Return everything shown after `page` rounds of "load more", i.e. the
    first `page * page_size` entries, and whether more remain.
    """
    visible = page * page_size
    return entries[:visible], len(entries) > visible


def latest_date(entries: List[ResultEntry]) -> Optional[date]:
    """Latest parseable entry date; the next `afterDate` for "load more"."""
    dates = [d for d in (parse_entry_date(entry.date) for entry in entries) if d is not None]
    return max(dates) if dates else None


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

_MILES_FROM_RE = re.compile(r'miles from.*')
_MILES_RE = re.compile(r'(\d+)\s*miles.*')


def short_location(location: Optional[str]) -> Optional[str]:
    """Shorten "Venue, City, State" to "City"; single-part locations are returned as-is."""
    if not location or not location.strip():
        return None
    parts = [part.strip() for part in location.split(",")]
    return parts[-2] if len(parts) > 1 else parts[0]


def short_distance(distance: Optional[str]) -> Optional[str]:
    """Shorten "3 miles from 94103" to "3 mi"."""
    if not distance:
        return None
    simplified = _MILES_FROM_RE.sub("miles away", distance)
    return _MILES_RE.sub(r'\1 mi', simplified)


def to_view_entry(entry: ResultEntry) -> ResultViewEntry:
    """Attach the short location and distance labels shown on result cards."""
    return ResultViewEntry(
        **entry.model_dump(),
        short_location=short_location(entry.location),
        short_distance=short_distance(entry.distance),
    )


# =============================================================================
# VIEW
# =============================================================================

def build_results_view(request: ResultsViewRequest, today: Optional[date] = None) -> ResultsView:
    """
    Arrange a client-held result list the way the results page shows it.

    "Load more" works in two steps: first through local pages, then, once
    `hasMore` is false, by searching again with `afterDate=nextAfterDate`.
    """
    today = today or date.today()

    upcoming = upcoming_entries(request.results, today)
    filtered = filter_entries(upcoming, cost=request.cost, access=request.access)
    ordered = sort_entries(filtered, request.sort_by)
    visible, has_more = paginate(ordered, request.page, request.page_size)

    logger.info(
        f"Results view: {len(request.results)} in, {len(upcoming)} upcoming, "
        f"{len(filtered)} after filters, {len(visible)} visible"
    )

    return ResultsView(
        results=[to_view_entry(entry) for entry in visible],
        total=len(filtered),
        page=request.page,
        page_size=request.page_size,
        has_more=has_more,
        next_after_date=latest_date(request.results),
    )
