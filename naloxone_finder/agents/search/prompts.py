"""
Search Prompt Templates

Contains the system/user prompt builders for the two search kinds:

- Provider search (Naloxone Finder): pharmacies, dispenser boxes, mail-order
  programs and community organisations offering naloxone near a ZIP code.
  Results are returned under the "providers" key.
- Event search (Biz By Me): local events relevant to a business near a
  ZIP code, optionally on or after a given date. Results are returned under
  the "events" key.

Architecture:
- Pattern: Web-grounded LLM (single chat-completion call, Perplexity Sonar)
- Temperature: 0.1 (near-deterministic for factual listings)
- Output: JSON requested in the prompt and parsed from free text, because
  the model may wrap it in prose or drift from the schema

The synchronous endpoint embeds the exact JSON shape in the system prompt.
The streaming endpoint uses a shorter field list to keep the first tokens
flowing sooner.
"""

from datetime import date
from typing import Dict, List, Optional

from naloxone_finder.schemas.search import SearchKind, SearchRequest

# =============================================================================
# PROVIDER SEARCH
# =============================================================================

_PROVIDER_JSON_SHAPE = """{
  "search_location": "City, State (Zip Code)",
  "providers": [
    {
      "title": "Provider/Pharmacy Name",
      "date": "",
      "time": "Hours of operation",
      "location": "Full Address",
      "distance": "XX miles",
      "description": "Description of service, whether prescription required, cost details",
      "relevance_score": "High",
      "registration_url": "Website URL if available",
      "organizer": "Organization or chain name",
      "tags": ["pharmacy", "free", "OTC", "24/7", etc]
    }
  ]
}"""


def build_provider_system_prompt(zip_code: str, streaming: bool = False) -> str:
    """
    Build the system prompt for a naloxone provider search.

    Args:
        zip_code: ZIP code to search around
        streaming: Use the short output description of the streaming endpoint

    Returns:
        str: System prompt text
    """
    if streaming:
        output_section = (
            "Return 10-20 providers in valid JSON format with title, time (hours), "
            "location (full address), distance, description, registration_url (website), "
            "organizer, and tags for each provider."
        )
    else:
        output_section = f"""Return 10-20 providers in this EXACT JSON format:
{_PROVIDER_JSON_SHAPE}

Sort by: 1) Distance (closer first), 2) Free/low-cost options first. Use real, current provider data."""

    return f"""In ZIP {zip_code} and nearby areas, list confirmed providers and resources offering free or low-cost naloxone access.

CRITICAL REQUIREMENTS:
- Include the provider name, description, locations (address, hours), contact/website as available
- Specifically list individual pharmacies (chain + independent) in {zip_code} and surrounding area that stock naloxone over-the-counter (without prescription) and note the pharmacy name and address
- Include other distribution channels such as county dispenser boxes, mail-order programs, community organisations
- Do NOT just say "Pharmacies" generically; list each specific pharmacy individually
- Ensure data reflects local availability around {zip_code}
- You MUST return results in JSON format

{output_section}"""


def build_provider_user_prompt(zip_code: str, streaming: bool = False) -> str:
    """Build the user prompt restating the provider search parameters."""
    format_hint = "in JSON format." if streaming else "in JSON format as specified in your system prompt."
    return (
        f"Find naloxone providers and resources in ZIP code {zip_code}. "
        "List specific pharmacies, community distribution points, and other free or "
        f"low-cost naloxone access points. Return results {format_hint}"
    )


# =============================================================================
# EVENT SEARCH
# =============================================================================

_EVENT_JSON_SHAPE = """{
  "search_location": "City, State (Zip Code)",
  "events": [
    {
      "title": "Event Name",
      "date": "YYYY-MM-DD",
      "time": "Start - End time",
      "location": "Venue, Full Address",
      "distance": "XX miles",
      "description": "What the event is and why it matters for this business",
      "relevance_score": "High",
      "registration_url": "Registration or info URL",
      "organizer": "Hosting organization",
      "tags": ["networking", "free", "workshop", etc]
    }
  ]
}"""


def _date_window(after_date: Optional[date]) -> str:
    if after_date is None:
        return "that are upcoming (today or later)"
    return f"taking place on or after {after_date.isoformat()}"


def build_event_system_prompt(
    zip_code: str,
    business: str,
    after_date: Optional[date] = None,
    streaming: bool = False,
) -> str:
    """
    Build the system prompt for an event search for a business.

    Args:
        zip_code: ZIP code to search around
        business: Free-text business description
        after_date: Only events on or after this date (optional)
        streaming: Use the short output description of the streaming endpoint

    Returns:
        str: System prompt text
    """
    window = _date_window(after_date)
    if streaming:
        output_section = (
            "Return 10-20 events in valid JSON format with title, date (YYYY-MM-DD), time, "
            "location, distance, description, registration_url, organizer, and tags for each event."
        )
    else:
        output_section = f"""Return 10-20 events in this EXACT JSON format:
{_EVENT_JSON_SHAPE}

Sort by: 1) Date (soonest first), 2) Relevance to the business. Use real, current event data."""

    return f"""In ZIP {zip_code} and nearby areas, list confirmed events {window} that are relevant to this business: {business}.

CRITICAL REQUIREMENTS:
- Include the event name, date, time, venue address, organizer and a registration or info link as available
- Only include events {window}; never list past events
- Prefer networking events, trade shows, markets, workshops and community gatherings where this business could find customers or partners
- Ensure events are within reasonable driving distance of {zip_code} and note the distance
- You MUST return results in JSON format

{output_section}"""


def build_event_user_prompt(
    zip_code: str,
    business: str,
    after_date: Optional[date] = None,
    streaming: bool = False,
) -> str:
    """Build the user prompt restating the event search parameters."""
    format_hint = "in JSON format." if streaming else "in JSON format as specified in your system prompt."
    return (
        f"Find events near ZIP code {zip_code} {_date_window(after_date)} for this business: {business}. "
        f"Return results {format_hint}"
    )


# =============================================================================
# MESSAGE ASSEMBLY
# =============================================================================

def build_search_messages(request: SearchRequest, streaming: bool = False) -> List[Dict[str, str]]:
    """
    Build the chat messages (system + user) for a search request.

    The request's kind decides between the provider and the event prompts.
    """
    zip_code = request.normalized_zip
    if request.kind == SearchKind.EVENTS:
        business = (request.business or "").strip()
        system_prompt = build_event_system_prompt(zip_code, business, request.after_date, streaming)
        user_prompt = build_event_user_prompt(zip_code, business, request.after_date, streaming)
    else:
        system_prompt = build_provider_system_prompt(zip_code, streaming)
        user_prompt = build_provider_user_prompt(zip_code, streaming)

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
