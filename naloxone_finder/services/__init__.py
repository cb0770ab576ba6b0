"""
Service layer for Naloxone Finder Backend.

Contains the logic behind the HTTP routes:
- Building prompts and calling the Perplexity completion API
- Extracting result entries from free-form model output
- Relaying streamed completions as Server-Sent Events
- Arranging result lists for the results page

Services act as the glue between routes (HTTP layer) and the completion API.
"""

from .completion_client import CompletionClient, get_completion_client
from .extractor import (
    ExtractionResult,
    ExtractionTier,
    extract_entries,
    filter_by_distance,
    parse_entries,
    parse_entries_from_text,
)
from .presentation import build_results_view
from .search_service import run_search
from .stream_service import SearchStreamRelay

__all__ = [
    "CompletionClient",
    "get_completion_client",
    "ExtractionResult",
    "ExtractionTier",
    "extract_entries",
    "filter_by_distance",
    "parse_entries",
    "parse_entries_from_text",
    "build_results_view",
    "run_search",
    "SearchStreamRelay",
]
