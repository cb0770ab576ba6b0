"""
Search Service - synchronous provider/event search.

Flow for POST /api/search:
1. Build the system/user prompt pair for the request's kind
2. One non-streaming Perplexity completion call
3. Run the raw text through the Response Extractor
4. Return parsed entries with the raw text and echoed search parameters

Failures of the completion call propagate to the route (httpx errors);
extraction never fails and at worst yields an empty list.
"""

import json
import logging

from naloxone_finder.agents.search import build_search_messages
from naloxone_finder.config import settings
from naloxone_finder.schemas.search import SearchKind, SearchParams, SearchRequest, SearchResponse
from naloxone_finder.services.completion_client import CompletionClient
from naloxone_finder.services.extractor import parse_entries

logger = logging.getLogger(__name__)

RAW_LOG_CHARS = 2000


async def run_search(request: SearchRequest, client: CompletionClient) -> SearchResponse:
    """
    Run a synchronous search and parse the model response.

    Args:
        request: Validated search request (zipCode required)
        client: Configured completion client

    Returns:
        SearchResponse with parsed results, raw text and echoed params

    Raises:
        httpx.HTTPStatusError: The completion API returned a non-2xx status
        httpx.HTTPError: The completion API could not be reached
    """
    kind = request.kind
    logger.info(f"run_search called for kind={kind.value}, zip={request.normalized_zip}")

    messages = build_search_messages(request)
    content = await client.complete(messages, max_tokens=settings.SEARCH_MAX_TOKENS)

    logger.info("=== RAW COMPLETION RESPONSE ===")
    logger.info(f"Content length: {len(content)} chars")
    logger.info(content[:RAW_LOG_CHARS])
    logger.info("=== END RAW RESPONSE ===")

    results = parse_entries(
        content,
        list_key=kind.value,
        apply_distance_filter=kind == SearchKind.PROVIDERS,
    )

    logger.info(f"Parsed {len(results)} {kind.value}")
    if results:
        logger.info(f"First entry: {json.dumps(results[0].model_dump(exclude_none=True), indent=2)}")

    return SearchResponse(
        results=results,
        raw_response=content,
        search_params=SearchParams.from_request(request),
    )
