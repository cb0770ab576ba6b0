"""
Search API endpoints.

Endpoints:
- POST /api/search: Synchronous search, returns parsed results
- POST /api/search-stream: Server-Sent Events relay of the raw model text

Both endpoints are public. Errors are reported as `{"error": "..."}`
(synchronous) or as a single `error` event (streaming); nothing is retried.
"""

import logging
from typing import Annotated, Optional

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, StreamingResponse

from naloxone_finder.schemas.search import ErrorResponse, SearchRequest, SearchResponse
from naloxone_finder.services import CompletionClient, SearchStreamRelay, get_completion_client, run_search
from naloxone_finder.services.stream_service import SSE_HEADERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Search for nearby naloxone providers or events",
    description="""
    Asks the web-grounded model for providers (or, with `business`, events)
    near `zipCode` and parses the answer into result entries.

    **Response:**
    - `results`: parsed entries (provider searches drop entries > 100 miles)
    - `rawResponse`: the model text the entries were parsed from
    - `searchParams`: the parameters the search ran with

    **Errors:** `{"error": "..."}` with 400 (missing ZIP), 500 (configuration
    or unexpected error) or the upstream API's status code.
    """
)
async def search_endpoint(
    request: SearchRequest,
    client: Annotated[Optional[CompletionClient], Depends(get_completion_client)],
):
    """Run one synchronous search."""
    logger.info(f"POST /api/search called, kind={request.kind.value}, zip={request.zip_code!r}")

    if not request.normalized_zip:
        return _error(status.HTTP_400_BAD_REQUEST, "Zip code is required")

    if client is None:
        logger.error("PERPLEXITY_API_KEY not found in environment variables")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "API configuration error")

    try:
        response = await run_search(request, client)

    except httpx.HTTPStatusError as e:
        logger.error(f"Completion API returned {e.response.status_code}")
        return _error(e.response.status_code, "Failed to search for events")

    except Exception as e:
        logger.error(f"Search API error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "An error occurred while searching for events")

    logger.info(f"Returning {len(response.results)} results")
    return response


@router.post(
    "/search-stream",
    status_code=status.HTTP_200_OK,
    response_class=StreamingResponse,
    summary="Stream a search as Server-Sent Events",
    description="""
    Same request body as /api/search. The response is `text/event-stream`;
    every frame is `data: <json>` with `type` one of:

    - `status`: cosmetic progress message
    - `error`: terminal failure (`message`)
    - `complete`: terminal frame with the full model text (`content`) and
      the search parameters (`params`)

    The client parses `content` itself.
    """
)
async def search_stream_endpoint(
    request: SearchRequest,
    client: Annotated[Optional[CompletionClient], Depends(get_completion_client)],
) -> StreamingResponse:
    """Relay one streaming search."""
    logger.info(f"POST /api/search-stream called, kind={request.kind.value}, zip={request.zip_code!r}")

    relay = SearchStreamRelay(request, client)
    return StreamingResponse(
        relay.events(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
