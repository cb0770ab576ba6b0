"""
Stream Service - Server-Sent Events relay for POST /api/search-stream.

The relay forwards a streaming Perplexity completion to the browser:

    IDLE -> INITIALIZING -> AWAITING_UPSTREAM -> STREAMING -> COMPLETING -> CLOSED
    (any state) -> ERROR -> CLOSED

While tokens arrive they are only accumulated; roughly every
`status_interval` seconds one canned status phrase is sent so the page
shows progress. The phrases are cosmetic and unrelated to how much of the
answer has arrived. When the upstream closes, the whole text is sent once
in a `complete` event and the browser runs its own extraction.

Every frame is `data: <json>\\n\\n`. Failures end the stream with a single
`error` event; nothing is retried.
"""

import logging
import time
from enum import Enum
from typing import AsyncIterator, Callable, Optional, Sequence

import httpx
from pydantic import BaseModel

from naloxone_finder.agents.search import build_search_messages
from naloxone_finder.config import settings
from naloxone_finder.schemas.search import (
    CompleteEvent,
    ErrorEvent,
    SearchKind,
    SearchParams,
    SearchRequest,
    StatusEvent,
)
from naloxone_finder.services.completion_client import CompletionClient
from naloxone_finder.utils.constants import EVENT_STREAM_STATUS_MESSAGES, STREAM_STATUS_MESSAGES

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class RelayState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    AWAITING_UPSTREAM = "awaiting_upstream"
    STREAMING = "streaming"
    COMPLETING = "completing"
    ERROR = "error"
    CLOSED = "closed"


def format_sse(event: BaseModel) -> str:
    """Serialize one event as an SSE `data:` frame."""
    return f"data: {event.model_dump_json(by_alias=True, exclude_none=True)}\n\n"


class SearchStreamRelay:
    """
    One streaming search, from first status frame to `complete`/`error`.

    Args:
        request: Validated search request
        client: Completion client, or None when no API key is configured
        clock: Monotonic clock in seconds (injectable for tests)
        status_interval: Minimum seconds between canned status frames
        status_messages: Canned phrases; defaults depend on the search kind
    """

    def __init__(
        self,
        request: SearchRequest,
        client: Optional[CompletionClient],
        clock: Callable[[], float] = time.monotonic,
        status_interval: Optional[float] = None,
        status_messages: Optional[Sequence[str]] = None,
    ):
        self.request = request
        self.client = client
        self.clock = clock
        self.status_interval = (
            settings.STREAM_STATUS_INTERVAL_SECONDS if status_interval is None else status_interval
        )
        if status_messages is None:
            status_messages = (
                EVENT_STREAM_STATUS_MESSAGES
                if request.kind == SearchKind.EVENTS
                else STREAM_STATUS_MESSAGES
            )
        self.status_messages = list(status_messages)
        self.state = RelayState.IDLE
        self.content = ""

    def _transition(self, state: RelayState) -> None:
        logger.debug(f"Stream relay {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, message: str) -> str:
        self._transition(RelayState.ERROR)
        return format_sse(ErrorEvent(message=message))

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until the relay is closed."""
        try:
            async for frame in self._relay():
                yield frame
        except httpx.HTTPStatusError as e:
            logger.error(f"Streaming search failed with upstream status {e.response.status_code}")
            yield self._fail("Search failed")
        except Exception as e:
            logger.error(f"Streaming search error: {e}")
            yield self._fail("An error occurred")
        finally:
            self._transition(RelayState.CLOSED)

    async def _relay(self) -> AsyncIterator[str]:
        self._transition(RelayState.INITIALIZING)

        if self.client is None:
            logger.error("Streaming search requested without PERPLEXITY_API_KEY")
            yield self._fail("API key not configured")
            return

        yield format_sse(StatusEvent(message="Initializing search..."))
        messages = build_search_messages(self.request, streaming=True)
        yield format_sse(StatusEvent(message="Connecting to AI search..."))

        self._transition(RelayState.AWAITING_UPSTREAM)
        async with self.client.stream(messages, max_tokens=settings.STREAM_MAX_TOKENS) as deltas:
            searching = (
                "Searching for events..."
                if self.request.kind == SearchKind.EVENTS
                else "Searching for naloxone providers..."
            )
            yield format_sse(StatusEvent(message=searching))

            self._transition(RelayState.STREAMING)
            chunk_count = 0
            status_index = 0
            last_status = self.clock()
            async for delta in deltas:
                chunk_count += 1
                if chunk_count <= 3:
                    logger.debug(f"Chunk {chunk_count} content: {delta!r}")
                self.content += delta

                if status_index < len(self.status_messages) and self.clock() - last_status > self.status_interval:
                    yield format_sse(StatusEvent(message=self.status_messages[status_index]))
                    status_index += 1
                    last_status = self.clock()

        self._transition(RelayState.COMPLETING)
        yield format_sse(StatusEvent(message="Processing results..."))

        logger.info("=== STREAM COMPLETE ===")
        logger.info(f"Total content length: {len(self.content)} chars")
        logger.info(f"First 1000 chars: {self.content[:1000]}")
        logger.info(f"Last 500 chars: {self.content[-500:]}")
        logger.info("=== END STREAM ===")

        yield format_sse(
            CompleteEvent(content=self.content, params=SearchParams.from_request(self.request))
        )
