"""
Perplexity chat-completion client.

Thin async wrapper over the OpenAI-compatible `/chat/completions` endpoint:

- complete(): one non-streaming call, returns the assistant text
- stream():   streaming call (async context manager) yielding an iterator
              of token deltas in arrival order

Non-2xx responses raise httpx.HTTPStatusError (via raise_for_status) after
the upstream body has been logged. There is no retry; callers decide how
to surface the failure.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from naloxone_finder.config import settings

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "
SSE_DONE_MARKER = "[DONE]"


class CompletionClient:
    """Client for a single chat-completion provider configuration."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.1,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def build_payload(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        stream: bool,
    ) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }

    async def complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        """
        Run one non-streaming completion.

        Returns:
            The first choice's message content, or "" when absent.

        Raises:
            httpx.HTTPStatusError: Upstream answered with a non-2xx status.
        """
        async with self._client() as client:
            response = await client.post(
                self.base_url,
                json=self.build_payload(messages, max_tokens, stream=False),
                headers=self._headers(),
            )
            if response.is_error:
                logger.error(f"Completion API error {response.status_code}: {response.text[:500]}")
            response.raise_for_status()

        data = response.json()
        return _message_content(data)

    @asynccontextmanager
    async def stream(
        self, messages: List[Dict[str, str]], max_tokens: int
    ) -> AsyncIterator[AsyncIterator[str]]:
        """
        Open a streaming completion.

        Entering the context sends the request and checks the status; the
        yielded iterator produces token deltas in arrival order. Iteration
        ends at the `[DONE]` marker or when the upstream closes. Leaving the
        context closes the upstream connection.

        Usage:
            >>> async with client.stream(messages, max_tokens=2500) as deltas:
            ...     async for delta in deltas:
            ...         buffer += delta

        Raises:
            httpx.HTTPStatusError: Upstream answered with a non-2xx status.
        """
        async with self._client() as client:
            async with client.stream(
                "POST",
                self.base_url,
                json=self.build_payload(messages, max_tokens, stream=True),
                headers=self._headers(),
            ) as response:
                if response.is_error:
                    body = await response.aread()
                    logger.error(f"Completion API error {response.status_code}: {body[:500]!r}")
                response.raise_for_status()
                yield _iter_deltas(response)


async def _iter_deltas(response: httpx.Response) -> AsyncIterator[str]:
    async for line in response.aiter_lines():
        if not line.startswith(SSE_DATA_PREFIX):
            continue
        data = line[len(SSE_DATA_PREFIX):].strip()
        if data == SSE_DONE_MARKER:
            break
        try:
            frame = json.loads(data)
        except ValueError:
            # Skip invalid JSON
            continue
        # Empty deltas are passed on; they still mark upstream activity
        yield _delta_content(frame)


def _message_content(data: Any) -> str:
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def _delta_content(frame: Any) -> str:
    try:
        return frame["choices"][0]["delta"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def get_completion_client() -> Optional[CompletionClient]:
    """
    Build a completion client from settings.

    Used as a FastAPI dependency. Returns None when PERPLEXITY_API_KEY is
    not configured so callers can report a configuration error.
    """
    if not settings.PERPLEXITY_API_KEY:
        logger.warning(
            "PERPLEXITY_API_KEY not configured. Search endpoints will not work. "
            "Please set PERPLEXITY_API_KEY in your .env file."
        )
        return None

    return CompletionClient(
        api_key=settings.PERPLEXITY_API_KEY,
        base_url=settings.PERPLEXITY_API_URL,
        model=settings.PERPLEXITY_MODEL,
        temperature=settings.SEARCH_TEMPERATURE,
        timeout=settings.PERPLEXITY_TIMEOUT_SECONDS,
    )
