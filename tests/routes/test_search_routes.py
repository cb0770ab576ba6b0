"""
Tests for /api/search and /api/search-stream.

The completion client dependency is overridden so no network calls happen.
- Happy path: JSON answer -> parsed results
- Failure paths: missing ZIP -> 400, missing key -> 500, upstream error -> upstream status
- Streaming: SSE frames, content concatenation, single error without key
"""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from naloxone_finder.main import app
from naloxone_finder.services.completion_client import get_completion_client


@pytest.fixture
def client():
    """Create test client for FastAPI app."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def _override_client(completion_client):
    app.dependency_overrides[get_completion_client] = lambda: completion_client


def _sse_events(body: str):
    return [
        json.loads(frame[len("data: "):])
        for frame in body.split("\n\n")
        if frame.startswith("data: ")
    ]


class StreamingStub:
    def __init__(self, deltas):
        self.deltas = deltas

    @asynccontextmanager
    async def stream(self, messages, max_tokens):
        async def _deltas():
            for delta in self.deltas:
                yield delta

        yield _deltas()


class TestSearchEndpoint:
    """Tests for POST /api/search."""

    def test_returns_parsed_results(self, client, providers_json_response):
        completion = MagicMock()
        completion.complete = AsyncMock(return_value=providers_json_response)
        _override_client(completion)

        response = client.post("/api/search", json={"zipCode": "94103"})

        assert response.status_code == 200
        data = response.json()
        assert [entry["title"] for entry in data["results"]] == ["Walgreens Pharmacy", "DOPE Project"]
        assert data["rawResponse"] == providers_json_response
        assert data["searchParams"] == {"zipCode": "94103"}
        # Absent optional fields are omitted, tags always present
        assert "time" not in data["results"][1]
        assert data["results"][1]["tags"] == []

    def test_event_search_echoes_params(self, client):
        completion = MagicMock()
        completion.complete = AsyncMock(return_value='{"events": []}')
        _override_client(completion)

        response = client.post(
            "/api/search",
            json={"zipCode": "10001", "business": "bakery", "afterDate": "2025-03-01"},
        )

        assert response.status_code == 200
        assert response.json()["searchParams"] == {
            "zipCode": "10001",
            "business": "bakery",
            "afterDate": "2025-03-01",
        }

    def test_numeric_zip_code_is_accepted(self, client):
        completion = MagicMock()
        completion.complete = AsyncMock(return_value='{"providers": []}')
        _override_client(completion)

        response = client.post("/api/search", json={"zipCode": 94103})

        assert response.status_code == 200
        assert response.json()["searchParams"] == {"zipCode": "94103"}
        messages = completion.complete.call_args.args[0]
        assert "ZIP code 94103" in messages[1]["content"]

    @pytest.mark.parametrize("body", [{}, {"zipCode": ""}, {"zipCode": "   "}])
    def test_missing_zip_code(self, client, body):
        _override_client(MagicMock())

        response = client.post("/api/search", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Zip code is required"}

    def test_missing_api_key(self, client):
        _override_client(None)

        response = client.post("/api/search", json={"zipCode": "94103"})

        assert response.status_code == 500
        assert response.json() == {"error": "API configuration error"}

    def test_upstream_error_status_is_forwarded(self, client):
        request = httpx.Request("POST", "https://perplexity.example/chat/completions")
        completion = MagicMock()
        completion.complete = AsyncMock(side_effect=httpx.HTTPStatusError(
            "rate limited", request=request, response=httpx.Response(429, request=request)
        ))
        _override_client(completion)

        response = client.post("/api/search", json={"zipCode": "94103"})

        assert response.status_code == 429
        assert response.json() == {"error": "Failed to search for events"}

    def test_unexpected_error_is_generic(self, client):
        completion = MagicMock()
        completion.complete = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
        _override_client(completion)

        response = client.post("/api/search", json={"zipCode": "94103"})

        assert response.status_code == 500
        assert response.json() == {"error": "An error occurred while searching for events"}

    def test_invalid_after_date_is_validation_error(self, client):
        _override_client(MagicMock())

        response = client.post("/api/search", json={"zipCode": "94103", "afterDate": "next week"})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestSearchStreamEndpoint:
    """Tests for POST /api/search-stream."""

    def test_streams_status_and_complete(self, client):
        _override_client(StreamingStub(["Hello ", "naloxone ", "world"]))

        response = client.post("/api/search-stream", json={"zipCode": "94103"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

        events = _sse_events(response.text)
        assert events[0] == {"type": "status", "message": "Initializing search..."}
        assert events[-1] == {
            "type": "complete",
            "content": "Hello naloxone world",
            "params": {"zipCode": "94103"},
        }

    def test_missing_api_key_single_error_event(self, client):
        _override_client(None)

        response = client.post("/api/search-stream", json={"zipCode": "94103"})

        assert response.status_code == 200
        assert _sse_events(response.text) == [{"type": "error", "message": "API key not configured"}]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
