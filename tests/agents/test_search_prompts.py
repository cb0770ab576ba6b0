"""
Tests for the search prompt builders.
"""

from datetime import date

from naloxone_finder.agents.search.prompts import (
    build_event_system_prompt,
    build_event_user_prompt,
    build_provider_system_prompt,
    build_provider_user_prompt,
    build_search_messages,
)
from naloxone_finder.schemas.search import SearchKind, SearchRequest


class TestProviderPrompts:

    def test_system_prompt_embeds_zip_and_json_shape(self):
        prompt = build_provider_system_prompt("94103")

        assert "In ZIP 94103" in prompt
        assert '"providers": [' in prompt
        assert "Sort by: 1) Distance" in prompt

    def test_streaming_system_prompt_lists_fields_only(self):
        prompt = build_provider_system_prompt("94103", streaming=True)

        assert "94103" in prompt
        assert '"providers": [' not in prompt
        assert "valid JSON format" in prompt

    def test_user_prompt(self):
        prompt = build_provider_user_prompt("94103")

        assert "ZIP code 94103" in prompt
        assert "as specified in your system prompt" in prompt


class TestEventPrompts:

    def test_system_prompt_includes_business_and_date(self):
        prompt = build_event_system_prompt("10001", "bakery", date(2025, 3, 1))

        assert "bakery" in prompt
        assert "on or after 2025-03-01" in prompt
        assert '"events": [' in prompt

    def test_without_date_asks_for_upcoming(self):
        prompt = build_event_user_prompt("10001", "bakery")

        assert "Find events near ZIP code 10001 that are upcoming" in prompt


class TestBuildSearchMessages:

    def test_provider_kind_without_business(self):
        request = SearchRequest(zipCode=" 94103 ")
        messages = build_search_messages(request)

        assert request.kind == SearchKind.PROVIDERS
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "In ZIP 94103 and nearby" in messages[0]["content"]

    def test_blank_business_is_provider_search(self):
        assert SearchRequest(zipCode="94103", business="  ").kind == SearchKind.PROVIDERS

    def test_event_kind_with_business(self):
        request = SearchRequest(zipCode="10001", business="food truck", afterDate="2025-05-01")
        messages = build_search_messages(request, streaming=True)

        assert request.kind == SearchKind.EVENTS
        assert "food truck" in messages[0]["content"]
        assert "on or after 2025-05-01" in messages[1]["content"]
