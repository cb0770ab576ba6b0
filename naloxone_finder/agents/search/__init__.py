"""
Search prompts - Web-Grounded LLM Architecture

This module contains the prompt templates for the Perplexity-based search.

The service layer is in:
- naloxone_finder/services/search_service.py (synchronous search)
- naloxone_finder/services/stream_service.py (streaming relay)

Prompt templates are in:
- naloxone_finder/agents/search/prompts.py
"""

from naloxone_finder.agents.search.prompts import (
    build_event_system_prompt,
    build_event_user_prompt,
    build_provider_system_prompt,
    build_provider_user_prompt,
    build_search_messages,
)

__all__ = [
    "build_event_system_prompt",
    "build_event_user_prompt",
    "build_provider_system_prompt",
    "build_provider_user_prompt",
    "build_search_messages",
]
