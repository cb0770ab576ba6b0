"""
AI components for Naloxone Finder Backend.

Contains the prompt templates for the web-grounded search workflow:

1. Search (Web-Grounded LLM)
   - Uses Perplexity Sonar chat completions with built-in web search
   - NOT an agent framework - one completion call per request
   - Located in: naloxone_finder/agents/search/prompts.py
"""

from naloxone_finder.agents.search import build_search_messages

__all__ = [
    "build_search_messages",
]
