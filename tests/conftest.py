"""
Pytest configuration for Naloxone Finder backend tests.

Sets up test environment and global fixtures.
"""
import os
import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("PERPLEXITY_API_KEY", "test-perplexity-key")
os.environ.setdefault("PERPLEXITY_API_URL", "https://perplexity.example/chat/completions")

from naloxone_finder.schemas.search import SearchRequest  # noqa: E402


@pytest.fixture
def provider_request():
    """Provider (naloxone) search for ZIP 94103."""
    return SearchRequest(zipCode="94103")


@pytest.fixture
def event_request():
    """Event search for a coffee shop, after a given date."""
    return SearchRequest(zipCode="10001", business="independent coffee shop", afterDate="2025-03-01")


@pytest.fixture
def providers_json_response():
    """Model answer with prose around a well-formed providers object."""
    return """Here are naloxone providers near 94103:

{
  "search_location": "San Francisco, CA (94103)",
  "providers": [
    {
      "title": "Walgreens Pharmacy",
      "date": "",
      "time": "8am-10pm",
      "location": "135 Powell St, San Francisco, CA",
      "distance": "0.5 miles",
      "description": "Over-the-counter Narcan, no prescription required.",
      "relevance_score": "High",
      "registration_url": "https://www.walgreens.com",
      "organizer": "Walgreens",
      "tags": ["pharmacy", "OTC"]
    },
    {
      "title": "DOPE Project",
      "distance": "1.2 miles",
      "description": "Free naloxone kits and overdose prevention training."
    },
    {
      "title": "Far Away Pharmacy",
      "distance": "150 miles",
      "description": "Too far to be useful."
    }
  ]
}

Let me know if you need more."""
