"""
Pydantic schemas for the search endpoints.

These models define the request/response contracts for:
- POST /api/search          (synchronous search, parsed results)
- POST /api/search-stream   (Server-Sent Events relay of the raw model text)

Wire names follow the browser client (camelCase: zipCode, rawResponse,
searchParams). Result entries keep the snake_case field names the model
is prompted to produce.
"""

from datetime import date
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from naloxone_finder.utils.constants import LIST_KEY_EVENTS, LIST_KEY_PROVIDERS


class SearchKind(str, Enum):
    """Which result list the model is asked for."""
    PROVIDERS = LIST_KEY_PROVIDERS
    EVENTS = LIST_KEY_EVENTS


# ============================================================================
# REQUEST MODELS
# ============================================================================

class SearchRequest(BaseModel):
    """
    Request body shared by /api/search and /api/search-stream.

    Without `business` the request is a naloxone provider search. With a
    business description it becomes an event search for that business,
    optionally restricted to events on or after `afterDate` ("load more").
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    zip_code: Optional[str] = Field(
        None,
        alias="zipCode",
        description="US ZIP code to search around",
        max_length=10,
        examples=["94103", "10001"]
    )
    business: Optional[str] = Field(
        None,
        description="Optional business description; switches the search to events",
        max_length=500,
        examples=["independent coffee shop"]
    )
    after_date: Optional[date] = Field(
        None,
        alias="afterDate",
        description="Only request events on or after this date (YYYY-MM-DD)",
        examples=["2025-01-31"]
    )

    @property
    def kind(self) -> SearchKind:
        if self.business and self.business.strip():
            return SearchKind.EVENTS
        return SearchKind.PROVIDERS

    @property
    def normalized_zip(self) -> str:
        return (self.zip_code or "").strip()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ResultEntry(BaseModel):
    """
    A single provider or event shown to the user.

    Only `title` and `description` are treated as required content; all
    other fields are free text copied from the model output.
    """
    title: str = Field(..., description="Provider or event name")
    date: str = Field("", description="Event date; empty for providers")
    time: Optional[str] = Field(None, description="Hours of operation or event time")
    location: Optional[str] = Field(None, description="Address or venue")
    distance: Optional[str] = Field(
        None,
        description="Free-text distance, e.g. '3.2 miles'",
        examples=["3.2 miles"]
    )
    description: str = Field("", description="Free-text description")
    relevance_score: Optional[str] = Field(
        None,
        description="Open vocabulary, typically High/Medium/General",
        examples=["High"]
    )
    registration_url: Optional[str] = Field(None, description="External link")
    organizer: Optional[str] = Field(None, description="Hosting organisation or pharmacy chain")
    tags: List[str] = Field(default_factory=list, description="Unordered labels")


class SearchParams(BaseModel):
    """Search parameters echoed back to the client."""
    model_config = ConfigDict(populate_by_name=True)

    zip_code: str = Field(..., alias="zipCode")
    business: Optional[str] = None
    after_date: Optional[date] = Field(None, alias="afterDate")

    @classmethod
    def from_request(cls, request: SearchRequest) -> "SearchParams":
        return cls(
            zip_code=request.normalized_zip,
            business=request.business.strip() if request.kind == SearchKind.EVENTS else None,
            after_date=request.after_date,
        )


class SearchResponse(BaseModel):
    """Successful response of POST /api/search."""
    model_config = ConfigDict(populate_by_name=True)

    results: List[ResultEntry] = Field(default_factory=list)
    raw_response: str = Field("", alias="rawResponse")
    search_params: SearchParams = Field(..., alias="searchParams")


class ErrorResponse(BaseModel):
    """Error payload returned with a non-2xx status."""
    error: str = Field(..., examples=["Zip code is required"])


# ============================================================================
# STREAM EVENTS
# ============================================================================

class StatusEvent(BaseModel):
    """Cosmetic progress notification."""
    type: Literal["status"] = "status"
    message: str


class ErrorEvent(BaseModel):
    """Terminal failure notification."""
    type: Literal["error"] = "error"
    message: str


class CompleteEvent(BaseModel):
    """Terminal event carrying the full accumulated model text."""
    type: Literal["complete"] = "complete"
    content: str
    params: SearchParams


StreamEvent = Union[StatusEvent, ErrorEvent, CompleteEvent]
