"""
Pydantic schemas for the results view endpoint.

POST /api/results/view applies the results page rules (hide past events,
cost/access filters, sort, "load more" paging) to a result list the
client already holds. Nothing is stored server-side.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from naloxone_finder.schemas.search import ResultEntry

SortOption = Literal["date", "distance", "relevance"]
CostFilter = Literal["all", "free", "paid"]
AccessFilter = Literal["all", "online", "physical"]


class ResultsViewRequest(BaseModel):
    """Result list plus the view state selected on the results page."""
    model_config = ConfigDict(populate_by_name=True)

    results: List[ResultEntry] = Field(default_factory=list)
    sort_by: SortOption = Field("date", alias="sortBy")
    cost: CostFilter = "all"
    access: AccessFilter = "all"
    page: int = Field(1, ge=1, description="Number of pages loaded so far (1 + \"load more\" clicks)")
    page_size: int = Field(10, alias="pageSize", ge=1, le=100)


class ResultViewEntry(ResultEntry):
    """A result entry with the shortened labels shown on result cards."""
    model_config = ConfigDict(populate_by_name=True)

    short_location: Optional[str] = Field(
        None,
        alias="shortLocation",
        description="City part of the location",
        examples=["San Francisco"]
    )
    short_distance: Optional[str] = Field(
        None,
        alias="shortDistance",
        examples=["3 mi"]
    )


class ResultsView(BaseModel):
    """Arranged results, all pages loaded so far."""
    model_config = ConfigDict(populate_by_name=True)

    results: List[ResultViewEntry] = Field(default_factory=list)
    total: int = Field(..., description="Entries left after filtering, across all pages")
    page: int
    page_size: int = Field(..., alias="pageSize")
    has_more: bool = Field(..., alias="hasMore")
    next_after_date: Optional[date] = Field(
        None,
        alias="nextAfterDate",
        description="afterDate to send with the next search to load more events"
    )
