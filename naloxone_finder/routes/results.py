"""
Results view endpoint.

Endpoints:
- POST /api/results/view: filter, sort and page a result list held by the client
"""

from fastapi import APIRouter

from naloxone_finder.schemas.results import ResultsView, ResultsViewRequest
from naloxone_finder.services import build_results_view
from naloxone_finder.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/results", tags=["results"])


@router.post(
    "/view",
    response_model=ResultsView,
    response_model_exclude_none=True,
    status_code=200,
    summary="Arrange search results for display",
    description=(
        "Hides past events, applies the free/paid and online/physical filters, "
        "sorts by date, distance or relevance and returns the requested page. "
        "`nextAfterDate` is the afterDate to search with for more events."
    ),
)
async def results_view_endpoint(request: ResultsViewRequest) -> ResultsView:
    logger.debug(
        f"POST /api/results/view called with {len(request.results)} results, "
        f"sortBy={request.sort_by}, page={request.page}"
    )
    return build_results_view(request)
