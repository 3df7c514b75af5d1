"""
Search routes for the Shelf Taught front service
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from starlette.concurrency import run_in_threadpool

from shelftaught.config import Config
from shelftaught.controller import SearchController
from shelftaught.dependencies import get_client
from shelftaught.gateway import ApiGateway
from shelftaught.models import PageResponse, SuggestionsResponse
from shelftaught.query import SORT_OPTIONS
from shelftaught.suggestions import parse_suggestions

router = APIRouter()


@router.get("/search", response_model=PageResponse, tags=["Search"])
async def search_curricula(request: Request, gateway: ApiGateway = Depends(get_client)):
    """
    Search curricula by free text

    - **q**: The search text; without it the page stays idle
    - **page**, **sortBy**, **sortOrder** and filter keys as for `/browse`
    """
    controller = await run_in_threadpool(SearchController, gateway, "search", request.url.query)
    return PageResponse(**controller.snapshot())


@router.get("/search/suggestions", response_model=SuggestionsResponse, tags=["Search"])
async def search_suggestions(
    q: str = Query("", description="Partial search text"),
    limit: int = Query(Config.SUGGESTION_LIMIT, ge=1, le=20, description="Maximum suggestions"),
    gateway: ApiGateway = Depends(get_client),
):
    """
    Type-ahead suggestions

    Fewer than two characters never reach the backend.
    """
    if len(q) < Config.SUGGESTION_MIN_CHARS:
        return SuggestionsResponse(query=q, suggestions=[])

    result = await run_in_threadpool(gateway.get_search_suggestions, q, limit)
    return SuggestionsResponse(
        query=q,
        suggestions=parse_suggestions(result.data),
        degraded=result.degraded,
    )


@router.get("/search/filters", tags=["Search"])
async def search_filters(
    q: Optional[str] = Query(None, description="Restrict counts to this search"),
    gateway: ApiGateway = Depends(get_client),
):
    """Filter facets with counts, plus the sort dropdown options"""
    result = await run_in_threadpool(gateway.get_search_filters, q)
    data = (result.data or {}).get("data") or {}
    return {
        "filters": data.get("filters") or {},
        "sortOptions": [
            {"value": value, "label": label}
            for value, label in SORT_OPTIONS
            if q or not value.startswith("relevance")
        ],
        "degraded": result.degraded,
    }
