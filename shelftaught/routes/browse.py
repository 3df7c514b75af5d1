"""
Browse routes for the Shelf Taught front service
"""

from fastapi import APIRouter, Depends, Request

from starlette.concurrency import run_in_threadpool

from shelftaught.controller import SearchController
from shelftaught.dependencies import get_client
from shelftaught.gateway import ApiGateway
from shelftaught.models import PageResponse

router = APIRouter()


@router.get("/browse", response_model=PageResponse, tags=["Discovery"])
async def browse_curricula(request: Request, gateway: ApiGateway = Depends(get_client)):
    """
    Browse curricula with pagination, sorting and filters

    - **page**: Page number (defaults to 1)
    - **sortBy** / **sortOrder**: e.g. `rating` / `desc`
    - **subjects**, **gradeLevels**, **teachingApproaches**, **priceRanges**,
      **availability**: repeat the key once per selected value
    """
    # Gateway calls are blocking (requests); run in threadpool.
    controller = await run_in_threadpool(SearchController, gateway, "browse", request.url.query)
    return PageResponse(**controller.snapshot())


@router.get("/categories", tags=["Discovery"])
async def get_categories(gateway: ApiGateway = Depends(get_client)):
    """Subjects and grade levels used to build filter menus"""
    result = await run_in_threadpool(gateway.get_categories)
    data = (result.data or {}).get("data") or {}
    return {
        "subjects": data.get("subjects") or [],
        "gradeLevels": data.get("gradeLevels") or [],
        "degraded": result.degraded,
    }
