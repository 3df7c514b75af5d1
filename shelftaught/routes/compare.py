"""
Curriculum comparison route for the Shelf Taught front service
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from starlette.concurrency import run_in_threadpool

from shelftaught.dependencies import get_client
from shelftaught.errors import AuthenticationExpired, GatewayError, ValidationFailed
from shelftaught.gateway import ApiGateway, curriculum_from_payload
from shelftaught.models import ComparisonResponse
from shelftaught.urls import create_compare_url, parse_compare_ids

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/compare", response_model=ComparisonResponse, tags=["Curriculum"])
async def compare_curricula(
    ids: Optional[str] = Query(None, description="Comma-separated curriculum ids"),
    remove: Optional[str] = Query(None, description="Id to take off the comparison"),
    client: ApiGateway = Depends(get_client),
):
    """
    Compare curricula side by side

    - **ids**: e.g. `1,4,9`; each id is read through the cached detail lookup
    - **remove**: drop one id; the returned `url` is the rewritten page URL,
      or `/browse` once nothing is left
    """
    selected = parse_compare_ids(ids)
    if not selected:
        raise ValidationFailed("No curricula selected for comparison", field="ids")

    if remove is not None:
        selected = [i for i in selected if i != remove.strip()]
        if not selected:
            return ComparisonResponse(ids=[], url="/browse")

    url = create_compare_url(selected)
    try:
        # Gateway calls are blocking (requests); fan out in the threadpool.
        results = await asyncio.gather(
            *(run_in_threadpool(client.get_curriculum, curriculum_id) for curriculum_id in selected)
        )
    except AuthenticationExpired:
        raise
    except GatewayError as e:
        logger.error("Failed to load curricula for comparison: %s", e.message)
        return ComparisonResponse(ids=selected, url=url, error="Failed to load curricula for comparison")

    curricula, missing = [], []
    for curriculum_id, result in zip(selected, results):
        curriculum = curriculum_from_payload(result.data)
        if curriculum is None:
            missing.append(curriculum_id)
        else:
            curricula.append(curriculum)

    return ComparisonResponse(
        ids=selected,
        url=url,
        curricula=curricula,
        missing=missing,
        degraded=any(result.degraded for result in results),
    )
