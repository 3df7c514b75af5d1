"""
Curriculum detail and saved-curricula routes for the Shelf Taught front service
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from starlette.concurrency import run_in_threadpool

from shelftaught.dependencies import get_client, require_login
from shelftaught.gateway import ApiGateway, curriculum_from_payload
from shelftaught.models import CurriculumResponse, SaveCurriculumRequest
from shelftaught.urls import create_curriculum_url, get_canonical_url

router = APIRouter()


@router.get("/curriculum/{curriculum_id}", response_model=CurriculumResponse, tags=["Curriculum"])
async def get_curriculum(
    curriculum_id: str = Path(..., description="Curriculum identifier"),
    client: ApiGateway = Depends(get_client),
):
    """
    Get a single curriculum

    - **curriculum_id**: The id from a browse or search result
    """
    result = await run_in_threadpool(client.get_curriculum, curriculum_id)
    curriculum = curriculum_from_payload(result.data)
    if curriculum is None:
        raise HTTPException(status_code=404, detail="Curriculum not found")

    url = create_curriculum_url(curriculum_id, curriculum.get("name"), curriculum.get("publisher"))
    return CurriculumResponse(
        curriculum=curriculum,
        url=url,
        canonicalUrl=get_canonical_url(url),
        degraded=result.degraded,
    )


@router.get("/saved", tags=["Saved"])
async def list_saved(client: ApiGateway = Depends(require_login)):
    """Curricula bookmarked by the logged-in user"""
    return await run_in_threadpool(client.get_saved_curricula)


@router.post("/saved", tags=["Saved"])
async def save_curriculum(body: SaveCurriculumRequest, client: ApiGateway = Depends(require_login)):
    return await run_in_threadpool(client.save_curriculum, body.curriculumId, body.personalNotes)


@router.delete("/saved/{saved_id}", tags=["Saved"])
async def remove_saved(
    saved_id: str = Path(..., description="Saved curriculum identifier"),
    client: ApiGateway = Depends(require_login),
):
    return await run_in_threadpool(client.remove_saved_curriculum, saved_id)
