"""
Admin curriculum management routes for the Shelf Taught front service

Failures from these endpoints are always reported; nothing here is
replaced with a locally invented success.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from starlette.concurrency import run_in_threadpool

from shelftaught.dependencies import require_login
from shelftaught.gateway import ApiGateway

router = APIRouter(prefix="/admin", tags=["Admin"])


def require_admin(gateway: ApiGateway = Depends(require_login)) -> ApiGateway:
    # the backend checks the role again on every admin call
    if not gateway.session.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return gateway


@router.post("/curricula")
async def create_curriculum(
    data: Dict[str, Any] = Body(...),
    gateway: ApiGateway = Depends(require_admin),
):
    return await run_in_threadpool(gateway.create_curriculum, data)


@router.put("/curricula/{curriculum_id}")
async def update_curriculum(
    curriculum_id: str = Path(..., description="Curriculum identifier"),
    data: Dict[str, Any] = Body(...),
    gateway: ApiGateway = Depends(require_admin),
):
    return await run_in_threadpool(gateway.update_curriculum, curriculum_id, data)


@router.delete("/curricula/{curriculum_id}")
async def delete_curriculum(
    curriculum_id: str = Path(..., description="Curriculum identifier"),
    gateway: ApiGateway = Depends(require_admin),
):
    return await run_in_threadpool(gateway.delete_curriculum, curriculum_id)


@router.get("/analytics")
async def analytics(gateway: ApiGateway = Depends(require_admin)):
    return await run_in_threadpool(gateway.get_analytics)
