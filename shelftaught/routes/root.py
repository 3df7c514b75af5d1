"""
Root, health and cache diagnostic routes for the Shelf Taught front service
"""

from fastapi import APIRouter, Depends

from shelftaught.config import Config, get_gateway
from shelftaught.dependencies import get_client
from shelftaught.gateway import ApiGateway
from shelftaught.models import CacheStatsResponse

router = APIRouter()


@router.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Shelf Taught",
        "backend": Config.API_BASE_URL,
        "version": Config.VERSION,
        "docs": Config.DOCS_URL,
        "endpoints": {
            "browse": "/browse?page=1&sortBy=rating&sortOrder=desc",
            "search": "/search?q=math",
            "suggestions": "/search/suggestions?q=sa",
            "curriculum": "/curriculum/{id}",
            "compare": "/compare?ids=1,4",
            "categories": "/categories",
        }
    }


@router.get("/health", tags=["Health"])
async def health_check(client: ApiGateway = Depends(get_client)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "backend": client.base_url,
        "authenticated": client.session.is_authenticated,
        "cachedEntries": len(client.cache),
    }


@router.get("/cache/stats", response_model=CacheStatsResponse, tags=["Cache"])
async def cache_stats(gateway: ApiGateway = Depends(get_gateway)):
    """Entry count and keys of the response cache"""
    return CacheStatsResponse(**gateway.cache.get_stats())


@router.delete("/cache", tags=["Cache"])
async def clear_cache(gateway: ApiGateway = Depends(get_gateway)):
    gateway.clear_cache()
    return {"cleared": True}
