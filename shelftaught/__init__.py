"""
Shelf Taught front service package
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelftaught.cache import CacheSweeper
from shelftaught.config import Config, get_gateway
from shelftaught.dependencies import forget_session
from shelftaught.errors import AuthenticationExpired, GatewayError, ValidationFailed
from shelftaught.models import ErrorResponse
from shelftaught.routes.root import router as root_router
from shelftaught.routes.browse import router as browse_router
from shelftaught.routes.compare import router as compare_router
from shelftaught.routes.search import router as search_router
from shelftaught.routes.curriculum import router as curriculum_router
from shelftaught.routes.auth import router as auth_router
from shelftaught.routes.admin import router as admin_router

logger = logging.getLogger(__name__)


def _error(status_code: int, detail, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, error_type=error_type).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: periodic sweep of the cache the routes actually use
    gateway = app.dependency_overrides.get(get_gateway, get_gateway)()
    sweeper = CacheSweeper(gateway.cache, Config.CACHE_CLEANUP_INTERVAL)
    app.state.cache_sweeper = sweeper
    sweeper.start()
    try:
        yield
    finally:
        sweeper.stop()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    # Initialize FastAPI app
    app = FastAPI(
        title=Config.TITLE,
        description=Config.DESCRIPTION,
        version=Config.VERSION,
        docs_url=Config.DOCS_URL,
        redoc_url=Config.REDOC_URL,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.ALLOW_ORIGINS,
        allow_credentials=Config.ALLOW_CREDENTIALS,
        allow_methods=Config.ALLOW_METHODS,
        allow_headers=Config.ALLOW_HEADERS,
    )

    # Include routers
    app.include_router(root_router)
    app.include_router(browse_router)
    app.include_router(search_router)
    app.include_router(curriculum_router)
    app.include_router(compare_router)
    app.include_router(auth_router)
    app.include_router(admin_router)

    # Exception handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Custom HTTP exception handler"""
        return _error(exc.status_code, exc.detail, "HTTPException")

    @app.exception_handler(ValidationFailed)
    async def validation_handler(request: Request, exc: ValidationFailed):
        return _error(400, {"message": exc.message, "field": exc.field}, "ValidationFailed")

    @app.exception_handler(AuthenticationExpired)
    async def auth_expired_handler(request: Request, exc: AuthenticationExpired):
        response = _error(401, {"message": exc.message, "redirect": exc.redirect_to}, "AuthenticationExpired")
        forget_session(response)
        return response

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        status = exc.status_code if exc.status_code and 400 <= exc.status_code < 600 else 502
        logger.warning("Upstream call failed (%s): %s", status, exc.message)
        return _error(status, exc.message, "GatewayError")

    return app
