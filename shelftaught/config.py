"""
Configuration and gateway setup for the Shelf Taught front service
"""

import os
from functools import lru_cache


class Config:
    """Application configuration"""

    # API settings
    TITLE = "Shelf Taught"
    DESCRIPTION = "Browse, search and compare homeschool curricula"
    VERSION = "1.0.0"
    DOCS_URL = "/docs"
    REDOC_URL = "/redoc"

    # CORS settings
    ALLOW_ORIGINS = ["*"]
    ALLOW_CREDENTIALS = True
    ALLOW_METHODS = ["*"]
    ALLOW_HEADERS = ["*"]

    # Server settings
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8000"))
    RELOAD = os.getenv("RELOAD", "true").lower() == "true"

    # Upstream REST backend
    API_BASE_URL = os.getenv("SHELFTAUGHT_API_URL", "http://localhost:3001/api")
    SITE_URL = os.getenv("SHELFTAUGHT_SITE_URL", "https://shelftaught.com")
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

    # When false, read failures propagate instead of degrading to fallback data
    FALLBACK_ENABLED = os.getenv("FALLBACK_ENABLED", "true").lower() == "true"

    # Slug-based curriculum URLs are disabled until the backend resolves slugs again
    SLUG_URLS = os.getenv("SLUG_URLS", "false").lower() == "true"

    # Cache TTLs (seconds)
    DEFAULT_TTL = 5 * 60
    CURRICULA_TTL = 2 * 60
    CURRICULUM_TTL = 10 * 60
    SEARCH_TTL = 60
    SUGGESTIONS_TTL = 5 * 60
    FILTERS_TTL = 5 * 60
    CATEGORIES_TTL = 30 * 60
    FALLBACK_TTL = 30
    CACHE_CLEANUP_INTERVAL = int(os.getenv("CACHE_CLEANUP_INTERVAL", str(10 * 60)))

    # Search/browse behaviour
    ITEMS_PER_PAGE = 12
    SUGGESTION_LIMIT = 8
    SUGGESTION_MIN_CHARS = 2
    SUGGESTION_DEBOUNCE_SECONDS = 0.3

    # Local-storage style session keys
    TOKEN_KEY = "authToken"
    USER_KEY = "userData"
    LOGIN_PATH = "/login"


def get_gateway():
    """Get the process-wide API gateway

    The gateway owns the HTTP pool and the response cache, so every route
    must share the same instance. Callers' credentials are attached per
    request, see ``shelftaught.dependencies``.
    """
    return _get_cached_gateway()


@lru_cache(maxsize=1)
def _get_cached_gateway():
    """Create a single gateway instance per process.

    This allows connection pooling inside the gateway's requests.Session
    and keeps one cache for the whole process.
    """
    from shelftaught.gateway import ApiGateway

    return ApiGateway()
