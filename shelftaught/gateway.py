"""Client for the Shelf Taught REST backend.

Reads go through the TTL cache and degrade to the fallback dataset when
the backend cannot answer. Mutations are never cached and never masked:
their failures always reach the caller.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from shelftaught import fallback
from shelftaught.cache import MISSING, TTLCache, cache_key, clean_params
from shelftaught.config import Config
from shelftaught.errors import AuthenticationExpired, GatewayError
from shelftaught.models import GatewayResult
from shelftaught.session import AuthSession
from shelftaught.utils import (
    build_http_session,
    measure,
    metric_name,
    validate_credentials,
    validate_curriculum,
    validate_registration,
)

logger = logging.getLogger(__name__)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return f"Request failed with status code {response.status_code}"


def _wire_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop empty values and send lists with the ``key[]`` convention."""
    cleaned = clean_params(params)
    if not cleaned:
        return None
    wire: Dict[str, Any] = {}
    for key, value in cleaned.items():
        if isinstance(value, (list, tuple)):
            wire[f"{key}[]"] = list(value)
        else:
            wire[key] = value
    return wire


def curriculum_from_payload(payload: Any) -> Optional[Dict[str, Any]]:
    """Extract a curriculum from either the current or the legacy detail shape."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if isinstance(data, dict):
        if "curriculum" in data:
            return data["curriculum"]
        if "id" in data:
            return data
    curriculum = payload.get("curriculum")
    return curriculum if isinstance(curriculum, dict) else None


class ApiGateway:
    def __init__(
        self,
        base_url: str = Config.API_BASE_URL,
        http: Optional[requests.Session] = None,
        cache: Optional[TTLCache] = None,
        session: Optional[AuthSession] = None,
        fallback_enabled: bool = Config.FALLBACK_ENABLED,
        timeout: float = Config.REQUEST_TIMEOUT_SECONDS,
        on_unauthorized: Optional[Callable[[str], None]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else build_http_session()
        self.cache: TTLCache = cache if cache is not None else TTLCache(default_ttl=Config.DEFAULT_TTL)
        self.session = session if session is not None else AuthSession()
        self.fallback_enabled = fallback_enabled
        self.timeout = timeout
        self.on_unauthorized = on_unauthorized

    def for_session(self, session: AuthSession) -> "ApiGateway":
        """A gateway acting for ``session`` that shares this one's HTTP pool and cache."""
        view = copy.copy(self)
        view.session = session
        return view

    # ==================== Transport ====================

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.http.request(
                method,
                url,
                params=_wire_params(params),
                json=json,
                headers=self.session.auth_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"{method} {endpoint} failed: {e}") from e

        if response.status_code == 401:
            self._handle_unauthorized()
            raise AuthenticationExpired(_error_message(response), redirect_to=Config.LOGIN_PATH)
        if response.status_code >= 400:
            raise GatewayError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"{method} {endpoint} returned invalid JSON", response.status_code) from e

    def _handle_unauthorized(self) -> None:
        logger.info("Backend answered 401; ending session")
        self.session.logout()
        if self.on_unauthorized is not None:
            self.on_unauthorized(Config.LOGIN_PATH)

    def _cached_get(self, endpoint: str, params: Optional[Dict[str, Any]], ttl: float) -> GatewayResult:
        key = cache_key(endpoint, params)
        hit = self.cache.get(key)
        if hit is not MISSING:
            logger.debug("cache hit %s", key)
            return hit.model_copy(update={"cached": True})

        try:
            with measure(metric_name(endpoint)) as timing:
                data = self._request("GET", endpoint, params=params)
        except AuthenticationExpired:
            raise
        except GatewayError as e:
            if not self.fallback_enabled:
                raise
            logger.warning("GET %s failed (%s); serving fallback data", endpoint, e.message)
            result = GatewayResult(data=fallback.respond(endpoint, params), source="fallback")
            self.cache.set(key, result, Config.FALLBACK_TTL)
            return result

        result = GatewayResult(data=data, source="network", duration_ms=timing.duration_ms)
        self.cache.set(key, result, ttl)
        return result

    # ==================== Cached reads ====================

    def get_curricula(self, params: Optional[Dict[str, Any]] = None) -> GatewayResult:
        return self._cached_get("/curricula", params, Config.CURRICULA_TTL)

    def get_curriculum(self, curriculum_id: str) -> GatewayResult:
        return self._cached_get(f"/curricula/{curriculum_id}", None, Config.CURRICULUM_TTL)

    def search_curricula(self, query: str, params: Optional[Dict[str, Any]] = None) -> GatewayResult:
        return self._cached_get("/search", {"q": query, **(params or {})}, Config.SEARCH_TTL)

    def get_search_suggestions(self, query: str, limit: Optional[int] = None) -> GatewayResult:
        return self._cached_get("/search/suggestions", {"q": query, "limit": limit}, Config.SUGGESTIONS_TTL)

    def get_search_filters(self, query: Optional[str] = None) -> GatewayResult:
        return self._cached_get("/search/filters", {"q": query} if query else None, Config.FILTERS_TTL)

    def get_categories(self) -> GatewayResult:
        return self._cached_get("/categories", None, Config.CATEGORIES_TTL)

    # ==================== Auth ====================

    def login(self, email: str, password: str) -> Dict[str, Any]:
        validate_credentials(email, password)
        payload = self._request("POST", "/auth/login", json={"email": email.strip(), "password": password})
        self._start_session(payload)
        return payload

    def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validate_registration(data)
        payload = self._request("POST", "/auth/register", json=data)
        self._start_session(payload)
        return payload

    def _start_session(self, payload: Any) -> None:
        data = payload.get("data") if isinstance(payload, dict) else None
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise GatewayError("Authentication response did not include a token")
        self.session.login(token, data.get("user"))

    def logout(self) -> None:
        self.session.logout()

    # ==================== Saved curricula ====================

    def get_saved_curricula(self) -> Any:
        return self._request("GET", "/user/saved")

    def save_curriculum(self, curriculum_id: str, personal_notes: Optional[str] = None) -> Any:
        body: Dict[str, Any] = {"curriculumId": curriculum_id}
        if personal_notes is not None:
            body["personalNotes"] = personal_notes
        return self._request("POST", "/user/saved", json=body)

    def remove_saved_curriculum(self, saved_id: str) -> Any:
        return self._request("DELETE", f"/user/saved/{saved_id}")

    # ==================== Admin ====================

    def create_curriculum(self, data: Dict[str, Any]) -> Any:
        validate_curriculum(data)
        result = self._request("POST", "/admin/curricula", json=data)
        self._invalidate_listings()
        return result

    def update_curriculum(self, curriculum_id: str, data: Dict[str, Any]) -> Any:
        validate_curriculum(data, partial=True)
        result = self._request("PUT", f"/admin/curricula/{curriculum_id}", json=data)
        self._invalidate_listings()
        return result

    def delete_curriculum(self, curriculum_id: str) -> Any:
        result = self._request("DELETE", f"/admin/curricula/{curriculum_id}")
        self._invalidate_listings()
        return result

    def get_analytics(self) -> Any:
        return self._request("GET", "/admin/analytics")

    def _invalidate_listings(self) -> None:
        dropped: List[int] = [self.cache.delete_prefix(p) for p in ("/curricula", "/search")]
        logger.debug("Invalidated %d cached listing entries", sum(dropped))

    # ==================== Cache management ====================

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("API cache cleared")
