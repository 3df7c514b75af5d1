"""Search/filter/sort controller for the browse and search pages.

One controller instance drives one page. Every action updates the query
state, mirrors it into the page URL and re-fetches through the gateway.
Fetches are numbered; a result that resolves after a newer fetch started
is dropped instead of overwriting the newer view.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Union

from shelftaught.config import Config
from shelftaught.errors import AuthenticationExpired, GatewayError, ValidationFailed
from shelftaught.gateway import ApiGateway
from shelftaught.models import FilterSelection, GatewayResult
from shelftaught.query import FILTER_KEYS, SearchQueryState, parse_sort_option

logger = logging.getLogger(__name__)


class PageState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class SearchController:
    def __init__(
        self,
        gateway: ApiGateway,
        mode: str = "browse",
        url_query: str = "",
        items_per_page: int = Config.ITEMS_PER_PAGE,
        on_url_change: Optional[Callable[[str], None]] = None,
        autoload: bool = True,
    ):
        if mode not in ("browse", "search"):
            raise ValueError(f"Unknown page mode '{mode}'")
        self.gateway = gateway
        self.mode = mode
        self.items_per_page = items_per_page
        self.on_url_change = on_url_change

        self.state = PageState.IDLE
        self.results: List[Dict[str, Any]] = []
        self.total_count = 0
        self.error: Optional[str] = None
        self.degraded = False
        self.scroll_to_top = False
        self.history: List[str] = []

        self._generation = 0
        self._lock = Lock()

        self.query_state = SearchQueryState.from_query_string(url_query, mode)
        self._push_url()
        if autoload:
            self.refresh()

    # ==================== URL ====================

    @property
    def url(self) -> str:
        return f"/{self.mode}?{self.query_state.to_query_string()}"

    def _push_url(self) -> None:
        url = self.url
        if not self.history or self.history[-1] != url:
            self.history.append(url)
        if self.on_url_change is not None:
            self.on_url_change(url)

    def navigate(self, url_query: str) -> None:
        """Rebuild state from an external URL change and reload."""
        self.query_state = SearchQueryState.from_query_string(url_query, self.mode)
        self._push_url()
        self.refresh()

    def back(self) -> bool:
        if len(self.history) < 2:
            return False
        self.history.pop()
        previous = self.history.pop()
        self.navigate(previous.partition("?")[2])
        return True

    # ==================== Actions ====================

    def _update(self, **changes: Any) -> None:
        self.query_state = self.query_state.model_copy(update=changes)
        self._push_url()
        self.refresh()

    def set_query(self, text: str) -> None:
        self.scroll_to_top = False
        self._update(query=(text or "").strip(), page=1)

    def set_filters(self, filters: Union[FilterSelection, Dict[str, List[str]]]) -> None:
        if not isinstance(filters, FilterSelection):
            filters = FilterSelection(**filters)
        self.scroll_to_top = False
        self._update(filters=filters, page=1)

    def toggle_filter(self, key: str, value: str) -> None:
        if key not in FILTER_KEYS:
            raise ValidationFailed(f"Unknown filter '{key}'", field=key)
        selected = list(getattr(self.query_state.filters, key))
        if value in selected:
            selected.remove(value)
        else:
            selected.append(value)
        self.set_filters(self.query_state.filters.model_copy(update={key: selected}))

    def set_sort(self, sort_by: str, sort_order: Optional[str] = None) -> None:
        """Change ordering; accepts ``("rating", "desc")`` or ``("rating-desc",)``."""
        if sort_order is None:
            sort_by, sort_order = parse_sort_option(sort_by)
        else:
            parse_sort_option(f"{sort_by}-{sort_order}")
        self.scroll_to_top = False
        self._update(sort_by=sort_by, sort_order=sort_order)

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValidationFailed("Page must be 1 or greater", field="page")
        self.scroll_to_top = True
        self._update(page=page)

    def retry(self) -> None:
        self.refresh()

    # ==================== Fetching ====================

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _fetch(self) -> GatewayResult:
        params = self.query_state.to_request_params(self.items_per_page)
        if self.mode == "search":
            return self.gateway.search_curricula(self.query_state.query, params)
        return self.gateway.get_curricula(params)

    def refresh(self) -> bool:
        """Fetch the current view. Returns False when the result was discarded."""
        if self.mode == "search" and not self.query_state.query:
            self._next_generation()
            self.state = PageState.IDLE
            self.results, self.total_count = [], 0
            self.error = None
            self.degraded = False
            return True

        generation = self._next_generation()
        self.state = PageState.LOADING
        self.error = None
        try:
            result = self._fetch()
        except AuthenticationExpired:
            raise
        except GatewayError as e:
            if not self._is_current(generation):
                return False
            logger.error("Failed to load %s page: %s", self.mode, e.message)
            self.state = PageState.ERROR
            self.error = "Failed to search curricula" if self.mode == "search" else "Failed to load curricula"
            return True

        if not self._is_current(generation):
            logger.debug("Discarding stale %s result (generation %d)", self.mode, generation)
            return False
        self._apply(result)
        return True

    def _apply(self, result: GatewayResult) -> None:
        payload = result.data if isinstance(result.data, dict) else {}
        if self.mode == "search":
            items = payload.get("data") or []
            total = payload.get("total") or 0
        else:
            data = payload.get("data") or {}
            items = data.get("curricula") or []
            total = (data.get("pagination") or {}).get("totalCount") or 0

        self.results = list(items)
        self.total_count = int(total)
        self.degraded = result.degraded
        self.state = PageState.LOADED

    # ==================== Pagination ====================

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.items_per_page) if self.total_count else 0

    @property
    def has_previous(self) -> bool:
        return self.query_state.page > 1

    @property
    def has_next(self) -> bool:
        return self.query_state.page < self.total_pages

    def page_numbers(self) -> List[int]:
        """Up to five page links, starting two before the current page."""
        start = max(1, self.query_state.page - 2)
        return [n for n in range(start, start + 5) if n <= self.total_pages]

    def snapshot(self) -> Dict[str, Any]:
        qs = self.query_state
        return {
            "state": self.state.value,
            "url": self.url,
            "query": qs.query,
            "page": qs.page,
            "sortBy": qs.sort_by,
            "sortOrder": qs.sort_order,
            "filters": qs.filters,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
            "pages": self.page_numbers(),
            "results": self.results,
            "degraded": self.degraded,
            "error": self.error,
        }
