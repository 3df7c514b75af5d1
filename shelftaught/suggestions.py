"""Type-ahead suggestions for the search box.

Keystrokes restart a debounce timer so only the last pause triggers a
request. Inputs shorter than two characters never reach the backend.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

from shelftaught.config import Config
from shelftaught.errors import GatewayError
from shelftaught.gateway import ApiGateway
from shelftaught.models import SuggestionModel

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``func`` once ``delay`` seconds after the most recent ``call``."""

    def __init__(self, func: Callable[..., Any], delay: float = Config.SUGGESTION_DEBOUNCE_SECONDS):
        self.func = func
        self.delay = delay
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def call(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.func, args=args, kwargs=kwargs)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()


def parse_suggestions(payload: Any) -> List[SuggestionModel]:
    data = payload.get("data") if isinstance(payload, dict) else None
    raw = data.get("suggestions") if isinstance(data, dict) else None
    suggestions = []
    for item in raw or []:
        try:
            suggestions.append(SuggestionModel(
                id=str(item["id"]),
                text=item["text"],
                subtitle=item.get("subtitle") or "",
                type=item.get("type") or "curriculum",
            ))
        except (KeyError, TypeError):
            logger.debug("Skipping malformed suggestion %r", item)
    return suggestions


class SuggestionBox:
    """State of the search input and its suggestion dropdown."""

    def __init__(
        self,
        gateway: ApiGateway,
        on_search: Callable[[str], None],
        delay: float = Config.SUGGESTION_DEBOUNCE_SECONDS,
        limit: int = Config.SUGGESTION_LIMIT,
        min_chars: int = Config.SUGGESTION_MIN_CHARS,
        initial_value: str = "",
    ):
        self.gateway = gateway
        self.on_search = on_search
        self.limit = limit
        self.min_chars = min_chars

        self.text = initial_value
        self.suggestions: List[SuggestionModel] = []
        self.visible = False
        self.selected_index = -1
        self.loading = False
        self.focused = False
        self.degraded = False

        self._lock = threading.RLock()
        self._debouncer = Debouncer(self._fetch, delay)

    def type(self, text: str) -> None:
        with self._lock:
            self.text = text
            self.selected_index = -1
            if len(text) < self.min_chars:
                self._debouncer.cancel()
                self.suggestions = []
                self.visible = False
                return
        self._debouncer.call(text)

    def _fetch(self, text: str) -> None:
        with self._lock:
            if text != self.text:
                return
            self.loading = True
        try:
            result = self.gateway.get_search_suggestions(text, self.limit)
            suggestions = parse_suggestions(result.data)
            degraded = result.degraded
        except GatewayError as e:
            logger.error("Error fetching suggestions: %s", e.message)
            suggestions, degraded = [], False
        finally:
            with self._lock:
                self.loading = False

        with self._lock:
            if text != self.text:
                return
            self.suggestions = suggestions
            self.degraded = degraded
            self.visible = bool(suggestions)

    # ==================== Keyboard ====================

    def press(self, key: str) -> bool:
        """Handle a key on the input. Returns True when the key was consumed."""
        with self._lock:
            if not self.visible:
                if key == "Enter":
                    self.submit()
                    return True
                return False

            if key == "ArrowDown":
                if self.selected_index < len(self.suggestions) - 1:
                    self.selected_index += 1
                return True
            if key == "ArrowUp":
                self.selected_index = self.selected_index - 1 if self.selected_index > 0 else -1
                return True
            if key == "Enter":
                if 0 <= self.selected_index < len(self.suggestions):
                    self.choose(self.suggestions[self.selected_index])
                else:
                    self.submit()
                return True
            if key == "Escape":
                self._hide()
                self.focused = False
                return True
        return False

    def choose(self, suggestion: SuggestionModel) -> None:
        with self._lock:
            self.text = suggestion.text
            self._hide()
        self.on_search(suggestion.text)

    def submit(self) -> None:
        query = self.text.strip()
        if not query:
            return
        with self._lock:
            self._hide()
        self.on_search(query)

    def focus(self) -> None:
        with self._lock:
            self.focused = True
            if self.suggestions:
                self.visible = True

    def blur(self) -> None:
        with self._lock:
            self.focused = False
            self._hide()

    def _hide(self) -> None:
        self.visible = False
        self.selected_index = -1

    def close(self) -> None:
        self._debouncer.cancel()
