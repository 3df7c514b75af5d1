"""Authenticated session used for outgoing backend calls.

The token and user live in a string key/value store under the same keys
the browser build kept in localStorage (``authToken`` and ``userData``),
so a persisted store can be shared with other tools.
"""

from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Any, Callable, Dict, List, MutableMapping, Optional

from shelftaught.config import Config

logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(
        self,
        store: Optional[MutableMapping[str, str]] = None,
        token_key: str = Config.TOKEN_KEY,
        user_key: str = Config.USER_KEY,
    ):
        self._store: MutableMapping[str, str] = store if store is not None else {}
        self._token_key = token_key
        self._user_key = user_key
        self._lock = RLock()
        self._logout_listeners: List[Callable[[], None]] = []

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._store.get(self._token_key) or None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._store.get(self._user_key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable %s entry", self._user_key)
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        user = self.user or {}
        return user.get("role") == "admin"

    def login(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            self._store[self._token_key] = token
            if user is not None:
                self._store[self._user_key] = json.dumps(user)

    def logout(self) -> None:
        with self._lock:
            had_token = self._token_key in self._store
            self._store.pop(self._token_key, None)
            self._store.pop(self._user_key, None)
            listeners = list(self._logout_listeners)
        if had_token:
            logger.info("Session ended")
        for listener in listeners:
            listener()

    def on_logout(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self._logout_listeners.append(listener)

    def auth_headers(self) -> Dict[str, str]:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}
