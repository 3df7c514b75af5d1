"""Tiny in-process TTL cache.

Holds upstream responses keyed by request fingerprint so repeated reads
of the same listing, detail or search skip the network. This is
best-effort and resets when the process restarts.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class _Entry(Generic[T]):
    value: T
    stored_at: float
    expires_at: float


class TTLCache(Generic[T]):
    def __init__(self, default_ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._lock = RLock()
        self._data: Dict[str, _Entry[T]] = {}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        now = self._clock()
        ttl = self._default_ttl if ttl is None else max(0.0, float(ttl))
        with self._lock:
            self._data[key] = _Entry(value=value, stored_at=now, expires_at=now + ttl)

    def get(self, key: str) -> T:
        """Return the cached value, or ``MISSING`` when absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return MISSING
            if now > entry.expires_at:
                self._data.pop(key, None)
                return MISSING
            return entry.value

    def has(self, key: str) -> bool:
        return self.get(key) is not MISSING

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for k in doomed:
                del self._data[k]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def cleanup(self) -> int:
        """Evict every entry that is already past its expiry."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._data.items() if now > e.expires_at]
            for k in expired:
                del self._data[k]
        return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            keys: List[str] = list(self._data.keys())
        return {"size": len(keys), "keys": keys}

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop ``None``, empty strings and empty lists; they are never sent upstream."""
    return {k: v for k, v in (params or {}).items() if not _is_blank(v)}


def cache_key(endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Build a stable key from an endpoint and its query params.

    Keys are sorted and blank values dropped the same way they are dropped
    from the outgoing request, so two calls that send the same request
    share one entry whatever order their params were assembled in.
    """
    cleaned = clean_params(params)
    if not cleaned:
        return endpoint
    return endpoint + json.dumps(cleaned, sort_keys=True, separators=(",", ":"), default=str)


class CacheSweeper:
    """Background thread that runs ``cache.cleanup()`` on a fixed interval."""

    def __init__(self, cache: TTLCache, interval_seconds: float):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        logger.info("Starting cache sweeper (interval=%s sec)", self.interval_seconds)
        self._thread = threading.Thread(target=self._run, name="cache-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Cache sweeper stopped.")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                evicted = self.cache.cleanup()
                logger.debug("Cache sweep evicted %d entries", evicted)
            except Exception:
                logger.exception("Cache sweep failed")
