"""Utility functions for the Shelf Taught front service."""

from __future__ import annotations

import logging
import re
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shelftaught.errors import ValidationFailed

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def build_http_session() -> requests.Session:
    """requests session with connection pooling and retries switched off.

    A failed read degrades to fallback data on the first attempt, so the
    adapter must not retry behind the gateway's back.
    """
    session = requests.Session()
    retry = Retry(total=0, connect=0, read=0, redirect=3, raise_on_status=False)
    adapter = HTTPAdapter(pool_connections=20, pool_maxsize=20, max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    return session


class Timing:
    def __init__(self) -> None:
        self.duration_ms: float = 0.0


@contextmanager
def measure(name: str) -> Iterator[Timing]:
    """Time the enclosed block and log the duration at debug level."""
    timing = Timing()
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.duration_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("%s took %.1f ms", name, timing.duration_ms)


def metric_name(endpoint: str) -> str:
    """Turn ``/search/suggestions`` into ``api-search-suggestions``."""
    return "api" + endpoint.replace("/", "-")


def _text(value: Any, field: str, label: str) -> str:
    """Stripped string value of a form field; non-strings are rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailed(f"{label} must be text", field=field)
    return value.strip()


def validate_credentials(email: Any, password: Any) -> None:
    email = _text(email, "email", "Email")
    if not email:
        raise ValidationFailed("Email is required", field="email")
    if not _EMAIL_RE.match(email):
        raise ValidationFailed("Please enter a valid email address", field="email")
    if not isinstance(password, (str, type(None))):
        raise ValidationFailed("Password must be text", field="password")
    if not password:
        raise ValidationFailed("Password is required", field="password")


def validate_registration(data: Dict[str, Any]) -> None:
    validate_credentials(data.get("email"), data.get("password"))
    if len(data["password"]) < 8:
        raise ValidationFailed("Password must be at least 8 characters long", field="password")
    for field, label in (("firstName", "First name"), ("lastName", "Last name")):
        if not _text(data.get(field), field, label):
            raise ValidationFailed(f"{label} is required", field=field)


def validate_curriculum(data: Dict[str, Any], partial: bool = False) -> None:
    """Checks the admin curriculum form before it is sent."""
    for field in ("name", "publisher"):
        if field in data or not partial:
            if not _text(data.get(field), field, field.capitalize()):
                raise ValidationFailed(f"{field.capitalize()} is required", field=field)
    rating = data.get("overallRating")
    if rating is not None:
        try:
            value = float(rating)
        except (TypeError, ValueError):
            raise ValidationFailed("Overall rating must be a number", field="overallRating")
        if not 0 <= value <= 5:
            raise ValidationFailed("Overall rating must be between 0 and 5", field="overallRating")
