"""URL helpers for curriculum, search and browse pages."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from shelftaught.config import Config

_NON_SLUG = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_CURRICULUM_ID = re.compile(r"/curriculum/([^/?#]+)")
_SLUG = re.compile(r"^[a-z0-9-]+$")


def create_slug(text: str) -> str:
    slug = _NON_SLUG.sub("", text.lower().strip())
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def create_curriculum_url(
    curriculum_id: str,
    name: Optional[str] = None,
    publisher: Optional[str] = None,
    slugs: Optional[bool] = None,
) -> str:
    """Path of a curriculum detail page.

    Plain ``/curriculum/<id>`` unless slug URLs are switched on; the backend
    does not resolve slugs at the moment.
    """
    use_slugs = Config.SLUG_URLS if slugs is None else slugs
    if not use_slugs or not name:
        return f"/curriculum/{curriculum_id}"
    name_slug = create_slug(name)
    publisher_slug = create_slug(publisher) if publisher else ""
    full_slug = f"{name_slug}-by-{publisher_slug}" if publisher_slug else name_slug
    return f"/curriculum/{curriculum_id}/{full_slug}"


def create_search_url(query: str, filters: Optional[Dict[str, Any]] = None) -> str:
    pairs = []
    if query:
        pairs.append(("q", query))
    for key, value in (filters or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(v)) for v in value)
        else:
            pairs.append((key, str(value)))
    qs = urlencode(pairs)
    return f"/search?{qs}" if qs else "/search"


def create_browse_url(category: Optional[str] = None, grade: Optional[str] = None) -> str:
    """Browse link pre-filtered by subject and/or grade level."""
    pairs = []
    if category:
        pairs.append(("subjects", category))
    if grade:
        pairs.append(("gradeLevels", grade))
    qs = urlencode(pairs)
    return f"/browse?{qs}" if qs else "/browse"


def get_canonical_url(path: str, base_url: str = Config.SITE_URL) -> str:
    return f"{base_url.rstrip('/')}{path}"


def extract_id_from_url(url: str) -> Optional[str]:
    match = _CURRICULUM_ID.search(url)
    return match.group(1) if match else None


def is_valid_slug(slug: str) -> bool:
    return bool(_SLUG.match(slug))


def normalize_url(url: str) -> str:
    url = re.sub(r"/+", "/", url.lower())
    url = re.sub(r"/$", "", url)
    return re.sub(r"^/", "", url)


def parse_compare_ids(value: Optional[str]) -> List[str]:
    """Split ``?ids=a,b,c``; blanks and repeats are dropped, order is kept."""
    ids: List[str] = []
    for part in (value or "").split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)
    return ids


def create_compare_url(ids: List[str]) -> str:
    if not ids:
        return "/compare"
    return "/compare?ids=" + ",".join(quote(str(i), safe="") for i in ids)
