"""Query state shared by the browse and search pages.

Everything that affects the visible result set lives in
``SearchQueryState`` and round-trips through the page URL, so a link or
the back button always reconstructs the same view.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel, Field, field_validator

from shelftaught.errors import ValidationFailed
from shelftaught.models import FilterSelection

SORT_FIELDS = ("relevance", "rating", "name", "publisher", "createdAt", "popularity", "cost")
SORT_ORDERS = ("asc", "desc")

# Dropdown options: (value, label)
SORT_OPTIONS: List[Tuple[str, str]] = [
    ("relevance-desc", "Most Relevant"),
    ("rating-desc", "Highest Rated"),
    ("rating-asc", "Lowest Rated"),
    ("popularity-desc", "Most Popular"),
    ("name-asc", "Name A-Z"),
    ("name-desc", "Name Z-A"),
    ("publisher-asc", "Publisher A-Z"),
    ("cost-asc", "Price: Low to High"),
    ("cost-desc", "Price: High to Low"),
    ("createdAt-desc", "Newest First"),
    ("createdAt-asc", "Oldest First"),
]

FILTER_KEYS = ("gradeLevels", "subjects", "teachingApproaches", "priceRanges", "availability")

# URL filter key -> backend query param
REQUEST_FILTER_PARAMS = {
    "subjects": "subjects",
    "gradeLevels": "gradeLevel",
    "teachingApproaches": "teachingApproach",
    "priceRanges": "priceRange",
    "availability": "availability",
}

DEFAULT_SORT = {
    "browse": ("rating", "desc"),
    "search": ("relevance", "desc"),
}


def parse_sort_option(value: str) -> Tuple[str, str]:
    """Split a dropdown value such as ``rating-desc``."""
    sort_by, _, sort_order = (value or "").rpartition("-")
    if sort_by not in SORT_FIELDS or sort_order not in SORT_ORDERS:
        raise ValidationFailed(f"Unknown sort option '{value}'", field="sort")
    return sort_by, sort_order


def _first(values: Dict[str, List[str]], key: str) -> str:
    found = values.get(key)
    return found[0] if found else ""


class SearchQueryState(BaseModel):
    query: str = ""
    page: int = 1
    sort_by: str = "rating"
    sort_order: str = "desc"
    filters: FilterSelection = Field(default_factory=FilterSelection)

    @field_validator("page")
    @classmethod
    def _page_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page must be >= 1")
        return v

    @field_validator("sort_by")
    @classmethod
    def _known_sort(cls, v: str) -> str:
        if v not in SORT_FIELDS:
            raise ValueError(f"unknown sort field '{v}'")
        return v

    @field_validator("sort_order")
    @classmethod
    def _known_order(cls, v: str) -> str:
        if v not in SORT_ORDERS:
            raise ValueError(f"unknown sort order '{v}'")
        return v

    @classmethod
    def from_query_string(cls, query_string: str, mode: str = "browse") -> "SearchQueryState":
        """Build state from a URL query string; bad values fall back to defaults."""
        values = parse_qs(query_string or "", keep_blank_values=False)
        default_by, default_order = DEFAULT_SORT.get(mode, DEFAULT_SORT["browse"])

        try:
            page = max(1, int(_first(values, "page") or 1))
        except ValueError:
            page = 1
        sort_by = _first(values, "sortBy")
        sort_order = _first(values, "sortOrder")

        filters = FilterSelection(**{
            key: [v for v in values.get(key, []) if v.strip()] for key in FILTER_KEYS
        })
        return cls(
            query=_first(values, "q").strip(),
            page=page,
            sort_by=sort_by if sort_by in SORT_FIELDS else default_by,
            sort_order=sort_order if sort_order in SORT_ORDERS else default_order,
            filters=filters,
        )

    def to_query_string(self) -> str:
        pairs: List[Tuple[str, str]] = []
        if self.query:
            pairs.append(("q", self.query))
        pairs.append(("page", str(self.page)))
        pairs.append(("sortBy", self.sort_by))
        pairs.append(("sortOrder", self.sort_order))
        for key in FILTER_KEYS:
            pairs.extend((key, v) for v in getattr(self.filters, key))
        return urlencode(pairs)

    def to_request_params(self, limit: int) -> Dict[str, Any]:
        """Params for ``GET /curricula`` or ``GET /search`` (without ``q``)."""
        params: Dict[str, Any] = {
            "page": self.page,
            "limit": limit,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
        }
        for key, param in REQUEST_FILTER_PARAMS.items():
            selected = getattr(self.filters, key)
            if selected:
                params[param] = list(selected)
        return params

    @property
    def has_filters(self) -> bool:
        return any(getattr(self.filters, key) for key in FILTER_KEYS)

    @property
    def sort_option(self) -> str:
        return f"{self.sort_by}-{self.sort_order}"
