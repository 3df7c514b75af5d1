"""
Pydantic models for the Shelf Taught front service
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class ErrorResponse(BaseModel):
    """Model for error responses"""
    detail: Any
    error_type: str


class GatewayResult(BaseModel):
    """Payload returned by a gateway read, with its provenance"""
    data: Any = None
    source: Literal["network", "fallback"] = "network"
    cached: bool = False
    duration_ms: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.source == "fallback"


class FilterSelection(BaseModel):
    """Filter checkboxes selected on a browse or search page"""
    gradeLevels: List[str] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    teachingApproaches: List[str] = Field(default_factory=list)
    priceRanges: List[str] = Field(default_factory=list)
    availability: List[str] = Field(default_factory=list)


class PageResponse(BaseModel):
    """Rendered state of a browse or search page"""
    state: str
    url: str
    query: str = ""
    page: int
    sortBy: str
    sortOrder: str
    filters: FilterSelection
    totalCount: int = 0
    totalPages: int = 0
    pages: List[int] = Field(default_factory=list)
    results: List[Dict[str, Any]] = Field(default_factory=list)
    degraded: bool = False
    error: Optional[str] = None


class SuggestionModel(BaseModel):
    """Model for a type-ahead suggestion"""
    id: str
    text: str
    subtitle: Optional[str] = None
    type: str


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: List[SuggestionModel]
    degraded: bool = False


class CurriculumResponse(BaseModel):
    curriculum: Optional[Dict[str, Any]] = None
    url: Optional[str] = None
    canonicalUrl: Optional[str] = None
    degraded: bool = False


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None


class SaveCurriculumRequest(BaseModel):
    curriculumId: str
    personalNotes: Optional[str] = None


class CacheStatsResponse(BaseModel):
    size: int
    keys: List[str]


class ComparisonResponse(BaseModel):
    """Curricula laid side by side on the comparison page"""
    ids: List[str]
    url: str
    curricula: List[Dict[str, Any]] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    degraded: bool = False
    error: Optional[str] = None
