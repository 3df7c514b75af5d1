"""Fallback data used when the Shelf Taught backend cannot be reached.

Responses are shaped like the real endpoints so callers do not need a
second code path; the gateway marks them with ``source="fallback"``.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional

SUBJECTS: List[Dict[str, Any]] = [
    {"id": "1", "name": "Mathematics", "description": "Math curricula for all grade levels"},
    {"id": "2", "name": "Science", "description": "Science curricula including biology, chemistry, and physics"},
    {"id": "3", "name": "History", "description": "History and social studies curricula"},
    {"id": "4", "name": "Language Arts", "description": "Reading, phonics, writing and grammar curricula"},
    {"id": "5", "name": "Foreign Language", "description": "Foreign language learning curricula"},
    {"id": "6", "name": "Art", "description": "Art and creative curricula"},
]

GRADE_LEVELS: List[Dict[str, Any]] = [
    {"id": "1", "name": "PreK-K", "ageRange": "3-5 years"},
    {"id": "2", "name": "Elementary (1-5)", "ageRange": "6-10 years"},
    {"id": "3", "name": "Middle School (6-8)", "ageRange": "11-13 years"},
    {"id": "4", "name": "High School (9-12)", "ageRange": "14-18 years"},
]

_SUBJECTS_BY_NAME = {s["name"]: s for s in SUBJECTS}
_GRADES_BY_NAME = {g["name"]: g for g in GRADE_LEVELS}


def _curriculum(
    id: str,
    name: str,
    publisher: str,
    description: str,
    grade: str,
    subjects: Iterable[str],
    style: str,
    price_range: str,
    rating: float,
    reviews: int,
    created: str,
    in_print: bool = True,
    digital: bool = False,
    used_market: bool = True,
) -> Dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "publisher": publisher,
        "description": description,
        "imageUrl": "/images/placeholder.svg",
        "gradeLevel": dict(_GRADES_BY_NAME[grade]),
        "subjects": [{"id": _SUBJECTS_BY_NAME[s]["id"], "name": s} for s in subjects],
        "teachingApproach": {"style": style, "rating": round(rating)},
        "cost": {"priceRange": price_range, "rating": max(1, 6 - len(price_range))},
        "availability": {"inPrint": in_print, "digital": digital, "usedMarket": used_market},
        "overallRating": rating,
        "reviewCount": reviews,
        "createdAt": created,
    }


CURRICULA: List[Dict[str, Any]] = [
    _curriculum("1", "Saxon Math", "Saxon Publishers",
                "A comprehensive math curriculum that uses incremental development and continual review.",
                "Elementary (1-5)", ["Mathematics"], "Traditional", "$$", 4.1, 312, "2023-01-05T00:00:00Z"),
    _curriculum("2", "Teaching Textbooks", "Teaching Textbooks",
                "Self-teaching math curriculum with automated grading and built-in help system.",
                "Middle School (6-8)", ["Mathematics"], "Self-Directed", "$$", 4.3, 268, "2023-01-12T00:00:00Z",
                digital=True),
    _curriculum("3", "Math-U-See", "Demme Learning",
                "Mastery-based math using manipulatives and video lessons for each concept.",
                "Elementary (1-5)", ["Mathematics"], "Mastery-Based", "$$", 4.2, 201, "2023-02-01T00:00:00Z",
                digital=True),
    _curriculum("4", "Beast Academy", "Art of Problem Solving",
                "Comic-book guided math for curious problem solvers, with an online practice platform.",
                "Elementary (1-5)", ["Mathematics"], "Discovery", "$$", 4.7, 154, "2023-04-18T00:00:00Z",
                digital=True),
    _curriculum("5", "All About Reading", "All About Learning Press",
                "A multisensory, mastery-based reading program rooted in the Orton-Gillingham approach.",
                "PreK-K", ["Language Arts"], "Orton-Gillingham", "$$$", 4.6, 234, "2023-01-15T00:00:00Z",
                digital=True),
    _curriculum("6", "Explode the Code", "EPS/School Specialty",
                "A classic phonics workbook series that builds literacy skills in small steps.",
                "PreK-K", ["Language Arts"], "Traditional", "$", 3.8, 156, "2023-02-10T00:00:00Z",
                digital=True),
    _curriculum("7", "Reading Eggs", "Blake eLearning",
                "Game-based online reading lessons with progress tracking for ages 2 to 13.",
                "PreK-K", ["Language Arts"], "Digital/Interactive", "$", 4.2, 189, "2023-01-20T00:00:00Z",
                in_print=False, digital=True, used_market=False),
    _curriculum("8", "The Good and the Beautiful", "The Good and the Beautiful",
                "Open-and-go language arts that blends literature, phonics and character development.",
                "Elementary (1-5)", ["Language Arts", "Art"], "Literature-Based", "$", 4.3, 298,
                "2023-03-01T00:00:00Z"),
    _curriculum("9", "Apologia Science", "Apologia Educational Ministries",
                "Creation-based science curriculum with hands-on experiments and detailed explanations.",
                "Middle School (6-8)", ["Science"], "Traditional", "$$$", 4.5, 221, "2023-01-03T00:00:00Z"),
    _curriculum("10", "Real Science Odyssey", "Pandia Press",
                "Secular, lab-heavy science with a classical rhythm for elementary students.",
                "Elementary (1-5)", ["Science"], "Classical", "$$", 4.0, 97, "2023-05-22T00:00:00Z"),
    _curriculum("11", "The Story of the World", "Well-Trained Mind Press",
                "Narrative world history read aloud, with activity books for maps and projects.",
                "Elementary (1-5)", ["History"], "Classical", "$", 4.4, 276, "2023-02-20T00:00:00Z",
                digital=True),
    _curriculum("12", "Sonlight", "Sonlight Curriculum",
                "Literature-rich, all-subject packages built around history and read-alouds.",
                "High School (9-12)", ["History", "Language Arts", "Science"], "Literature-Based", "$$$$",
                4.5, 189, "2023-03-10T00:00:00Z"),
    _curriculum("13", "Rosetta Stone Homeschool", "Rosetta Stone",
                "Immersive, app-based language learning with speech recognition.",
                "High School (9-12)", ["Foreign Language"], "Digital/Interactive", "$$$", 3.6, 88,
                "2023-06-02T00:00:00Z", in_print=False, digital=True, used_market=False),
]

AVAILABILITY_OPTIONS = [
    ("inPrint", "In Print"),
    ("digital", "Digital Available"),
    ("usedMarket", "Used Market"),
]


def _as_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v not in (None, "")]
    return [str(value)]


def _matches_subjects(item: Dict[str, Any], wanted: List[str]) -> bool:
    for value in wanted:
        v = value.lower()
        for subject in item["subjects"]:
            if v == subject["id"] or v in subject["name"].lower():
                return True
    return False


def _matches_grade(item: Dict[str, Any], wanted: List[str]) -> bool:
    grade = item["gradeLevel"]
    return any(v.lower() == grade["id"] or v.lower() in grade["name"].lower() for v in wanted)


def _matches_approach(item: Dict[str, Any], wanted: List[str]) -> bool:
    style = item["teachingApproach"]["style"].lower()
    return any(v.lower() in style for v in wanted)


def _matches_price(item: Dict[str, Any], wanted: List[str]) -> bool:
    return item["cost"]["priceRange"] in wanted


def _matches_availability(item: Dict[str, Any], wanted: List[str]) -> bool:
    return any(item["availability"].get(v, False) for v in wanted)


def _matches_text(item: Dict[str, Any], text: str) -> bool:
    needle = text.strip().lower()
    if not needle:
        return True
    haystack = [
        item["name"],
        item["publisher"],
        item["description"],
        item["teachingApproach"]["style"],
        *(s["name"] for s in item["subjects"]),
    ]
    return any(needle in h.lower() for h in haystack)


def filter_curricula(
    params: Optional[Dict[str, Any]] = None, items: Optional[List[Dict[str, Any]]] = None
) -> List[Dict[str, Any]]:
    params = params or {}
    results = list(CURRICULA if items is None else items)

    checks = [
        ("subjects", _matches_subjects),
        ("gradeLevel", _matches_grade),
        ("teachingApproach", _matches_approach),
        ("priceRange", _matches_price),
        ("availability", _matches_availability),
    ]
    for param, check in checks:
        wanted = _as_list(params.get(param))
        if wanted:
            results = [item for item in results if check(item, wanted)]
    return results


_SORT_KEYS = {
    "rating": lambda c: c["overallRating"],
    "name": lambda c: c["name"].lower(),
    "publisher": lambda c: c["publisher"].lower(),
    "createdAt": lambda c: c["createdAt"],
    "popularity": lambda c: c["reviewCount"],
    "cost": lambda c: len(c["cost"]["priceRange"]),
}


def sort_curricula(
    items: List[Dict[str, Any]], sort_by: str = "rating", sort_order: str = "desc", query: str = ""
) -> List[Dict[str, Any]]:
    if sort_by == "relevance":
        needle = query.strip().lower()
        # name hits first, then rating
        return sorted(
            items,
            key=lambda c: (needle in c["name"].lower() if needle else False, c["overallRating"]),
            reverse=True,
        )
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS["rating"])
    return sorted(items, key=key, reverse=(sort_order == "desc"))


def _page_window(params: Dict[str, Any], default_limit: int = 12):
    try:
        page = max(1, int(params.get("page") or 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(50, max(1, int(params.get("limit") or default_limit)))
    except (TypeError, ValueError):
        limit = default_limit
    return page, limit


def get_curricula(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    params = params or {}
    page, limit = _page_window(params)
    matched = sort_curricula(
        filter_curricula(params), params.get("sortBy") or "rating", params.get("sortOrder") or "desc"
    )
    total = len(matched)
    start = (page - 1) * limit
    return {
        "success": True,
        "data": {
            "curricula": matched[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "totalCount": total,
                "totalPages": math.ceil(total / limit) if total else 0,
            },
        },
    }


def get_curriculum(curriculum_id: str) -> Dict[str, Any]:
    found = next((c for c in CURRICULA if c["id"] == str(curriculum_id)), None)
    return {"success": found is not None, "data": {"curriculum": found}}


def search_curricula(query: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    params = params or {}
    page, limit = _page_window(params, default_limit=10)
    matched = [c for c in filter_curricula(params) if _matches_text(c, query)]
    matched = sort_curricula(
        matched, params.get("sortBy") or "relevance", params.get("sortOrder") or "desc", query
    )
    total = len(matched)
    start = (page - 1) * limit
    return {
        "success": True,
        "data": matched[start:start + limit],
        "total": total,
        "page": page,
        "totalPages": math.ceil(total / limit) if total else 0,
    }


def get_suggestions(query: str, limit: int = 8) -> Dict[str, Any]:
    needle = (query or "").strip().lower()
    if len(needle) < 2:
        return {"success": True, "data": {"suggestions": []}}

    suggestions: List[Dict[str, Any]] = []
    for c in sorted(CURRICULA, key=lambda c: c["reviewCount"], reverse=True):
        if needle in c["name"].lower() or needle in c["publisher"].lower():
            suggestions.append({"id": c["id"], "type": "curriculum", "text": c["name"], "subtitle": c["publisher"]})
    for s in SUBJECTS:
        if needle in s["name"].lower():
            count = sum(1 for c in CURRICULA if any(x["id"] == s["id"] for x in c["subjects"]))
            suggestions.append({
                "id": s["id"], "type": "subject", "text": s["name"], "subtitle": f"Subject - {count} curricula",
            })
    seen = set()
    for c in CURRICULA:
        style = c["teachingApproach"]["style"]
        if needle in style.lower() and style not in seen:
            seen.add(style)
            suggestions.append({"id": style, "type": "approach", "text": style, "subtitle": "Teaching Approach"})
    return {"success": True, "data": {"suggestions": suggestions[:limit]}}


def _counts(pairs: Iterable[tuple]) -> List[Dict[str, Any]]:
    counts: Dict[str, Dict[str, Any]] = {}
    for key, name in pairs:
        entry = counts.setdefault(key, {"id": key, "name": name, "count": 0})
        entry["count"] += 1
    return sorted(counts.values(), key=lambda e: e["name"])


def get_filters(query: Optional[str] = None) -> Dict[str, Any]:
    base = [c for c in CURRICULA if _matches_text(c, query or "")]
    return {
        "success": True,
        "data": {
            "filters": {
                "gradeLevels": _counts((c["gradeLevel"]["id"], c["gradeLevel"]["name"]) for c in base),
                "subjects": _counts((s["id"], s["name"]) for c in base for s in c["subjects"]),
                "teachingApproaches": _counts(
                    (c["teachingApproach"]["style"].lower(), c["teachingApproach"]["style"]) for c in base
                ),
                "costRanges": _counts((c["cost"]["priceRange"], c["cost"]["priceRange"]) for c in base),
                "availability": [
                    {"id": key, "name": name, "count": sum(1 for c in base if c["availability"][key])}
                    for key, name in AVAILABILITY_OPTIONS
                ],
            }
        },
    }


def get_categories() -> Dict[str, Any]:
    def with_count(subject):
        count = sum(1 for c in CURRICULA if any(x["id"] == subject["id"] for x in c["subjects"]))
        return {**subject, "curriculumCount": count}

    def grade_with_count(grade):
        count = sum(1 for c in CURRICULA if c["gradeLevel"]["id"] == grade["id"])
        return {**grade, "curriculumCount": count}

    return {
        "success": True,
        "data": {
            "subjects": [with_count(s) for s in SUBJECTS],
            "gradeLevels": [grade_with_count(g) for g in GRADE_LEVELS],
        },
    }


def respond(endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Synthesize the fallback payload for a cache-eligible read endpoint."""
    params = dict(params or {})
    if endpoint == "/curricula":
        return get_curricula(params)
    if endpoint.startswith("/curricula/"):
        return get_curriculum(endpoint.rsplit("/", 1)[-1])
    if endpoint == "/search":
        return search_curricula(params.pop("q", "") or "", params)
    if endpoint == "/search/suggestions":
        return get_suggestions(params.get("q") or "", int(params.get("limit") or 8))
    if endpoint == "/search/filters":
        return get_filters(params.get("q"))
    if endpoint == "/categories":
        return get_categories()
    raise KeyError(f"No fallback data for {endpoint}")
