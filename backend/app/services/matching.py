"""
Annuaire Backend — Matching & Scoring Heuristics
==================================================

What:  Pure functions deciding whether a professional matches a query and
       how well.
Why:   Kept free of I/O so the directory service stays a thin orchestrator
       and the heuristics can be tested on plain objects.

Scoring (per field, first rule that applies):
    text == query                      → 100
    some word == query                 →  90
    some word starts with query        →  80
    text starts with query             →  70
    text contains query                →  50

Field weights:
    title ×2, category ×1.5, sub-category ×1.5, speciality ×1, description ×0.5

All comparisons are case-insensitive; the query is trimmed.
"""

from typing import Any, Iterable, List, Optional, Tuple

EXACT_SCORE = 100
WORD_SCORE = 90
WORD_PREFIX_SCORE = 80
PREFIX_SCORE = 70
CONTAINS_SCORE = 50

# (attribute, weight)
FIELD_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("title", 2.0),
    ("category", 1.5),
    ("sub_category", 1.5),
    ("speciality", 1.0),
    ("description", 0.5),
)

# Fields scanned by the plain listing filter (address is checked separately)
LISTING_FIELDS: Tuple[str, ...] = (
    "title",
    "category",
    "sub_category",
    "description",
    "speciality",
)


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def smart_match(text: Optional[str], query: str) -> bool:
    """
    Loose match used by the listing filter.

    `query` must already be normalized. A word equal to or starting with the
    query is a match, as is any substring occurrence.
    """
    if not text:
        return False
    lowered = text.lower()
    words = lowered.split()
    if any(word == query for word in words):
        return True
    if any(word.startswith(query) for word in words):
        return True
    return query in lowered


def score_field(text: Optional[str], query: str) -> int:
    """Relevance of one field for `query` (0 means no match)."""
    if not text:
        return 0
    lowered = text.lower()
    q = normalize_query(query)
    words = lowered.split()

    if lowered == q:
        return EXACT_SCORE
    if q in words:
        return WORD_SCORE
    if any(word.startswith(q) for word in words):
        return WORD_PREFIX_SCORE
    if lowered.startswith(q):
        return PREFIX_SCORE
    if q in lowered:
        return CONTAINS_SCORE
    return 0


def score_professional(professional: Any, query: str) -> Optional[float]:
    """
    Weighted relevance of a professional, or None when no field matched.

    A matching field always adds a positive amount, so None and 0.0 are
    never confused.
    """
    total = 0.0
    matched = False
    for attr, weight in FIELD_WEIGHTS:
        score = score_field(getattr(professional, attr, None), query)
        if score:
            matched = True
            total += score * weight
    return total if matched else None


def matches_listing_search(professional: Any, query: str) -> bool:
    """Listing filter: any scanned field smart-matches, or the address contains the query."""
    q = normalize_query(query)
    if any(smart_match(getattr(professional, attr, None), q) for attr in LISTING_FIELDS):
        return True
    address = getattr(professional, "address", None)
    return bool(address) and q in address.lower()


def matches_category(professional: Any, category: str) -> bool:
    """Case-insensitive equality with the category or the sub-category."""
    wanted = category.lower()
    for attr in ("category", "sub_category"):
        value = getattr(professional, attr, None)
        if value and value.lower() == wanted:
            return True
    return False


def matches_city(professional: Any, city: str) -> bool:
    """Case-insensitive substring of the city or the address."""
    wanted = city.lower()
    for attr in ("city", "address"):
        value = getattr(professional, attr, None)
        if value and wanted in value.lower():
            return True
    return False


def filter_listing(
    professionals: Iterable[Any],
    search: str = "",
    category: str = "",
    city: str = "",
) -> List[Any]:
    """Applies the search, category and city filters in that order."""
    result = list(professionals)
    if normalize_query(search):
        result = [p for p in result if matches_listing_search(p, search)]
    if category:
        result = [p for p in result if matches_category(p, category)]
    if city:
        result = [p for p in result if matches_city(p, city)]
    return result


def rank(professionals: Iterable[Any], query: str) -> List[Tuple[Any, float]]:
    """
    Scores every professional and returns the matches, best first.

    Python's sort is stable, so equal scores keep store order.
    """
    scored = []
    for professional in professionals:
        score = score_professional(professional, query)
        if score is not None:
            scored.append((professional, score))
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored
