from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pymongo import ASCENDING, DESCENDING

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100
SEARCH_LIMIT = 20
# skip is sent to the store as a signed 64-bit integer
MAX_SKIP = 2**63 - 1

# Highest rated first; name breaks ties so pages are stable.
SORT_ORDER = [("rating", DESCENDING), ("name", ASCENDING)]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _int_or(raw: str | None, default: int) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _float_or_none(raw: str | None) -> float | None:
    if raw is None or not str(raw).strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return None if math.isnan(value) else value


def _text_or_none(raw: str | None) -> str | None:
    if raw is None:
        return None
    raw = str(raw).strip()
    return raw or None


def last_page(per_page: int) -> int:
    """Highest page number whose offset the store can still represent."""
    return MAX_SKIP // per_page + 1


@dataclass(frozen=True)
class ListQuery:
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE
    city: str | None = None
    cuisine: str | None = None
    min_rating: float | None = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.per_page

    @classmethod
    def lenient(cls, params: Mapping[str, str]) -> ListQuery:
        """Parse browser query strings, substituting defaults instead of failing."""
        min_rating = _float_or_none(params.get("minRating"))
        per_page = int(_clamp(_int_or(params.get("perPage"), DEFAULT_PER_PAGE), 1, MAX_PER_PAGE))
        page = max(DEFAULT_PAGE, _int_or(params.get("page"), DEFAULT_PAGE))
        return cls(
            page=min(page, last_page(per_page)),
            per_page=per_page,
            city=_text_or_none(params.get("city")),
            cuisine=_text_or_none(params.get("cuisine")),
            min_rating=None if min_rating is None else _clamp(min_rating, 0, 5),
        )

    def filter_params(self) -> dict[str, Any]:
        """The filters that were actually supplied, keyed as in the query string."""
        params: dict[str, Any] = {}
        if self.city:
            params["city"] = self.city
        if self.cuisine:
            params["cuisine"] = self.cuisine
        if self.min_rating is not None:
            params["minRating"] = self.min_rating
        return params


def _contains(text: str) -> re.Pattern:
    return re.compile(re.escape(text.strip()), re.IGNORECASE)


def build_filter(query: ListQuery) -> dict[str, Any]:
    """Translate the optional filters into a store query; filters are ANDed."""
    conditions: dict[str, Any] = {}
    if query.city and query.city.strip():
        conditions["address.city"] = _contains(query.city)
    if query.cuisine and query.cuisine.strip():
        # matches when any element of the cuisines array matches
        conditions["cuisines"] = _contains(query.cuisine)
    if query.min_rating is not None:
        conditions["rating"] = {"$gte": query.min_rating}
    return conditions


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "perPage": self.per_page,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }
