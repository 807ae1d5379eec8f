from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..errors import ValidationFailed, errors_from_pydantic
from .models import RestaurantIn
from .query import ListQuery, Page
from .repository import RestaurantRepository

# Stored keys that are never taken from a client payload.
_SERVER_KEYS = ("_id", "id", "createdAt", "updatedAt", "createdBy")


def validate_restaurant(payload: dict[str, Any]) -> RestaurantIn:
    """The single validation pass; raises ``ValidationFailed`` with per-field errors."""
    try:
        return RestaurantIn.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(errors_from_pydantic(exc)) from exc


def merge_patch(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``patch`` on ``current``; nested objects merge key by key."""
    merged = {**current}
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_patch(merged[key], value)
        else:
            merged[key] = value
    return merged


class RestaurantService:
    """CRUD shared by the JSON API and the HTML pages."""

    def __init__(self, repository: RestaurantRepository) -> None:
        self.repository = repository

    def list(self, query: ListQuery) -> Page:
        return self.repository.list(query)

    def search(self, query: ListQuery) -> list[dict[str, Any]]:
        return self.repository.search(query)

    def get(self, restaurant_id: str) -> dict[str, Any]:
        return self.repository.get(restaurant_id)

    def create(self, payload: dict[str, Any], created_by: str | None = None) -> dict[str, Any]:
        clean = {k: v for k, v in payload.items() if k not in _SERVER_KEYS}
        if created_by:
            clean["createdBy"] = created_by
        return self.repository.insert(validate_restaurant(clean))

    def update(self, restaurant_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        current = self.repository.get_document(restaurant_id)
        patch = {k: v for k, v in patch.items() if k not in _SERVER_KEYS}
        restaurant = validate_restaurant(merge_patch(current, patch))
        return self.repository.replace(restaurant_id, restaurant)

    def delete(self, restaurant_id: str) -> None:
        self.repository.delete(restaurant_id)
