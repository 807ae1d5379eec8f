"""
HTML form bodies for restaurants.

Browsers post flat fields: nested objects arrive as ``address[city]`` or
``geo[lat]`` and lists as comma-separated text. ``RestaurantForm`` reads them
into one typed structure with explicit defaults, which then goes through the
same validation as an API payload.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_TRUTHY = {"on", "true", "1", "yes"}


def _field(form: Mapping[str, Any], parent: str, child: str) -> str:
    for key in (f"{parent}[{child}]", f"{parent}.{child}"):
        value = form.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return "" if value is None else str(value).strip()


def _split_tags(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _number(raw: str, default: float | int | None = None) -> float | int | str | None:
    """Blank -> ``default``; unparsable text is passed through for the validator to reject."""
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


@dataclass
class RestaurantForm:
    name: str = ""
    rating: float | int | str | None = 0
    street: str = ""
    city: str = ""
    country: str = ""
    cuisines: list[str] = field(default_factory=list)
    amenities: list[str] = field(default_factory=list)
    has_wifi: bool = False
    image: str = ""
    location: str = ""
    lat: float | int | str | None = None
    lng: float | int | str | None = None
    price_range: str = ""
    average_cost_for_two: float | int | str | None = 0
    currency: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> RestaurantForm:
        return cls(
            name=_text(form, "name"),
            rating=_number(_text(form, "rating"), default=0),
            street=_field(form, "address", "street"),
            city=_field(form, "address", "city"),
            country=_field(form, "address", "country"),
            cuisines=_split_tags(_text(form, "cuisines")),
            amenities=_split_tags(_text(form, "amenities")),
            has_wifi=_text(form, "hasWifi").lower() in _TRUTHY,
            image=_text(form, "image"),
            location=_text(form, "location"),
            lat=_number(_field(form, "geo", "lat")),
            lng=_number(_field(form, "geo", "lng")),
            price_range=_text(form, "priceRange"),
            average_cost_for_two=_number(_text(form, "averageCostForTwo"), default=0),
            currency=_text(form, "currency"),
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> RestaurantForm:
        """Prefill an edit form from a stored restaurant."""
        address = doc.get("address") or {}
        geo = doc.get("geo") or {}
        return cls(
            name=doc.get("name", ""),
            rating=doc.get("rating", 0),
            street=address.get("street", ""),
            city=address.get("city", ""),
            country=address.get("country", ""),
            cuisines=list(doc.get("cuisines") or []),
            amenities=list(doc.get("amenities") or []),
            has_wifi=bool(doc.get("hasWifi")),
            image=doc.get("image", ""),
            location=doc.get("location", ""),
            lat=geo.get("lat"),
            lng=geo.get("lng"),
            price_range=doc.get("priceRange", ""),
            average_cost_for_two=doc.get("averageCostForTwo", 0),
            currency=doc.get("currency", ""),
        )

    def to_payload(self) -> dict[str, Any]:
        geo: dict[str, Any] = {}
        if self.lat is not None:
            geo["lat"] = self.lat
        if self.lng is not None:
            geo["lng"] = self.lng
        payload: dict[str, Any] = {
            "name": self.name,
            "rating": self.rating,
            "address": {"street": self.street, "city": self.city, "country": self.country},
            "cuisines": self.cuisines,
            "amenities": self.amenities,
            "hasWifi": self.has_wifi,
            "location": self.location,
            "geo": geo,
            "averageCostForTwo": self.average_cost_for_two,
            "currency": self.currency,
        }
        if self.image:
            payload["image"] = self.image
        if self.price_range:
            payload["priceRange"] = self.price_range
        return payload
