from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

PRICE_RANGES: tuple[str, ...] = ("$", "$$", "$$$", "$$$$")
PriceRange = Literal["$", "$$", "$$$", "$$$$"]
DEFAULT_IMAGE = "https://picsum.photos/400/300?food"


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision the store keeps."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """Stored and wire keys are camelCase; attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class Address(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class GeoPoint(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Review(CamelModel):
    user_id: str = Field(..., min_length=1)
    stars: int = Field(..., ge=1, le=5)
    text: str = Field(..., min_length=1, max_length=500)
    date: datetime = Field(default_factory=utcnow)


class RestaurantIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    rating: float = Field(default=0, ge=0, le=5)
    address: Address
    cuisines: list[Tag] = Field(..., min_length=1)
    amenities: list[Tag] = Field(default_factory=list)
    has_wifi: bool = False
    image: str = DEFAULT_IMAGE
    location: str = Field(..., min_length=1)
    geo: GeoPoint
    reviews: list[Review] = Field(default_factory=list)
    price_range: PriceRange
    average_cost_for_two: int = Field(..., ge=0)
    currency: str = Field(..., min_length=1)
    votes: int = Field(default=0, ge=0)
    created_by: str | None = None

    @field_validator("image")
    @classmethod
    def _check_image(cls, v: str) -> str:
        if not v:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Image must be a valid URL (e.g., https://example.com/image)")
        return v

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(by_alias=True)
        if doc.get("createdBy") is None:
            doc.pop("createdBy", None)
        return doc


def serialize_restaurant(doc: dict[str, Any]) -> dict[str, Any]:
    out = {**doc}
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out
