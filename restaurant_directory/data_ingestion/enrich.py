from __future__ import annotations

import json
import logging
import random
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

import pandas as pd
from pydantic import ValidationError

from ..db import Store
from ..restaurants.models import PRICE_RANGES, RestaurantIn
from ..restaurants.repository import RestaurantRepository
from .config import DEFAULT_ENRICHMENT_CONFIG, EnrichmentConfig

logger = logging.getLogger(__name__)

AMENITY_OPTIONS: List[str] = [
    "WiFi",
    "Outdoor Seating",
    "Pet Friendly",
    "Live Music",
    "Wine Selection",
    "Charging Ports",
    "Gluten-Free Options",
]

# Zomato "Country Code" column
COUNTRY_CODES = {
    1: "India",
    14: "Australia",
    30: "Brazil",
    37: "Canada",
    94: "Indonesia",
    148: "New Zealand",
    162: "Philippines",
    166: "Qatar",
    184: "Singapore",
    189: "South Africa",
    191: "Sri Lanka",
    208: "Turkey",
    214: "UAE",
    215: "United Kingdom",
    216: "United States",
}


def _country(code: Any) -> str:
    try:
        return COUNTRY_CODES.get(int(code), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


def _price_tier(value: Any) -> str | None:
    """Zomato stores the tier as 1..4; already-symbolic values pass through."""
    if isinstance(value, str) and value.strip() in PRICE_RANGES:
        return value.strip()
    try:
        tier = int(float(value))
    except (TypeError, ValueError):
        return None
    if 1 <= tier <= len(PRICE_RANGES):
        return PRICE_RANGES[tier - 1]
    return None


def _normalize_rating(rating: Any) -> float:
    try:
        value = float(rating)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(value):
        return 0.0
    return max(0.0, min(5.0, value))


def _non_negative_int(value: Any) -> int:
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, number)


def _float_or_none(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(number) else number


def _text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def random_amenities(rng: random.Random, config: EnrichmentConfig = DEFAULT_ENRICHMENT_CONFIG) -> List[str]:
    count = rng.randint(config.min_amenities, config.max_amenities)
    return rng.sample(AMENITY_OPTIONS, count)


def image_for(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip()).lower() or "restaurant"
    return f"https://picsum.photos/seed/{slug}/400/300"


def enrich_row(row: pd.Series, rng: random.Random, config: EnrichmentConfig = DEFAULT_ENRICHMENT_CONFIG) -> dict[str, Any]:
    name = _text(row.get("Restaurant Name"))
    city = _text(row.get("City"))
    country = _country(row.get("Country Code"))
    rating_text = _text(row.get("Rating text")) or "No review text"

    return {
        "name": name,
        "rating": _normalize_rating(row.get("Aggregate rating")),
        "address": {
            "street": _text(row.get("Address")),
            "city": city,
            "country": country,
        },
        "cuisines": [c.strip() for c in _text(row.get("Cuisines")).split(",") if c.strip()],
        "amenities": random_amenities(rng, config),
        "hasWifi": _text(row.get("Has Table booking")).lower() == "yes",
        "image": image_for(name),
        "location": f"{city}, {country}",
        "geo": {
            "lat": _float_or_none(row.get("Latitude")),
            "lng": _float_or_none(row.get("Longitude")),
        },
        "reviews": [
            {
                "userId": f"u{_text(row.get('Restaurant ID'))}",
                "stars": rng.randint(1, 5),
                "text": rating_text,
                "date": datetime.now(timezone.utc).isoformat(),
            }
        ],
        "priceRange": _price_tier(row.get("Price range")),
        "averageCostForTwo": _non_negative_int(row.get("Average Cost for two")),
        "currency": _text(row.get("Currency")),
        "votes": _non_negative_int(row.get("Votes")),
    }


def enrich_dataset(config: EnrichmentConfig = DEFAULT_ENRICHMENT_CONFIG) -> Path:
    """
    Execute the enrichment pipeline.

    Steps:
    - Read the raw CSV export.
    - Map each row into the restaurant document layout, adding amenities,
      a placeholder image and one review.
    - Persist the enriched records as JSON.
    """
    df = pd.read_csv(config.input_path, encoding_errors="replace")
    rng = random.Random(config.seed)

    enriched = [enrich_row(row, rng, config) for _, row in df.iterrows()]

    config.output_path.parent.mkdir(parents=True, exist_ok=True)
    config.output_path.write_text(json.dumps(enriched, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Enriched %d rows into %s", len(enriched), config.output_path)
    return config.output_path


def load_into_store(path: Path, store: Store) -> tuple[int, int]:
    """Validate each enriched record and insert the valid ones. Returns ``(inserted, skipped)``."""
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    repository = RestaurantRepository(store.restaurants)
    inserted = skipped = 0
    for index, record in enumerate(records):
        try:
            restaurant = RestaurantIn.model_validate(record)
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping record %d (%s): %d validation errors", index, record.get("name"), exc.error_count())
            continue
        repository.insert(restaurant)
        inserted += 1
    logger.info("Loaded %d restaurants, skipped %d", inserted, skipped)
    return inserted, skipped


if __name__ == "__main__":
    import argparse

    from ..config import DEFAULT_SETTINGS, setup_logging

    parser = argparse.ArgumentParser(description="Enrich the Zomato CSV and optionally load it.")
    parser.add_argument("input", nargs="?", default=str(DEFAULT_ENRICHMENT_CONFIG.input_path))
    parser.add_argument("-o", "--output", default=str(DEFAULT_ENRICHMENT_CONFIG.output_path))
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--load", action="store_true", help="insert the result into MongoDB")
    args = parser.parse_args()

    setup_logging()
    cfg = EnrichmentConfig(input_path=Path(args.input), output_path=Path(args.output), seed=args.seed)
    path = enrich_dataset(cfg)
    print(f"Enrichment complete. Saved to: {path}")

    if args.load:
        store = Store.connect(DEFAULT_SETTINGS)
        try:
            inserted, skipped = load_into_store(path, store)
        finally:
            store.close()
        print(f"Loaded {inserted} restaurants ({skipped} skipped)")
