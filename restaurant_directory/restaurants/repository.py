from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from ..errors import MalformedId, RestaurantNotFound
from .models import RestaurantIn, serialize_restaurant, utcnow
from .query import SEARCH_LIMIT, SORT_ORDER, ListQuery, Page, build_filter

logger = logging.getLogger(__name__)


def parse_object_id(value: str) -> ObjectId:
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise MalformedId()
    return ObjectId(value)


class RestaurantRepository:
    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def list(self, query: ListQuery) -> Page:
        conditions = build_filter(query)
        cursor = (
            self.collection.find(conditions)
            .sort(SORT_ORDER)
            .skip(query.skip)
            .limit(query.per_page)
        )
        items = [serialize_restaurant(doc) for doc in cursor]
        total = self.collection.count_documents(conditions)
        return Page(items=items, page=query.page, per_page=query.per_page, total=total)

    def search(self, query: ListQuery, limit: int = SEARCH_LIMIT) -> list[dict[str, Any]]:
        cursor = self.collection.find(build_filter(query)).sort(SORT_ORDER).limit(limit)
        return [serialize_restaurant(doc) for doc in cursor]

    def get_document(self, restaurant_id: str) -> dict[str, Any]:
        doc = self.collection.find_one({"_id": parse_object_id(restaurant_id)})
        if doc is None:
            raise RestaurantNotFound()
        return doc

    def get(self, restaurant_id: str) -> dict[str, Any]:
        return serialize_restaurant(self.get_document(restaurant_id))

    def insert(self, restaurant: RestaurantIn) -> dict[str, Any]:
        now = utcnow()
        doc = {**restaurant.to_document(), "createdAt": now, "updatedAt": now}
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Created restaurant %s (%s)", result.inserted_id, restaurant.name)
        return serialize_restaurant(doc)

    def replace(self, restaurant_id: str, restaurant: RestaurantIn) -> dict[str, Any]:
        oid = parse_object_id(restaurant_id)
        existing = self.collection.find_one({"_id": oid}, {"createdAt": 1})
        if existing is None:
            raise RestaurantNotFound()
        doc = {
            **restaurant.to_document(),
            "createdAt": existing.get("createdAt"),
            "updatedAt": utcnow(),
        }
        updated = self.collection.find_one_and_replace(
            {"_id": oid}, doc, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise RestaurantNotFound()
        logger.info("Updated restaurant %s", restaurant_id)
        return serialize_restaurant(updated)

    def delete(self, restaurant_id: str) -> None:
        result = self.collection.delete_one({"_id": parse_object_id(restaurant_id)})
        if result.deleted_count == 0:
            raise RestaurantNotFound()
        logger.info("Deleted restaurant %s", restaurant_id)
