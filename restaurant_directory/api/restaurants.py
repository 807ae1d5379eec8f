from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from ..auth.dependencies import authorize
from ..auth.models import Identity
from ..dependencies import get_restaurant_service
from ..errors import FieldError, ValidationFailed
from ..restaurants.query import DEFAULT_PAGE, DEFAULT_PER_PAGE, MAX_PER_PAGE, ListQuery, last_page
from ..restaurants.service import RestaurantService

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


def list_query(
    page: int = Query(DEFAULT_PAGE, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
    city: str | None = Query(None, min_length=1, pattern=r"\S"),
    cuisine: str | None = Query(None, min_length=1, pattern=r"\S"),
    min_rating: float | None = Query(None, ge=0, le=5, alias="minRating"),
) -> ListQuery:
    if page > last_page(per_page):
        raise ValidationFailed([FieldError("page", "Page is out of range")])
    return ListQuery(
        page=page,
        per_page=per_page,
        city=city.strip() if city else None,
        cuisine=cuisine.strip() if cuisine else None,
        min_rating=min_rating,
    )


@router.get("", dependencies=[Depends(authorize("restaurant:list"))])
def list_restaurants(
    query: ListQuery = Depends(list_query),
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    page = service.list(query)
    return {"success": True, "data": page.items, "pagination": page.pagination()}


@router.get("/search/filters", dependencies=[Depends(authorize("restaurant:search"))])
def search_restaurants(
    city: str | None = Query(None),
    cuisine: str | None = Query(None),
    min_rating: float | None = Query(None, ge=0, le=5, alias="minRating"),
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    results = service.search(ListQuery(city=city, cuisine=cuisine, min_rating=min_rating))
    return {"success": True, "count": len(results), "data": results}


@router.get("/{restaurant_id}", dependencies=[Depends(authorize("restaurant:read"))])
def get_restaurant(
    restaurant_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    return {"success": True, "data": service.get(restaurant_id)}


@router.post("", status_code=201)
def create_restaurant(
    payload: dict[str, Any] = Body(...),
    user: Identity = Depends(authorize("restaurant:create")),
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    restaurant = service.create(payload, created_by=user.id)
    return {"success": True, "message": "Restaurant created successfully", "data": restaurant}


@router.put("/{restaurant_id}", dependencies=[Depends(authorize("restaurant:update"))])
def update_restaurant(
    restaurant_id: str,
    payload: dict[str, Any] = Body(...),
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    restaurant = service.update(restaurant_id, payload)
    return {"success": True, "message": "Restaurant updated successfully", "data": restaurant}


@router.delete("/{restaurant_id}", dependencies=[Depends(authorize("restaurant:delete"))])
def delete_restaurant(
    restaurant_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
) -> dict:
    service.delete(restaurant_id)
    return {"success": True, "message": "Restaurant deleted successfully"}
