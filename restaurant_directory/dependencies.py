from __future__ import annotations

from fastapi import Depends, Request

from .config import Settings
from .db import Store
from .errors import StoreUnavailable
from .restaurants.repository import RestaurantRepository
from .restaurants.service import RestaurantService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailable()
    return store


def get_restaurant_service(store: Store = Depends(get_store)) -> RestaurantService:
    return RestaurantService(RestaurantRepository(store.restaurants))
