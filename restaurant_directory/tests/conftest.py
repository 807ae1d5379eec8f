from __future__ import annotations

import copy

import mongomock
import pytest
from fastapi.testclient import TestClient

from restaurant_directory.app import create_app
from restaurant_directory.auth.models import RegisterRequest
from restaurant_directory.auth.users import register
from restaurant_directory.config import Settings
from restaurant_directory.db import Store

TEST_SETTINGS = Settings(jwt_secret="test-secret", jwt_expires_in="1h", mongodb_db="directory_test")

BASE_RESTAURANT = {
    "name": "Le Petit Bistro",
    "rating": 4.2,
    "address": {"street": "12 Rue Cler", "city": "Paris", "country": "France"},
    "cuisines": ["French", "Bistro"],
    "amenities": ["WiFi", "Outdoor Seating"],
    "hasWifi": True,
    "image": "https://example.com/bistro.jpg",
    "location": "Paris, France",
    "geo": {"lat": 48.8566, "lng": 2.3522},
    "priceRange": "$$",
    "averageCostForTwo": 60,
    "currency": "EUR",
    "votes": 120,
}


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def store() -> Store:
    s = Store(mongomock.MongoClient(tz_aware=True), TEST_SETTINGS.mongodb_db)
    s.ensure_indexes()
    return s


@pytest.fixture
def app(store):
    return create_app(settings=TEST_SETTINGS, store=store)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_restaurant():
    def _make(**overrides):
        data = copy.deepcopy(BASE_RESTAURANT)
        data.update(overrides)
        return data

    return _make


def _register_and_login(client: TestClient, store: Store, username: str, role: str) -> str:
    register(
        store,
        RegisterRequest(username=username, email=f"{username}@example.com", password="secret123", role=role),
    )
    resp = client.post("/api/auth/login", json={"email": f"{username}@example.com", "password": "secret123"})
    return resp.json()["token"]


@pytest.fixture
def user_token(client, store) -> str:
    return _register_and_login(client, store, "alice", "user")


@pytest.fixture
def admin_token(client, store) -> str:
    return _register_and_login(client, store, "root", "admin")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header():
    return bearer
