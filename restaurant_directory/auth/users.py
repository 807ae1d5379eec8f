from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import bcrypt
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ..db import Store
from ..errors import DuplicateUser, FieldError
from .models import RegisterRequest

logger = logging.getLogger(__name__)


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # over-long input or a corrupt stored hash
        return False


def public_user(doc: dict[str, Any]) -> dict[str, Any]:
    """The user as it may leave the server: never the password hash."""
    return {
        "id": str(doc["_id"]),
        "username": doc["username"],
        "email": doc["email"],
        "role": doc.get("role", "user"),
    }


def register(store: Store, request: RegisterRequest) -> dict[str, Any]:
    """Create a user. Raises ``DuplicateUser`` if the username or email is taken."""
    existing = store.users.find_one(
        {"$or": [{"email": request.email}, {"username": request.username}]}
    )
    if existing:
        raise DuplicateUser(_collisions(existing, request))

    doc = {
        "username": request.username,
        "email": request.email,
        "password": _hash_password(request.password),
        "role": request.role,
        "createdAt": datetime.now(timezone.utc),
    }
    try:
        result = store.users.insert_one(doc)
    except DuplicateKeyError:
        # lost a race against a concurrent registration
        raise DuplicateUser([FieldError("email", "Username or email already registered")])
    doc["_id"] = result.inserted_id
    logger.info("Registered user %s (%s)", doc["username"], doc["role"])
    return public_user(doc)


def _collisions(existing: dict[str, Any], request: RegisterRequest) -> list[FieldError]:
    errors = []
    if existing.get("username") == request.username:
        errors.append(FieldError("username", "Username already taken"))
    if existing.get("email") == request.email:
        errors.append(FieldError("email", "Email already registered"))
    return errors


def authenticate(store: Store, email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the public user or ``None``."""
    record = store.users.find_one({"email": email.strip().lower()})
    if record and _verify_password(password, record.get("password", "")):
        return public_user(record)
    return None


def get_profile(store: Store, user_id: str) -> dict[str, Any] | None:
    if not ObjectId.is_valid(user_id):
        return None
    record = store.users.find_one({"_id": ObjectId(user_id)}, {"password": 0})
    if not record:
        return None
    profile = public_user(record)
    if record.get("createdAt"):
        profile["createdAt"] = record["createdAt"]
    return profile
