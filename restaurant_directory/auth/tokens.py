from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError

from ..config import Settings
from .models import Identity

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class InvalidToken(Exception):
    pass


def issue_token(
    identity: Identity,
    settings: Settings,
    expires_in: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "id": identity.id,
        "role": identity.role,
        "email": identity.email,
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else settings.token_lifetime),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> Identity:
    """Check signature and expiry and return the embedded identity."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    try:
        return Identity(
            id=str(payload["id"]),
            role=payload.get("role") or "user",
            email=payload.get("email"),
        )
    except (KeyError, ValidationError) as exc:
        raise InvalidToken("Malformed token payload") from exc


def verify_token(token: str, settings: Settings) -> Identity | None:
    """Like ``decode_token`` but a bad token just means "no identity"."""
    try:
        return decode_token(token, settings)
    except InvalidToken as exc:
        logger.info("Token verification failed: %s", exc)
        return None
