"""
Token resolution for every request.

A request may carry its token in one of three places. The extractors are
tried in order and the first one that finds a token wins; later sources are
never consulted, even if the winning token turns out to be invalid.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from fastapi import Request, Response

from ..config import Settings
from .models import Identity
from .tokens import verify_token

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"
USER_COOKIE = "user"


class BearerHeader:
    source = "header"

    def __call__(self, request: Request) -> str | None:
        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
        return None


class SessionCookie:
    source = "cookie"

    def __call__(self, request: Request) -> str | None:
        return request.cookies.get(TOKEN_COOKIE) or None


class QueryParam:
    source = "query"

    def __call__(self, request: Request) -> str | None:
        return request.query_params.get("token") or None


DEFAULT_EXTRACTORS = (BearerHeader(), SessionCookie(), QueryParam())


@dataclass(frozen=True)
class Resolution:
    identity: Identity | None = None
    source: str | None = None
    rejected: bool = False

    @property
    def clears_cookies(self) -> bool:
        return self.rejected and self.source == SessionCookie.source


class TokenResolver:
    def __init__(self, settings: Settings, extractors=DEFAULT_EXTRACTORS) -> None:
        self.settings = settings
        self.extractors = tuple(extractors)

    def extract(self, request: Request) -> tuple[str | None, str | None]:
        for extractor in self.extractors:
            token = extractor(request)
            if token:
                return token, extractor.source
        return None, None

    def resolve(self, request: Request) -> Resolution:
        token, source = self.extract(request)
        if token is None:
            return Resolution()
        identity = verify_token(token, self.settings)
        if identity is None:
            logger.info("Rejected %s token on %s", source, request.url.path)
            return Resolution(source=source, rejected=True)
        return Resolution(identity=identity, source=source)


def set_session_cookies(
    response: Response,
    token: str,
    user: dict[str, Any],
    settings: Settings,
) -> None:
    max_age = int(settings.token_lifetime.total_seconds())
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.production,
        samesite="strict",
    )
    # readable by page scripts; identity always comes from the token
    response.set_cookie(
        USER_COOKIE,
        quote(json.dumps(user, default=str)),
        max_age=max_age,
        httponly=False,
        secure=settings.production,
        samesite="strict",
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(TOKEN_COOKIE)
    response.delete_cookie(USER_COOKIE)
