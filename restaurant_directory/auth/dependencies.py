from __future__ import annotations

from typing import Callable

from fastapi import Request

from ..errors import AuthenticationRequired, PermissionDenied
from .models import Identity
from .policy import check


def get_current_user(request: Request) -> Identity | None:
    """Return the identity resolved by the token middleware, or ``None``."""
    return getattr(request.state, "identity", None)


def require_user(request: Request) -> Identity:
    """Raise 401 if no user is logged in."""
    user = get_current_user(request)
    if user is None:
        raise AuthenticationRequired()
    return user


def require_admin(request: Request) -> Identity:
    """Raise 401 if not logged in, 403 if not admin."""
    user = require_user(request)
    if not user.is_admin:
        raise PermissionDenied()
    return user


def authorize(action: str) -> Callable[[Request], Identity | None]:
    """Dependency enforcing the policy table entry for ``action``."""

    def dependency(request: Request) -> Identity | None:
        user = get_current_user(request)
        check(user, action)
        return user

    return dependency
