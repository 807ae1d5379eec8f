from __future__ import annotations

from enum import Enum

from ..errors import AuthenticationRequired, PermissionDenied
from .models import Identity


class Tier(str, Enum):
    public = "public"
    authenticated = "authenticated"
    admin = "admin"


# One table for both the API and the pages.
POLICY: dict[str, Tier] = {
    "restaurant:list": Tier.public,
    "restaurant:read": Tier.public,
    "restaurant:search": Tier.public,
    "restaurant:create": Tier.authenticated,
    "restaurant:update": Tier.admin,
    "restaurant:delete": Tier.admin,
}


def check(identity: Identity | None, action: str) -> None:
    """Raise unless ``identity`` may perform ``action``."""
    tier = POLICY[action]
    if tier is Tier.public:
        return
    if identity is None:
        raise AuthenticationRequired()
    if tier is Tier.admin and not identity.is_admin:
        raise PermissionDenied()
