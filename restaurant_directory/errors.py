"""
Error taxonomy shared by the JSON API and the HTML pages.

Each surface decides how to present these: the API turns them into the
``{"success": false, ...}`` envelope, the pages into redirects or an error view.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from pydantic import ValidationError


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class DirectoryError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationFailed(DirectoryError):
    status_code = 400
    message = "Validation error"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors

    def as_dict(self) -> dict[str, str]:
        """Field -> first message, the shape the HTML forms render."""
        out: dict[str, str] = {}
        for err in self.errors:
            out.setdefault(err.field, err.message)
        return out


class DuplicateUser(ValidationFailed):
    message = "User already exists"


class RestaurantNotFound(DirectoryError):
    status_code = 404
    message = "Restaurant not found"


class MalformedId(DirectoryError):
    status_code = 400
    message = "Invalid restaurant ID"


class AuthenticationRequired(DirectoryError):
    status_code = 401
    message = "Not authenticated"


class PermissionDenied(DirectoryError):
    status_code = 403
    message = "Admin access required"


class StoreUnavailable(DirectoryError):
    status_code = 503
    message = "Database not available. Please try again later."


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def errors_from_pydantic(
    exc: ValidationError | Sequence[dict[str, Any]],
    strip_prefix: tuple[str, ...] = (),
) -> list[FieldError]:
    """Flatten pydantic errors into dotted field paths such as ``geo.lat``."""
    raw = exc.errors() if isinstance(exc, ValidationError) else exc
    result = []
    for err in raw:
        loc = tuple(err.get("loc", ()))
        if loc and loc[0] in strip_prefix:
            loc = loc[1:]
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        result.append(FieldError(field=_field_path(loc), message=msg))
    return result
