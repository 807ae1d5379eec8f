from __future__ import annotations

import math
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..auth.dependencies import get_current_user

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def rating_stars(rating: Any) -> str:
    try:
        value = float(rating or 0)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value):
        value = 0.0
    value = max(0.0, min(5.0, value))
    full = int(value)
    half = 1 if value - full >= 0.5 else 0
    return "★" * full + "⯨" * half + "☆" * (5 - full - half)


def format_date(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.strftime("%b %d, %Y at %I:%M %p")


def join_list(values: Any, separator: str = ", ") -> str:
    if not isinstance(values, (list, tuple)):
        return ""
    return separator.join(str(v) for v in values)


templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))
templates.env.filters["rating_stars"] = rating_stars
templates.env.filters["format_date"] = format_date
templates.env.filters["join_list"] = join_list


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
):
    """Render a page with the current user available to every template."""
    ctx = {"user": get_current_user(request), **(context or {})}
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def render_error(request: Request, message: str, status_code: int = 500):
    return render(request, "error.html", {"message": message}, status_code=status_code)
