from __future__ import annotations

import json
import logging
from urllib.parse import unquote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from ..auth.dependencies import get_current_user
from ..auth.models import Identity, RegisterRequest
from ..auth.session import clear_session_cookies, set_session_cookies
from ..auth.tokens import issue_token, verify_token
from ..auth.users import authenticate, register
from ..config import Settings
from ..db import Store
from ..dependencies import get_settings, get_store
from ..errors import DuplicateUser, errors_from_pydantic
from .rendering import render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["pages"])


def _signed_in(user: dict, settings: Settings, target: str = "/") -> RedirectResponse:
    token = issue_token(Identity(id=user["id"], role=user["role"], email=user["email"]), settings)
    response = RedirectResponse(target, status_code=303)
    set_session_cookies(response, token, user, settings)
    return response


@router.get("/login")
def login_page(request: Request, error: str | None = None):
    return render(request, "auth/login.html", {"error": error, "form": {}})


@router.post("/login")
async def login_submit(
    request: Request,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    form = await request.form()
    email = str(form.get("email", "")).strip()
    user = authenticate(store, email, str(form.get("password", "")))
    if not user:
        return render(
            request,
            "auth/login.html",
            {"error": "Invalid email or password", "form": {"email": email}},
            status_code=401,
        )
    return _signed_in(user, settings)


@router.get("/register")
def register_page(request: Request, error: str | None = None):
    return render(request, "auth/register.html", {"error": error, "errors": {}, "form": {}})


@router.post("/register")
async def register_submit(
    request: Request,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    form = dict(await request.form())
    form.pop("role", None)  # admins are not created from the public form
    shown = {k: v for k, v in form.items() if k != "password"}
    try:
        user = register(store, RegisterRequest.model_validate(form))
    except ValidationError as exc:
        errors = {e.field: e.message for e in errors_from_pydantic(exc)}
        return render(request, "auth/register.html", {"errors": errors, "form": shown}, status_code=400)
    except DuplicateUser as exc:
        return render(request, "auth/register.html", {"errors": exc.as_dict(), "form": shown}, status_code=400)
    return _signed_in(user, settings)


@router.post("/set-session")
async def set_session(request: Request, settings: Settings = Depends(get_settings)):
    """Store a token obtained from the JSON API as session cookies."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            body = None
    else:
        body = dict(await request.form())
    if not isinstance(body, dict):
        return RedirectResponse("/auth/login?error=Session+failed", status_code=303)
    token = body.get("token") or ""
    identity = verify_token(token, settings) if isinstance(token, str) and token else None
    if identity is None:
        return RedirectResponse("/auth/login?error=Session+failed", status_code=303)

    user = body.get("user")
    if isinstance(user, str):
        try:
            user = json.loads(unquote(user))
        except ValueError:
            user = None
    if not isinstance(user, dict):
        user = identity.model_dump()

    response = RedirectResponse("/", status_code=303)
    set_session_cookies(response, token, user, settings)
    return response


@router.get("/check")
def check(request: Request) -> dict:
    identity = get_current_user(request)
    if identity is None:
        return {"loggedIn": False}
    return {"loggedIn": True, "user": identity.model_dump()}


@router.get("/logout")
def logout(request: Request):
    response = RedirectResponse("/", status_code=303)
    clear_session_cookies(response)
    return response
