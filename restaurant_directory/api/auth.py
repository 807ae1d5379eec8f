from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth.dependencies import require_user
from ..auth.models import Identity, LoginRequest, RegisterRequest
from ..auth.tokens import issue_token
from ..auth.users import authenticate, get_profile, register
from ..config import Settings
from ..db import Store
from ..dependencies import get_settings, get_store

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_for(user: dict, settings: Settings) -> str:
    return issue_token(Identity(id=user["id"], role=user["role"], email=user["email"]), settings)


@router.post("/register", status_code=201)
def register_user(
    body: RegisterRequest,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    user = register(store, body)
    return {
        "success": True,
        "message": "User registered successfully",
        "token": _token_for(user, settings),
        "user": user,
    }


@router.post("/login")
def login(
    body: LoginRequest,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    user = authenticate(store, body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {
        "success": True,
        "message": "Login successful",
        "token": _token_for(user, settings),
        "user": user,
    }


@router.post("/logout")
def logout(user: Identity = Depends(require_user)) -> dict:
    # tokens are stateless; the client just drops it
    return {"success": True, "message": "Logged out successfully"}


@router.get("/profile")
def profile(
    user: Identity = Depends(require_user),
    store: Store = Depends(get_store),
) -> dict:
    record = get_profile(store, user.id)
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": record}
