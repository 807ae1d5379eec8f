from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import auth as api_auth
from .api import restaurants as api_restaurants
from .auth.session import TokenResolver, clear_session_cookies
from .config import DEFAULT_SETTINGS, Settings, setup_logging
from .db import Store
from .errors import (
    AuthenticationRequired,
    DirectoryError,
    StoreUnavailable,
    ValidationFailed,
    errors_from_pydantic,
)
from .pages import auth as page_auth
from .pages import restaurants as page_restaurants
from .pages.rendering import render_error

logger = logging.getLogger(__name__)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api")


def _envelope(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = errors_from_pydantic(exc.errors(), strip_prefix=("body", "query", "path"))
        if _is_api(request):
            return _envelope(400, "Validation error", errors=[e.to_dict() for e in errors])
        return render_error(request, "; ".join(f"{e.field}: {e.message}" for e in errors), 400)

    @app.exception_handler(DirectoryError)
    async def directory_error(request: Request, exc: DirectoryError):
        if _is_api(request):
            if isinstance(exc, ValidationFailed):
                return _envelope(exc.status_code, exc.message, errors=[e.to_dict() for e in exc.errors])
            return _envelope(exc.status_code, exc.message)
        if isinstance(exc, AuthenticationRequired):
            return RedirectResponse("/auth/login?error=Please+login+to+continue", status_code=303)
        return render_error(request, exc.message, exc.status_code)

    @app.exception_handler(PyMongoError)
    async def store_error(request: Request, exc: PyMongoError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        return await directory_error(request, StoreUnavailable())

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if _is_api(request):
            return _envelope(exc.status_code, str(exc.detail))
        message = "Page not found" if exc.status_code == 404 else str(exc.detail)
        return render_error(request, message, exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if _is_api(request):
            return _envelope(500, "Internal server error")
        return render_error(request, "Internal server error", 500)


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    settings = settings or DEFAULT_SETTINGS
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = Store.connect(settings)
        logger.info("Restaurant directory listening on port %s", settings.port)
        yield
        if owns_store:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(title="Restaurant Directory", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    resolver = TokenResolver(settings)

    @app.middleware("http")
    async def resolve_identity(request: Request, call_next):
        resolution = resolver.resolve(request)
        request.state.identity = resolution.identity
        response = await call_next(request)
        if resolution.clears_cookies:
            clear_session_cookies(response)
        return response

    _install_error_handlers(app)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_auth.router)
    app.include_router(api_restaurants.router)
    app.include_router(page_auth.router)
    app.include_router(page_restaurants.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=DEFAULT_SETTINGS.port)
