from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from ..auth.dependencies import authorize
from ..auth.models import Identity
from ..db import Store
from ..dependencies import get_store
from ..errors import StoreUnavailable, ValidationFailed
from ..restaurants.forms import RestaurantForm
from ..restaurants.query import ListQuery, Page
from ..restaurants.repository import RestaurantRepository
from ..restaurants.service import RestaurantService
from .rendering import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

RESULTS_PATH = "/restaurants/search/results"


def available_service(store: Store = Depends(get_store)) -> RestaurantService:
    """Service for page handlers, after checking the store is reachable."""
    if not store.is_available():
        raise StoreUnavailable()
    return RestaurantService(RestaurantRepository(store.restaurants))


def _page_url(query: ListQuery, page: int) -> str:
    params = {"page": page, "perPage": query.per_page, **query.filter_params()}
    return f"{RESULTS_PATH}?{urlencode(params)}"


def _pagination_links(query: ListQuery, result: Page) -> dict:
    return {
        **result.pagination(),
        "prevUrl": _page_url(query, result.page - 1),
        "nextUrl": _page_url(query, result.page + 1),
        "pages": [
            {"number": n, "active": n == result.page, "url": _page_url(query, n)}
            for n in range(1, result.total_pages + 1)
        ],
    }


@router.get("/")
def index(request: Request):
    return render(request, "index.html")


@router.get("/error")
def error_page(request: Request, message: str | None = None):
    return render(request, "error.html", {"message": message or "Something went wrong!"})


@router.get("/restaurants/search")
def search_page(request: Request):
    return render(request, "restaurants/search.html", {"params": dict(request.query_params), "errors": None})


@router.get(RESULTS_PATH)
def search_results(request: Request, store: Store = Depends(get_store)):
    params = dict(request.query_params)
    if not store.is_available():
        return render(
            request,
            "restaurants/search.html",
            {"params": params, "errors": ["Database not available. Please try again."]},
            status_code=503,
        )

    query = ListQuery.lenient(request.query_params)
    result = RestaurantService(RestaurantRepository(store.restaurants)).list(query)
    return render(
        request,
        "restaurants/results.html",
        {
            "restaurants": result.items,
            "params": params,
            "pagination": _pagination_links(query, result),
        },
    )


@router.get("/restaurants/create")
def create_page(request: Request, user: Identity = Depends(authorize("restaurant:create"))):
    return render(request, "restaurants/form.html", {"form": RestaurantForm(), "errors": {}, "action": "/restaurants"})


@router.post("/restaurants")
async def create_submit(
    request: Request,
    user: Identity = Depends(authorize("restaurant:create")),
    service: RestaurantService = Depends(available_service),
):
    form = RestaurantForm.from_form(await request.form())
    try:
        service.create(form.to_payload(), created_by=user.id)
    except ValidationFailed as exc:
        return render(
            request,
            "restaurants/form.html",
            {"form": form, "errors": exc.as_dict(), "action": "/restaurants"},
            status_code=400,
        )
    return RedirectResponse(RESULTS_PATH, status_code=303)


@router.get("/restaurants/{restaurant_id}")
def details(
    request: Request,
    restaurant_id: str,
    service: RestaurantService = Depends(available_service),
):
    return render(request, "restaurants/details.html", {"restaurant": service.get(restaurant_id)})


@router.get("/restaurants/{restaurant_id}/edit", dependencies=[Depends(authorize("restaurant:update"))])
def edit_page(
    request: Request,
    restaurant_id: str,
    service: RestaurantService = Depends(available_service),
):
    restaurant = service.get(restaurant_id)
    return render(
        request,
        "restaurants/form.html",
        {
            "form": RestaurantForm.from_document(restaurant),
            "errors": {},
            "restaurant": restaurant,
            "action": f"/restaurants/{restaurant_id}/update",
        },
    )


@router.post("/restaurants/{restaurant_id}/update", dependencies=[Depends(authorize("restaurant:update"))])
async def update_submit(
    request: Request,
    restaurant_id: str,
    service: RestaurantService = Depends(available_service),
):
    form = RestaurantForm.from_form(await request.form())
    try:
        service.update(restaurant_id, form.to_payload())
    except ValidationFailed as exc:
        return render(
            request,
            "restaurants/form.html",
            {
                "form": form,
                "errors": exc.as_dict(),
                "restaurant": {"id": restaurant_id},
                "action": f"/restaurants/{restaurant_id}/update",
            },
            status_code=400,
        )
    return RedirectResponse(f"/restaurants/{restaurant_id}", status_code=303)


@router.get("/restaurants/{restaurant_id}/delete", dependencies=[Depends(authorize("restaurant:delete"))])
def delete_page(
    request: Request,
    restaurant_id: str,
    service: RestaurantService = Depends(available_service),
):
    return render(request, "restaurants/delete.html", {"restaurant": service.get(restaurant_id)})


@router.post("/restaurants/{restaurant_id}/delete", dependencies=[Depends(authorize("restaurant:delete"))])
def delete_submit(
    restaurant_id: str,
    service: RestaurantService = Depends(available_service),
):
    service.delete(restaurant_id)
    return RedirectResponse(RESULTS_PATH, status_code=303)
