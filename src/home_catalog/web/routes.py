"""JSON API routes for browsing and favoriting listings."""

from typing import Final

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from home_catalog.catalog import CatalogLoader
from home_catalog.exceptions import (
    AlreadySavedError,
    CatalogError,
    NotFoundError,
    StaleLoadError,
    StoreUnavailableError,
    ValidationError,
)
from home_catalog.favorites import FavoritesReconciler
from home_catalog.logging import get_logger
from home_catalog.models import Property
from home_catalog.stores import PropertyStore
from home_catalog.web.filters import BrowseDep

logger = get_logger(__name__)

router = APIRouter()

_ERROR_STATUS: Final[dict[type[CatalogError], int]] = {
    NotFoundError: 404,
    AlreadySavedError: 409,
    ValidationError: 422,
    StoreUnavailableError: 503,
}


class NotesUpdate(BaseModel):
    notes: str


def _get_loader(request: Request) -> CatalogLoader:
    return request.app.state.loader  # type: ignore[no-any-return]


def _get_favorites(request: Request) -> FavoritesReconciler:
    return request.app.state.favorites  # type: ignore[no-any-return]


def _get_property_store(request: Request) -> PropertyStore:
    return request.app.state.property_store  # type: ignore[no-any-return]


async def _current_properties(loader: CatalogLoader) -> list[Property]:
    """Listings from the loader, loading on first use or after a failed load."""
    if loader.generation == 0 or loader.error is not None:
        try:
            return await loader.load()
        except StaleLoadError:
            pass
    return loader.properties


async def catalog_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a core error as a recoverable JSON error response."""
    status = next(
        (code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    logger.warning(
        "request_failed",
        path=request.url.path,
        status=status,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse({"error": type(exc).__name__, "message": str(exc)}, status_code=status)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)


@router.get("/health")
async def health_check() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@router.get("/properties")
async def list_properties(request: Request, browse: BrowseDep) -> JSONResponse:
    """Browse listings: search, filter and sort the current collection."""
    properties = await _current_properties(_get_loader(request))
    displayed = browse.apply(properties)
    return JSONResponse(
        {
            "properties": [p.to_record() for p in displayed],
            "count": len(displayed),
            "total": len(properties),
            "sort": browse.sort_key.value,
            "has_active_filters": browse.has_active_filters,
            "active_filters": browse.filters.active_filter_chips(),
        }
    )


@router.get("/properties/featured")
async def featured_properties(request: Request) -> JSONResponse:
    loader = _get_loader(request)
    await _current_properties(loader)
    count = request.app.state.settings.featured_count
    return JSONResponse({"properties": [p.to_record() for p in loader.featured(count)]})


@router.post("/properties/refresh")
async def refresh_properties(request: Request) -> JSONResponse:
    """Reload the collection from the store."""
    loader = _get_loader(request)
    try:
        properties = await loader.load()
    except StaleLoadError:
        properties = loader.properties
    return JSONResponse({"count": len(properties), "generation": loader.generation})


@router.get("/properties/{property_id}")
async def property_detail(request: Request, property_id: str) -> JSONResponse:
    detail = await _get_loader(request).get_detail(property_id, _get_favorites(request))
    return JSONResponse(
        {"property": detail.property.to_record(), "is_favorite": detail.is_favorite}
    )


@router.get("/favorites")
async def list_favorites(request: Request) -> JSONResponse:
    properties = await _current_properties(_get_loader(request))
    favorited = await _get_favorites(request).list_favorited_properties(properties)
    return JSONResponse(
        {"properties": [p.to_record() for p in favorited], "count": len(favorited)}
    )


@router.post("/favorites/{property_id}")
async def add_favorite(request: Request, property_id: str) -> JSONResponse:
    # 404 for unknown listings rather than saving a dangling entry
    await _get_property_store(request).get_by_id(property_id)
    saved = await _get_favorites(request).add(property_id)
    return JSONResponse(saved.to_record(), status_code=201)


@router.post("/favorites/{property_id}/toggle")
async def toggle_favorite(request: Request, property_id: str) -> JSONResponse:
    await _get_property_store(request).get_by_id(property_id)
    is_favorite = await _get_favorites(request).toggle(property_id)
    return JSONResponse({"property_id": property_id, "is_favorite": is_favorite})


@router.put("/favorites/{property_id}/notes")
async def update_favorite_notes(
    request: Request, property_id: str, body: NotesUpdate
) -> JSONResponse:
    saved = await _get_favorites(request).update_notes(property_id, body.notes)
    return JSONResponse(saved.to_record())


@router.delete("/favorites/{property_id}")
async def remove_favorite(request: Request, property_id: str) -> JSONResponse:
    removed = await _get_favorites(request).remove(property_id)
    return JSONResponse(removed.to_record())


@router.delete("/favorites")
async def clear_favorites(request: Request) -> JSONResponse:
    removed = await _get_favorites(request).clear_all()
    return JSONResponse({"removed": removed})
