"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from home_catalog.catalog import CatalogLoader
from home_catalog.config import Settings
from home_catalog.exceptions import CatalogError
from home_catalog.favorites import FavoritesReconciler
from home_catalog.logging import configure_logging, get_logger
from home_catalog.stores import PropertyStore, SavedPropertyStore, create_stores

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


def create_app(
    settings: Settings | None = None,
    *,
    stores: tuple[PropertyStore, SavedPropertyStore] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. Loaded from env if not provided.
        stores: Store pair to serve from. Built from settings if not provided.
    """
    if settings is None:
        settings = Settings()

    configure_logging(json_output=settings.log_json, level=settings.log_level)

    property_store, saved_store = stores or create_stores(settings)
    loader = CatalogLoader(property_store)
    favorites = FavoritesReconciler(saved_store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        app.state.property_store = property_store
        app.state.loader = loader
        app.state.favorites = favorites

        try:
            await loader.load()
        except CatalogError:
            # Served as 503s until a later request reloads successfully
            logger.error("initial_catalog_load_failed", exc_info=True)
        logger.info("web_server_started", backend=settings.backend)

        yield

        loader.cancel()
        await property_store.close()
        await saved_store.close()
        logger.info("web_server_stopped")

    app = FastAPI(title="Home Catalog", lifespan=lifespan)
    app.add_middleware(SecurityHeadersMiddleware)

    from home_catalog.web.routes import register_error_handlers, router

    register_error_handlers(app)
    app.include_router(router)

    return app
