"""Record store adapters behind the PropertyStore / SavedPropertyStore interfaces."""

from home_catalog.config import Settings
from home_catalog.exceptions import ValidationError
from home_catalog.logging import get_logger
from home_catalog.stores.base import PropertyStore, SavedPropertyStore
from home_catalog.stores.memory import InMemoryPropertyStore, InMemorySavedPropertyStore
from home_catalog.stores.remote import RemotePropertyStore, RemoteSavedPropertyStore

__all__ = [
    "InMemoryPropertyStore",
    "InMemorySavedPropertyStore",
    "PropertyStore",
    "RemotePropertyStore",
    "RemoteSavedPropertyStore",
    "SavedPropertyStore",
    "create_stores",
]

logger = get_logger(__name__)


def create_stores(settings: Settings) -> tuple[PropertyStore, SavedPropertyStore]:
    """Build the store pair for the configured backend.

    Raises:
        ValidationError: If the remote backend is selected without a base URL.
    """
    if settings.backend == "remote":
        if not settings.api_base_url:
            raise ValidationError("HOME_CATALOG_API_BASE_URL is required for the remote backend")
        api_key = settings.api_key.get_secret_value()
        logger.info("stores_configured", backend="remote", base_url=settings.api_base_url)
        return (
            RemotePropertyStore(
                settings.api_base_url, api_key=api_key, timeout=settings.api_timeout_seconds
            ),
            RemoteSavedPropertyStore(
                settings.api_base_url, api_key=api_key, timeout=settings.api_timeout_seconds
            ),
        )

    latency = settings.mock_latency_seconds
    properties = InMemoryPropertyStore.from_json(
        settings.get_mock_properties_path(), latency_seconds=latency
    )
    saved = InMemorySavedPropertyStore.from_json(
        settings.get_mock_saved_properties_path(), latency_seconds=latency
    )
    logger.info("stores_configured", backend="mock", latency_ms=settings.mock_latency_ms)
    return properties, saved
