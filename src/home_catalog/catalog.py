"""Catalog loader: one-shot loads of the listing collection.

Each load is tagged with a generation number. If a newer load (or a
``cancel``) starts while an older one is awaiting the store, the older
result is discarded so it cannot overwrite fresher state.
"""

from dataclasses import dataclass

from home_catalog.exceptions import CatalogError, StaleLoadError
from home_catalog.favorites import FavoritesReconciler
from home_catalog.logging import get_logger
from home_catalog.models import Property
from home_catalog.stores.base import PropertyStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class PropertyDetail:
    """A listing together with its favorite flag, for the detail view."""

    property: Property
    is_favorite: bool


class CatalogLoader:
    """Holds the most recently loaded listings and any recoverable load error."""

    def __init__(self, store: PropertyStore) -> None:
        self._store = store
        self._generation = 0
        self.properties: list[Property] = []
        self.error: CatalogError | None = None
        self.loading = False

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Abandon any in-flight load (e.g. the view went away)."""
        self._generation += 1
        self.loading = False

    async def load(self) -> list[Property]:
        """Fetch all listings and make them current.

        Raises:
            StaleLoadError: If a newer load or a cancel superseded this one.
            CatalogError: If the store failed. ``error`` keeps the failure and
                ``properties`` keeps the last good collection.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None

        try:
            data = await self._store.get_all()
        except CatalogError as e:
            if generation != self._generation:
                raise StaleLoadError(f"Load {generation} superseded") from e
            self.error = e
            self.loading = False
            logger.warning("catalog_load_failed", generation=generation, error=str(e))
            raise

        if generation != self._generation:
            logger.debug(
                "catalog_stale_load_discarded", generation=generation, latest=self._generation
            )
            raise StaleLoadError(f"Load {generation} superseded by {self._generation}")

        self.properties = data
        self.loading = False
        logger.info("catalog_loaded", generation=generation, count=len(data))
        return data

    def featured(self, count: int = 3) -> list[Property]:
        """The first ``count`` listings in store order."""
        return self.properties[:count]

    async def get_detail(self, property_id: str, favorites: FavoritesReconciler) -> PropertyDetail:
        """Fetch one listing and whether it is favorited.

        Raises:
            NotFoundError: If no listing has this ID.
        """
        prop = await self._store.get_by_id(property_id)
        return PropertyDetail(property=prop, is_favorite=await favorites.is_favorite(prop.id))
