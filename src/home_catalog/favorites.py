"""Favorite-state reconciler: keeps favorite flags in step with the saved store.

The saved-property store is the source of truth. The reconciler holds only
one boolean per property ID (for rendering) and updates it after a mutation
succeeds, before returning to the caller. A failed mutation propagates the
error and leaves the flag as it was, except when the store reports that the
flag was stale (already saved, or not saved): the flag then takes the state
the store reported.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from home_catalog.exceptions import AlreadySavedError, CatalogError, NotFoundError
from home_catalog.logging import get_logger
from home_catalog.models import FavoritedProperty, Property, SavedProperty
from home_catalog.stores.base import SavedPropertyStore

logger = get_logger(__name__)


class FavoritesReconciler:
    """Add, remove and query favorites through a SavedPropertyStore.

    Mutations for the same property ID are serialized, so two rapid toggles
    cannot both act on the pre-toggle state.
    """

    def __init__(self, store: SavedPropertyStore) -> None:
        self._store = store
        self._flags: dict[str, bool] = {}
        # property ID -> (lock, callers holding or waiting on it)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _locked(self, property_id: str) -> AsyncIterator[None]:
        """Hold the per-ID lock. It is dropped once no caller holds or awaits it."""
        lock, users = self._locks.get(property_id, (asyncio.Lock(), 0))
        self._locks[property_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[property_id]
            if users == 1:
                del self._locks[property_id]
            else:
                self._locks[property_id] = (lock, users - 1)

    def cached_state(self, property_id: str) -> bool | None:
        """The locally held flag, or None if this ID has not been checked yet."""
        return self._flags.get(property_id)

    async def is_favorite(self, property_id: str) -> bool:
        """Ask the store whether the property is saved, refreshing the local flag."""
        async with self._locked(property_id):
            saved = await self._store.is_saved(property_id)
            self._flags[property_id] = saved
            return saved

    async def add(self, property_id: str) -> SavedProperty:
        """Favorite a property.

        Raises:
            AlreadySavedError: If the property is already saved.
            StoreUnavailableError: If the store call fails.
        """
        async with self._locked(property_id):
            return await self._add(property_id)

    async def remove(self, property_id: str) -> SavedProperty:
        """Unfavorite a property, returning the removed entry.

        Raises:
            NotFoundError: If the property is not saved.
            StoreUnavailableError: If the store call fails.
        """
        async with self._locked(property_id):
            return await self._remove(property_id)

    async def toggle(self, property_id: str) -> bool:
        """Flip the favorite state and return the new state.

        Uses the local flag when known, otherwise asks the store first. If the
        store contradicts a stale flag, the flag is corrected to what the store
        reported and the error propagates, so the next toggle acts on it.
        """
        async with self._locked(property_id):
            current = self._flags.get(property_id)
            if current is None:
                current = await self._store.is_saved(property_id)
            if current:
                await self._remove(property_id)
            else:
                await self._add(property_id)
            return not current

    def _set_corrected(self, property_id: str, saved: bool) -> None:
        previous = self._flags.get(property_id)
        if previous is not None and previous is not saved:
            logger.info("favorite_flag_corrected", property_id=property_id, is_favorite=saved)
        self._flags[property_id] = saved

    async def _add(self, property_id: str) -> SavedProperty:
        if await self._store.is_saved(property_id):
            self._set_corrected(property_id, True)
            raise AlreadySavedError(f"Property {property_id} already saved")
        try:
            created = await self._store.create(
                SavedProperty(property_id=property_id, saved_date=datetime.now(UTC), notes="")
            )
        except AlreadySavedError:
            self._set_corrected(property_id, True)
            raise
        self._flags[property_id] = True
        logger.info("favorite_added", property_id=property_id)
        return created

    async def _remove(self, property_id: str) -> SavedProperty:
        try:
            removed = await self._store.delete(property_id)
        except NotFoundError:
            self._set_corrected(property_id, False)
            raise
        self._flags[property_id] = False
        logger.info("favorite_removed", property_id=property_id)
        return removed

    async def update_notes(self, property_id: str, notes: str) -> SavedProperty:
        """Replace the notes on a saved entry.

        Raises:
            NotFoundError: If the property is not saved.
        """
        async with self._locked(property_id):
            return await self._store.update(property_id, {"notes": notes})

    async def clear_all(self) -> int:
        """Remove every saved entry one by one. Returns how many were removed.

        Stops at the first failure. Entries removed before it stay removed.
        """
        entries = await self._store.get_all()
        for removed, entry in enumerate(entries):
            try:
                await self.remove(entry.property_id)
            except CatalogError as e:
                logger.warning(
                    "favorites_clear_interrupted",
                    removed=removed,
                    total=len(entries),
                    property_id=entry.property_id,
                    error=str(e),
                )
                raise
        logger.info("favorites_cleared", count=len(entries))
        return len(entries)

    async def list_favorited_properties(
        self, all_properties: Sequence[Property]
    ) -> list[FavoritedProperty]:
        """Join the saved collection against the listings, in saved order.

        Entries pointing at a listing that no longer exists are dropped. Flags
        are refreshed from the saved collection, including cached IDs that are
        no longer saved.
        """
        entries = await self._store.get_all()
        by_id = {p.id: p for p in all_properties}
        saved_ids = {entry.property_id for entry in entries}
        for property_id in self._flags.keys() - saved_ids:
            self._flags[property_id] = False

        favorited: list[FavoritedProperty] = []
        for entry in entries:
            self._flags[entry.property_id] = True
            prop = by_id.get(entry.property_id)
            if prop is not None:
                favorited.append(FavoritedProperty.from_saved(prop, entry))

        dropped = len(entries) - len(favorited)
        if dropped:
            logger.debug("favorites_dangling_dropped", count=dropped)
        return favorited
