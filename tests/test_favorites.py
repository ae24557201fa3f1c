"""Tests for FavoritesReconciler."""

import asyncio
from typing import Any

import pytest

from home_catalog.exceptions import AlreadySavedError, NotFoundError, StoreUnavailableError
from home_catalog.favorites import FavoritesReconciler
from home_catalog.models import Property, SavedProperty
from home_catalog.stores import InMemorySavedPropertyStore


class FlakySavedStore(InMemorySavedPropertyStore):
    """Saved store whose mutations fail while ``failing`` is set."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.failing = False

    async def create(self, entry: SavedProperty) -> SavedProperty:
        if self.failing:
            raise StoreUnavailableError("record API down")
        return await super().create(entry)

    async def delete(self, property_id: str) -> SavedProperty:
        if self.failing:
            raise StoreUnavailableError("record API down")
        return await super().delete(property_id)


@pytest.fixture
def favorites(saved_store: InMemorySavedPropertyStore) -> FavoritesReconciler:
    return FavoritesReconciler(saved_store)


class TestAdd:
    async def test_add_creates_entry(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        entry = await favorites.add("austin-condo")

        assert entry.property_id == "austin-condo"
        assert entry.notes == ""
        assert entry.id
        assert await saved_store.is_saved("austin-condo")
        assert favorites.cached_state("austin-condo") is True

    async def test_duplicate_add_raises_and_keeps_one_entry(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        await favorites.add("austin-condo")

        with pytest.raises(AlreadySavedError):
            await favorites.add("austin-condo")

        entries = await saved_store.get_all()
        assert [e.property_id for e in entries] == ["austin-condo"]
        assert favorites.cached_state("austin-condo") is True

    async def test_concurrent_adds_create_one_entry(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        results = await asyncio.gather(
            favorites.add("austin-condo"), favorites.add("austin-condo"), return_exceptions=True
        )

        assert sum(isinstance(r, SavedProperty) for r in results) == 1
        assert sum(isinstance(r, AlreadySavedError) for r in results) == 1
        assert len(await saved_store.get_all()) == 1


class TestRemove:
    async def test_remove_then_list_excludes(
        self,
        favorites: FavoritesReconciler,
        sample_properties: list[Property],
    ) -> None:
        await favorites.add("austin-condo")
        await favorites.add("portland-loft")

        removed = await favorites.remove("austin-condo")

        assert removed.property_id == "austin-condo"
        listed = await favorites.list_favorited_properties(sample_properties)
        assert [p.id for p in listed] == ["portland-loft"]
        assert favorites.cached_state("austin-condo") is False

    async def test_remove_missing_raises(self, favorites: FavoritesReconciler) -> None:
        with pytest.raises(NotFoundError):
            await favorites.remove("austin-condo")
        assert favorites.cached_state("austin-condo") is False


class TestIsFavorite:
    async def test_refreshes_flag_from_store(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        assert favorites.cached_state("austin-house") is None
        assert await favorites.is_favorite("austin-house") is False

        await saved_store.create(SavedProperty(property_id="austin-house"))

        assert await favorites.is_favorite("austin-house") is True
        assert favorites.cached_state("austin-house") is True


class TestToggle:
    async def test_toggle_flips_state(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        assert await favorites.toggle("austin-condo") is True
        assert await saved_store.is_saved("austin-condo")
        assert await favorites.toggle("austin-condo") is False
        assert not await saved_store.is_saved("austin-condo")

    async def test_toggle_checks_store_when_flag_unknown(
        self, saved_store: InMemorySavedPropertyStore, saved_entry: SavedProperty
    ) -> None:
        await saved_store.create(saved_entry)
        favorites = FavoritesReconciler(saved_store)

        assert await favorites.toggle("austin-house") is False
        assert not await saved_store.is_saved("austin-house")

    async def test_concurrent_toggles_serialize(self) -> None:
        slow_store = InMemorySavedPropertyStore(latency_seconds=0.01)
        favorites = FavoritesReconciler(slow_store)

        first, second = await asyncio.gather(
            favorites.toggle("austin-condo"), favorites.toggle("austin-condo")
        )

        assert (first, second) == (True, False)
        assert not await slow_store.is_saved("austin-condo")
        assert favorites.cached_state("austin-condo") is False

    async def test_toggle_recovers_after_entry_removed_elsewhere(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        await favorites.add("austin-condo")
        await saved_store.delete("austin-condo")

        with pytest.raises(NotFoundError):
            await favorites.toggle("austin-condo")

        assert favorites.cached_state("austin-condo") is False
        assert await favorites.toggle("austin-condo") is True
        assert await saved_store.is_saved("austin-condo")

    async def test_toggle_recovers_after_entry_added_elsewhere(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        assert await favorites.is_favorite("austin-condo") is False
        await saved_store.create(SavedProperty(property_id="austin-condo"))

        with pytest.raises(AlreadySavedError):
            await favorites.toggle("austin-condo")

        assert favorites.cached_state("austin-condo") is True
        assert await favorites.toggle("austin-condo") is False
        assert not await saved_store.is_saved("austin-condo")

    async def test_toggle_after_listing_sees_removal_elsewhere(
        self,
        favorites: FavoritesReconciler,
        saved_store: InMemorySavedPropertyStore,
        sample_properties: list[Property],
    ) -> None:
        await favorites.add("austin-condo")
        await saved_store.delete("austin-condo")

        assert await favorites.list_favorited_properties(sample_properties) == []
        assert favorites.cached_state("austin-condo") is False
        assert await favorites.toggle("austin-condo") is True

    async def test_toggles_on_different_ids_independent(
        self, favorites: FavoritesReconciler
    ) -> None:
        results = await asyncio.gather(
            favorites.toggle("austin-condo"), favorites.toggle("portland-loft")
        )
        assert results == [True, True]


class TestFailedMutations:
    async def test_failed_add_leaves_flag_unchanged(self) -> None:
        store = FlakySavedStore()
        favorites = FavoritesReconciler(store)
        assert await favorites.is_favorite("austin-condo") is False
        store.failing = True

        with pytest.raises(StoreUnavailableError):
            await favorites.add("austin-condo")

        assert favorites.cached_state("austin-condo") is False
        assert await store.get_all() == []

    async def test_failed_remove_leaves_flag_unchanged(self) -> None:
        store = FlakySavedStore()
        favorites = FavoritesReconciler(store)
        await favorites.add("austin-condo")
        store.failing = True

        with pytest.raises(StoreUnavailableError):
            await favorites.toggle("austin-condo")

        assert favorites.cached_state("austin-condo") is True
        assert await store.is_saved("austin-condo")


class TestListFavorited:
    async def test_join_in_saved_order(
        self, favorites: FavoritesReconciler, sample_properties: list[Property]
    ) -> None:
        await favorites.add("portland-loft")
        await favorites.add("austin-condo")

        listed = await favorites.list_favorited_properties(sample_properties)

        assert [p.id for p in listed] == ["portland-loft", "austin-condo"]
        assert all(p.notes == "" for p in listed)

    async def test_dangling_entries_dropped(
        self, saved_store: InMemorySavedPropertyStore, sample_properties: list[Property]
    ) -> None:
        await saved_store.create(SavedProperty(property_id="demolished"))
        await saved_store.create(SavedProperty(property_id="austin-house", notes="Near the park"))
        favorites = FavoritesReconciler(saved_store)

        listed = await favorites.list_favorited_properties(sample_properties)

        assert [p.id for p in listed] == ["austin-house"]
        assert listed[0].notes == "Near the park"
        assert favorites.cached_state("austin-house") is True

    async def test_empty_saved_collection(
        self, favorites: FavoritesReconciler, sample_properties: list[Property]
    ) -> None:
        assert await favorites.list_favorited_properties(sample_properties) == []


class TestNotesAndClear:
    async def test_update_notes(self, favorites: FavoritesReconciler) -> None:
        await favorites.add("austin-condo")
        updated = await favorites.update_notes("austin-condo", "Ask about HOA fees")
        assert updated.notes == "Ask about HOA fees"

    async def test_update_notes_missing(self, favorites: FavoritesReconciler) -> None:
        with pytest.raises(NotFoundError):
            await favorites.update_notes("austin-condo", "x")

    async def test_clear_all(
        self, favorites: FavoritesReconciler, saved_store: InMemorySavedPropertyStore
    ) -> None:
        await favorites.add("austin-condo")
        await favorites.add("portland-loft")

        assert await favorites.clear_all() == 2

        assert await saved_store.get_all() == []
        assert favorites.cached_state("austin-condo") is False
        assert favorites.cached_state("portland-loft") is False

    async def test_clear_all_stops_at_first_failure(self) -> None:
        class BrokenDeleteStore(InMemorySavedPropertyStore):
            async def delete(self, property_id: str) -> SavedProperty:
                if property_id == "portland-loft":
                    raise StoreUnavailableError("record API down")
                return await super().delete(property_id)

        store = BrokenDeleteStore()
        favorites = FavoritesReconciler(store)
        for property_id in ("austin-condo", "portland-loft", "austin-house"):
            await favorites.add(property_id)

        with pytest.raises(StoreUnavailableError):
            await favorites.clear_all()

        assert [e.property_id for e in await store.get_all()] == ["portland-loft", "austin-house"]
        assert favorites.cached_state("austin-condo") is False
        assert favorites.cached_state("portland-loft") is True


class TestLocking:
    async def test_is_favorite_waits_for_in_flight_add(self) -> None:
        store = InMemorySavedPropertyStore(latency_seconds=0.01)
        favorites = FavoritesReconciler(store)

        _, saved = await asyncio.gather(
            favorites.add("austin-condo"), favorites.is_favorite("austin-condo")
        )

        assert saved is True
        assert favorites.cached_state("austin-condo") is True

    async def test_locks_released_when_idle(self, favorites: FavoritesReconciler) -> None:
        await asyncio.gather(
            favorites.toggle("austin-condo"),
            favorites.toggle("austin-condo"),
            favorites.is_favorite("portland-loft"),
        )
        with pytest.raises(NotFoundError):
            await favorites.remove("austin-house")

        assert favorites._locks == {}
