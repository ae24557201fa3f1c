"""In-memory record stores (the mock backend)."""

import asyncio
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Self

import pydantic
from pydantic import TypeAdapter

from home_catalog.exceptions import AlreadySavedError, NotFoundError, ValidationError
from home_catalog.filters.criteria import FilterCriteria
from home_catalog.filters.engine import matches_criteria, matches_query, normalize_query
from home_catalog.logging import get_logger
from home_catalog.models import ListingStatus, Property, SavedProperty
from home_catalog.stores.base import PropertyStore, SavedPropertyStore

logger = get_logger(__name__)

_PROPERTY_LIST = TypeAdapter(list[Property])
_SAVED_LIST = TypeAdapter(list[SavedProperty])


def _apply_changes(model: pydantic.BaseModel, changes: dict[str, Any], *, key: str) -> Any:
    """Re-validate a record with field changes merged in.

    The identifying field may not change. Changes may use either the Python
    field names or the record store's camelCase aliases.
    """
    aliases = {info.alias: name for name, info in type(model).model_fields.items() if info.alias}
    merged = {**model.model_dump(), **{aliases.get(k, k): v for k, v in changes.items()}}
    if merged.get(key) != getattr(model, key):
        raise ValidationError(f"{key} is immutable")
    try:
        return type(model).model_validate(merged)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e


class _SimulatedLatency:
    """Optional delay before each call, mimicking a remote backend."""

    def __init__(self, latency_seconds: float) -> None:
        self.latency_seconds = latency_seconds

    async def _delay(self) -> None:
        # Always yield so callers see the same suspension points as a real store
        await asyncio.sleep(self.latency_seconds)


class InMemoryPropertyStore(_SimulatedLatency, PropertyStore):
    """Listings held in a dict, in insertion order."""

    def __init__(self, properties: Iterable[Property] = (), *, latency_seconds: float = 0.0) -> None:
        super().__init__(latency_seconds)
        self._properties: dict[str, Property] = {p.id: p for p in properties}

    @classmethod
    def from_json(cls, path: str | Path, *, latency_seconds: float = 0.0) -> Self:
        """Seed the store from a JSON array of listing records."""
        properties = _PROPERTY_LIST.validate_json(Path(path).read_bytes())
        logger.info("mock_properties_loaded", path=str(path), count=len(properties))
        return cls(properties, latency_seconds=latency_seconds)

    async def get_all(self) -> list[Property]:
        await self._delay()
        return list(self._properties.values())

    async def get_by_id(self, property_id: str) -> Property:
        await self._delay()
        try:
            return self._properties[property_id]
        except KeyError:
            raise NotFoundError(f"Property {property_id} not found") from None

    async def search(self, text: str) -> list[Property]:
        await self._delay()
        needle = normalize_query(text)
        return [
            p
            for p in self._properties.values()
            if matches_query(p, needle) or needle in p.description.lower()
        ]

    async def filter(self, criteria: FilterCriteria) -> list[Property]:
        await self._delay()
        return [p for p in self._properties.values() if matches_criteria(p, criteria)]

    async def create(self, prop: Property) -> Property:
        """Store a new listing under a fresh ID, dated now and marked available."""
        await self._delay()
        created = prop.model_copy(
            update={
                "id": uuid.uuid4().hex,
                "listing_date": datetime.now(UTC),
                "status": ListingStatus.AVAILABLE,
            }
        )
        self._properties[created.id] = created
        return created

    async def update(self, property_id: str, changes: dict[str, Any]) -> Property:
        await self._delay()
        current = self._properties.get(property_id)
        if current is None:
            raise NotFoundError(f"Property {property_id} not found")
        updated: Property = _apply_changes(current, changes, key="id")
        self._properties[property_id] = updated
        return updated

    async def delete(self, property_id: str) -> Property:
        await self._delay()
        try:
            return self._properties.pop(property_id)
        except KeyError:
            raise NotFoundError(f"Property {property_id} not found") from None


class InMemorySavedPropertyStore(_SimulatedLatency, SavedPropertyStore):
    """Saved entries keyed by property ID."""

    def __init__(
        self, entries: Iterable[SavedProperty] = (), *, latency_seconds: float = 0.0
    ) -> None:
        super().__init__(latency_seconds)
        self._entries: dict[str, SavedProperty] = {e.property_id: e for e in entries}

    @classmethod
    def from_json(cls, path: str | Path, *, latency_seconds: float = 0.0) -> Self:
        """Seed the store from a JSON array of saved-property records."""
        entries = _SAVED_LIST.validate_json(Path(path).read_bytes())
        logger.info("mock_saved_properties_loaded", path=str(path), count=len(entries))
        return cls(entries, latency_seconds=latency_seconds)

    async def get_all(self) -> list[SavedProperty]:
        await self._delay()
        return list(self._entries.values())

    async def get_by_property_id(self, property_id: str) -> SavedProperty:
        await self._delay()
        try:
            return self._entries[property_id]
        except KeyError:
            raise NotFoundError(f"Saved property {property_id} not found") from None

    async def create(self, entry: SavedProperty) -> SavedProperty:
        await self._delay()
        if entry.property_id in self._entries:
            raise AlreadySavedError(f"Property {entry.property_id} already saved")
        created = entry if entry.id else entry.model_copy(update={"id": uuid.uuid4().hex})
        self._entries[created.property_id] = created
        return created

    async def update(self, property_id: str, changes: dict[str, Any]) -> SavedProperty:
        await self._delay()
        current = self._entries.get(property_id)
        if current is None:
            raise NotFoundError(f"Saved property {property_id} not found")
        updated: SavedProperty = _apply_changes(current, changes, key="property_id")
        self._entries[property_id] = updated
        return updated

    async def delete(self, property_id: str) -> SavedProperty:
        await self._delay()
        try:
            return self._entries.pop(property_id)
        except KeyError:
            raise NotFoundError(f"Saved property {property_id} not found") from None

    async def is_saved(self, property_id: str) -> bool:
        await self._delay()
        return property_id in self._entries
