"""Record store capability interfaces.

The catalog core talks to its backends only through these two ABCs. An
in-memory mock and a remote record API implement the same contract and are
interchangeable.
"""

from abc import ABC, abstractmethod
from typing import Any

from home_catalog.filters.criteria import FilterCriteria
from home_catalog.models import Property, SavedProperty


class PropertyStore(ABC):
    """Source of listings."""

    @abstractmethod
    async def get_all(self) -> list[Property]:
        """Return every listing."""
        ...

    @abstractmethod
    async def get_by_id(self, property_id: str) -> Property:
        """Return one listing.

        Raises:
            NotFoundError: If no listing has this ID.
        """
        ...

    @abstractmethod
    async def search(self, text: str) -> list[Property]:
        """Return listings whose text fields contain ``text`` (case-insensitive)."""
        ...

    @abstractmethod
    async def filter(self, criteria: FilterCriteria) -> list[Property]:
        """Return listings satisfying the structured criteria."""
        ...

    @abstractmethod
    async def create(self, prop: Property) -> Property:
        """Add a listing, returning it as stored."""
        ...

    @abstractmethod
    async def update(self, property_id: str, changes: dict[str, Any]) -> Property:
        """Apply field changes to a listing.

        Raises:
            NotFoundError: If no listing has this ID.
        """
        ...

    @abstractmethod
    async def delete(self, property_id: str) -> Property:
        """Remove a listing, returning what was removed.

        Raises:
            NotFoundError: If no listing has this ID.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release store resources (e.g. HTTP connections)."""


class SavedPropertyStore(ABC):
    """Collection of saved (favorited) entries, keyed by property ID."""

    @abstractmethod
    async def get_all(self) -> list[SavedProperty]:
        ...

    @abstractmethod
    async def get_by_property_id(self, property_id: str) -> SavedProperty:
        """Raises NotFoundError if the property is not saved."""
        ...

    @abstractmethod
    async def create(self, entry: SavedProperty) -> SavedProperty:
        """Persist a new entry.

        Raises:
            AlreadySavedError: If the store already holds an entry for this property.
        """
        ...

    @abstractmethod
    async def update(self, property_id: str, changes: dict[str, Any]) -> SavedProperty:
        """Raises NotFoundError if the property is not saved."""
        ...

    @abstractmethod
    async def delete(self, property_id: str) -> SavedProperty:
        """Raises NotFoundError if the property is not saved."""
        ...

    @abstractmethod
    async def is_saved(self, property_id: str) -> bool:
        ...

    async def close(self) -> None:  # noqa: B027
        """Release store resources (e.g. HTTP connections)."""
