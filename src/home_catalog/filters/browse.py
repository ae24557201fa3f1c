"""Mutable browse-page state feeding the predicate engine."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from home_catalog.filters.criteria import FilterCriteria
from home_catalog.filters.engine import has_active_filters, project
from home_catalog.logging import get_logger
from home_catalog.models import Property, PropertyType, SortKey

logger = get_logger(__name__)


@dataclass
class BrowseState:
    """Search text, filter criteria and sort key controlled by the user.

    Holds no derived data: the displayed list is always recomputed from a
    base collection with ``apply``.
    """

    query: str = ""
    filters: FilterCriteria = field(default_factory=FilterCriteria)
    sort_key: SortKey = SortKey.NEWEST

    def set_query(self, query: str | None) -> None:
        self.query = query or ""

    def set_sort(self, sort_key: SortKey | str) -> None:
        self.sort_key = SortKey.parse(sort_key)

    def update_filters(self, **changes: Any) -> FilterCriteria:
        """Merge field changes into the criteria, re-running coercion."""
        merged = {**self.filters.model_dump(), **changes}
        self.filters = FilterCriteria.model_validate(merged)
        return self.filters

    def toggle_property_type(self, property_type: PropertyType | str, *, selected: bool) -> None:
        """Check or uncheck one property type box."""
        current = {t.value for t in self.filters.property_types}
        value = property_type.value if isinstance(property_type, PropertyType) else property_type
        if selected:
            current.add(value)
        else:
            current = {v for v in current if v.lower() != value.strip().lower()}
        self.update_filters(property_types=current)

    def clear_filters(self) -> None:
        """Reset criteria and search text. The sort key is kept."""
        self.filters = FilterCriteria()
        self.query = ""

    @property
    def has_active_filters(self) -> bool:
        return has_active_filters(self.query, self.filters)

    def apply(self, properties: Sequence[Property]) -> list[Property]:
        """Project the base collection through the current state."""
        displayed = project(properties, self.query, self.filters, self.sort_key)
        logger.debug(
            "projection_complete",
            total_properties=len(properties),
            matching=len(displayed),
            query=self.query.strip() or None,
            sort=self.sort_key.value,
            price_min=self.filters.price_min,
            price_max=self.filters.price_max,
            property_types=sorted(t.value for t in self.filters.property_types),
            bedrooms_min=self.filters.bedrooms_min,
            bathrooms_min=self.filters.bathrooms_min,
            square_feet_min=self.filters.square_feet_min,
        )
        return displayed
