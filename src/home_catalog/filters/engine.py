"""Predicate engine: search, filter and sort a listing collection.

``project`` is pure. It never mutates its input, never awaits, and returns
an equal list for equal arguments. Stages run in a fixed order:
search, price, property type, numeric minimums, then one sort.
"""

from collections.abc import Callable, Sequence
from typing import Final

from home_catalog.exceptions import ValidationError
from home_catalog.filters.criteria import FilterCriteria
from home_catalog.models import Property, SortKey

# (sort attribute, descending)
_SORT_ORDERS: Final[dict[SortKey, tuple[Callable[[Property], object], bool]]] = {
    SortKey.NEWEST: (lambda p: p.listing_date, True),
    SortKey.PRICE_LOW: (lambda p: p.price, False),
    SortKey.PRICE_HIGH: (lambda p: p.price, True),
    SortKey.BEDS: (lambda p: p.bedrooms, True),
    SortKey.SIZE: (lambda p: p.square_feet, True),
}


def normalize_query(query: str | None) -> str:
    """Trim and lower-case a search query; None becomes ''."""
    return (query or "").strip().lower()


def matches_query(prop: Property, needle: str) -> bool:
    """Whether a normalized query occurs in the title, address, city or zip code.

    Text fields are compared case-insensitively. Zip codes are digits and are
    matched as-is.
    """
    return (
        needle in prop.title.lower()
        or needle in prop.address.lower()
        or needle in prop.city.lower()
        or needle in prop.zip_code
    )


def matches_criteria(prop: Property, criteria: FilterCriteria) -> bool:
    """Whether a property satisfies every set field of the criteria."""
    if criteria.price_min is not None and prop.price < criteria.price_min:
        return False
    if criteria.price_max is not None and prop.price > criteria.price_max:
        return False
    if criteria.property_types and prop.property_type not in criteria.property_types:
        return False
    if criteria.bedrooms_min is not None and prop.bedrooms < criteria.bedrooms_min:
        return False
    if criteria.bathrooms_min is not None and prop.bathrooms < criteria.bathrooms_min:
        return False
    return not (
        criteria.square_feet_min is not None and prop.square_feet < criteria.square_feet_min
    )


def sort_properties(properties: Sequence[Property], sort_key: SortKey | str) -> list[Property]:
    """Return a new list ordered by the given sort key (unknown keys sort newest first)."""
    key, descending = _SORT_ORDERS[SortKey.parse(sort_key)]
    return sorted(properties, key=key, reverse=descending)  # type: ignore[arg-type]


def project(
    properties: Sequence[Property],
    query: str | None,
    filters: FilterCriteria | None,
    sort_key: SortKey | str = SortKey.NEWEST,
) -> list[Property]:
    """Compute the displayed listings.

    Args:
        properties: Base collection. Left untouched.
        query: Free-text search; blank means no search.
        filters: Structured criteria; None means no constraint.
        sort_key: One of the SortKey values.

    Returns:
        A new list holding the matching properties in display order.

    Raises:
        ValidationError: If ``properties`` is not a sequence of Property.
    """
    if not isinstance(properties, list | tuple):
        raise ValidationError(
            f"properties must be a list of Property, got {type(properties).__name__}"
        )
    if not all(isinstance(p, Property) for p in properties):
        raise ValidationError("properties must contain only Property instances")

    criteria = filters or FilterCriteria()
    needle = normalize_query(query)

    matching = [
        p
        for p in properties
        if (not needle or matches_query(p, needle)) and matches_criteria(p, criteria)
    ]
    return sort_properties(matching, sort_key)


def has_active_filters(query: str | None, filters: FilterCriteria | None) -> bool:
    """Whether the browse view is narrowed at all (drives the "clear" control)."""
    return bool(normalize_query(query)) or (filters is not None and filters.is_active)
