"""FastAPI dependency turning browse query parameters into a BrowseState."""

from typing import Annotated

from fastapi import Depends, Query

from home_catalog.filters import BrowseState, FilterCriteria


def parse_browse(
    search: str | None = None,
    sort: str | None = None,
    price_min: str | None = None,
    price_max: str | None = None,
    bedrooms_min: str | None = None,
    bathrooms_min: str | None = None,
    square_feet_min: str | None = None,
    property_type: list[str] = Query(default=[]),
) -> BrowseState:
    """Parse query params into browse state.

    Thresholds arrive as raw strings so that blank or malformed values
    degrade to "no constraint" instead of a 422.
    """
    state = BrowseState(
        filters=FilterCriteria.model_validate(
            {
                "price_min": price_min,
                "price_max": price_max,
                "property_types": property_type,
                "bedrooms_min": bedrooms_min,
                "bathrooms_min": bathrooms_min,
                "square_feet_min": square_feet_min,
            }
        )
    )
    state.set_query(search)
    state.set_sort(sort or "newest")
    return state


BrowseDep = Annotated[BrowseState, Depends(parse_browse)]
