"""FilterCriteria model: structured browse filters parsed from form input."""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, field_validator

from home_catalog.models import PropertyType

_TYPES_BY_NAME: dict[str, PropertyType] = {t.value.lower(): t for t in PropertyType}


def parse_threshold(value: object) -> float | None:
    """Parse a numeric threshold from loosely-typed form input.

    Empty, whitespace-only, non-numeric, non-finite and negative values all
    mean "no constraint" and come back as None. Never returns 0 for input
    that was not numerically zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _parse_int_threshold(value: object) -> int | None:
    number = parse_threshold(value)
    return None if number is None else int(number)


def _parse_property_type(value: object) -> PropertyType | None:
    if isinstance(value, PropertyType):
        return value
    if not isinstance(value, str):
        return None
    return _TYPES_BY_NAME.get(value.strip().lower())


class FilterCriteria(BaseModel):
    """Structured browse filters.

    Every field defaults to "no constraint". Validators coerce the string
    values a form submits and silently discard anything unparsable, so an
    empty ``bedrooms_min`` behaves exactly like an absent one.
    """

    model_config = ConfigDict(frozen=True)

    price_min: int | None = None
    price_max: int | None = None
    property_types: frozenset[PropertyType] = frozenset()
    bedrooms_min: float | None = None
    bathrooms_min: float | None = None
    square_feet_min: int | None = None

    @field_validator("price_min", "price_max", "square_feet_min", mode="before")
    @classmethod
    def coerce_int_threshold(cls, v: object) -> int | None:
        return _parse_int_threshold(v)

    @field_validator("bedrooms_min", "bathrooms_min", mode="before")
    @classmethod
    def coerce_float_threshold(cls, v: object) -> float | None:
        return parse_threshold(v)

    @field_validator("property_types", mode="before")
    @classmethod
    def coerce_property_types(cls, v: object) -> frozenset[PropertyType]:
        if not v:
            return frozenset()
        items: Iterable[object]
        if isinstance(v, str):
            items = v.split(",")
        elif isinstance(v, Iterable):
            items = v
        else:
            return frozenset()
        parsed = (_parse_property_type(item) for item in items)
        return frozenset(t for t in parsed if t is not None)

    @property
    def is_active(self) -> bool:
        """Whether any structured filter constrains the result."""
        return bool(self.property_types) or any(
            v is not None
            for v in (
                self.price_min,
                self.price_max,
                self.bedrooms_min,
                self.bathrooms_min,
                self.square_feet_min,
            )
        )

    def active_filter_chips(self) -> list[dict[str, str]]:
        """Build removable filter chip descriptors for the browse controls."""
        chips: list[dict[str, str]] = []
        if self.price_min is not None:
            chips.append({"key": "price_min", "label": f"Min ${self.price_min:,}"})
        if self.price_max is not None:
            chips.append({"key": "price_max", "label": f"Max ${self.price_max:,}"})
        for t in sorted(self.property_types):
            chips.append({"key": "property_types", "label": t.value, "value": t.value})
        if self.bedrooms_min is not None:
            chips.append({"key": "bedrooms_min", "label": f"{self.bedrooms_min:g}+ beds"})
        if self.bathrooms_min is not None:
            chips.append({"key": "bathrooms_min", "label": f"{self.bathrooms_min:g}+ baths"})
        if self.square_feet_min is not None:
            chips.append(
                {"key": "square_feet_min", "label": f"{self.square_feet_min:,}+ sq ft"}
            )
        return chips
