"""Pydantic models for listings and saved properties."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Final, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PropertyType(StrEnum):
    """Kinds of listing the catalog carries."""

    HOUSE = "House"
    CONDO = "Condo"
    TOWNHOUSE = "Townhouse"
    APARTMENT = "Apartment"
    LAND = "Land"


class ListingStatus(StrEnum):
    """Market status of a listing."""

    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    OFF_MARKET = "off_market"


class SortKey(StrEnum):
    """Orderings offered on the browse page."""

    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    BEDS = "beds"
    SIZE = "size"

    @classmethod
    def parse(cls, value: object) -> "SortKey":
        """Parse a sort option, falling back to newest for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NEWEST


DEFAULT_SORT: Final = SortKey.NEWEST


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so listings from any store compare cleanly."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class _RecordModel(BaseModel):
    """Shared config: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_record(self) -> dict[str, object]:
        """Serialize to the record store's JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class Property(_RecordModel):
    """A real-estate listing."""

    id: str = Field(min_length=1)
    title: str
    address: str
    city: str
    state: str
    zip_code: str
    price: int = Field(ge=0, description="Asking price in whole currency units")
    property_type: PropertyType
    bedrooms: int = Field(ge=0)
    bathrooms: float = Field(ge=0, description="Half baths count as .5")
    square_feet: int = Field(ge=0)
    lot_size: int | None = Field(default=None, ge=0)
    year_built: int
    description: str = ""
    features: tuple[str, ...] = ()
    amenities: tuple[str, ...] = ()
    images: tuple[str, ...] = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    listing_date: datetime
    status: ListingStatus = ListingStatus.AVAILABLE

    @field_validator("listing_date")
    @classmethod
    def normalize_listing_date(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @field_validator("zip_code")
    @classmethod
    def strip_zip_code(cls, v: str) -> str:
        return v.strip()


class SavedProperty(_RecordModel):
    """A favorite: one saved-collection entry pointing at a property."""

    id: str | None = Field(default=None, description="Store-assigned entry ID")
    property_id: str = Field(min_length=1)
    saved_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: str = ""

    @field_validator("saved_date")
    @classmethod
    def normalize_saved_date(cls, v: datetime) -> datetime:
        return _as_utc(v)


class FavoritedProperty(Property):
    """A property joined with the saved entry that favorites it."""

    saved_date: datetime
    notes: str = ""

    @classmethod
    def from_saved(cls, prop: Property, saved: SavedProperty) -> Self:
        """Decorate a property with its saved date and notes."""
        return cls.model_validate(
            {**prop.model_dump(), "saved_date": saved.saved_date, "notes": saved.notes}
        )

    @field_validator("saved_date")
    @classmethod
    def normalize_saved_date(cls, v: datetime) -> datetime:
        return _as_utc(v)
