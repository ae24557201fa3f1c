"""Shared pytest fixtures."""

import os
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from home_catalog.config import Settings
from home_catalog.models import Property, PropertyType, SavedProperty
from home_catalog.stores import InMemoryPropertyStore, InMemorySavedPropertyStore

# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=25)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True)
def _isolate_settings_from_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent a local .env file from leaking into test Settings instances."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )


@pytest.fixture
def make_property() -> Callable[..., Property]:
    """Factory for Property instances with sensible defaults and auto-incrementing IDs."""
    _counter = 0

    def _make(
        price: int = 450000,
        property_type: PropertyType = PropertyType.HOUSE,
        bedrooms: int = 3,
        bathrooms: float = 2,
        square_feet: int = 1800,
        city: str = "Austin",
        **overrides: Any,
    ) -> Property:
        nonlocal _counter
        _counter += 1
        defaults: dict[str, Any] = {
            "id": overrides.pop("id", f"p{_counter}"),
            "title": overrides.pop("title", f"Test Property {_counter}"),
            "address": f"{100 + _counter} Test Street",
            "city": city,
            "state": "TX",
            "zip_code": "78701",
            "price": price,
            "property_type": property_type,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "square_feet": square_feet,
            "year_built": 2000,
            "images": ("https://example.com/img.jpg",),
            "latitude": 30.27,
            "longitude": -97.74,
            "listing_date": datetime(2024, 1, _counter % 28 + 1, tzinfo=UTC),
        }
        defaults.update(overrides)
        return Property(**defaults)

    return _make


@pytest.fixture
def sample_properties(make_property: Callable[..., Property]) -> list[Property]:
    """A small, varied collection with distinct prices, sizes and listing dates."""
    return [
        make_property(
            id="austin-condo",
            title="Downtown Condo",
            address="1200 Congress Avenue",
            city="Austin",
            zip_code="78701",
            price=300000,
            property_type=PropertyType.CONDO,
            bedrooms=2,
            bathrooms=2,
            square_feet=1100,
            listing_date=datetime(2024, 3, 10, tzinfo=UTC),
        ),
        make_property(
            id="austin-house",
            title="Family Home",
            address="2104 Bluebonnet Lane",
            city="Austin",
            zip_code="78704",
            price=150000,
            property_type=PropertyType.HOUSE,
            bedrooms=4,
            bathrooms=3.5,
            square_feet=2600,
            listing_date=datetime(2024, 3, 1, tzinfo=UTC),
        ),
        make_property(
            id="portland-loft",
            title="Pearl District Loft",
            address="1030 NW Johnson Street",
            city="Portland",
            zip_code="97209",
            price=450000,
            property_type=PropertyType.APARTMENT,
            bedrooms=1,
            bathrooms=1,
            square_feet=780,
            listing_date=datetime(2024, 3, 15, tzinfo=UTC),
        ),
    ]


@pytest.fixture
def property_store(sample_properties: list[Property]) -> InMemoryPropertyStore:
    return InMemoryPropertyStore(sample_properties)


@pytest.fixture
def saved_store() -> InMemorySavedPropertyStore:
    return InMemorySavedPropertyStore()


@pytest.fixture
def saved_entry() -> SavedProperty:
    return SavedProperty(
        id="s1",
        property_id="austin-house",
        saved_date=datetime(2024, 3, 2, tzinfo=UTC),
        notes="Near the park",
    )
