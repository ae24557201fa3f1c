"""Command-line entry point: browse the catalog or serve the HTTP API."""

import argparse
import asyncio
import logging
import sys

from home_catalog.catalog import CatalogLoader
from home_catalog.config import Settings
from home_catalog.exceptions import CatalogError
from home_catalog.favorites import FavoritesReconciler
from home_catalog.filters import BrowseState, FilterCriteria
from home_catalog.logging import configure_logging, get_logger
from home_catalog.models import Property, SortKey
from home_catalog.stores import create_stores

logger = get_logger(__name__)


def _print_property(prop: Property) -> None:
    print(f"\n{prop.title} [{prop.id}]")
    print(
        f"  ${prop.price:,} | {prop.property_type.value} | "
        f"{prop.bedrooms} bd / {prop.bathrooms:g} ba | {prop.square_feet:,} sq ft"
    )
    print(f"  {prop.address}, {prop.city}, {prop.state} {prop.zip_code}")
    print(f"  Listed {prop.listing_date:%Y-%m-%d} | {prop.status.value}")


async def run_browse(settings: Settings, state: BrowseState, *, favorites_only: bool) -> int:
    """Load the catalog, apply the browse state and print the result.

    Returns:
        Process exit code.
    """
    try:
        property_store, saved_store = create_stores(settings)
    except CatalogError as e:
        logger.error("store_setup_failed", error=str(e))
        print(f"Error: {e}")
        return 1

    try:
        loader = CatalogLoader(property_store)
        properties = await loader.load()

        if favorites_only:
            favorites = FavoritesReconciler(saved_store)
            properties = list(await favorites.list_favorited_properties(properties))

        displayed = state.apply(properties)
        print(f"{len(displayed)} of {len(properties)} properties (sorted by {state.sort_key})")
        if state.has_active_filters:
            labels = [c["label"] for c in state.filters.active_filter_chips()]
            if state.query.strip():
                labels.insert(0, f'"{state.query.strip()}"')
            print(f"Filters: {', '.join(labels)}")
        for prop in displayed:
            _print_property(prop)
        return 0
    except CatalogError as e:
        logger.error("browse_failed", error=str(e))
        print(f"Error: {e}")
        return 1
    finally:
        await property_store.close()
        await saved_store.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Home Catalog - search, filter, sort and favorite property listings"
    )
    parser.add_argument("--serve", action="store_true", help="Start the HTTP API server")
    parser.add_argument("--search", default="", help="Match title, address, city or zip code")
    parser.add_argument(
        "--sort",
        default=SortKey.NEWEST.value,
        choices=[k.value for k in SortKey],
        help="Result ordering",
    )
    parser.add_argument("--price-min", default=None)
    parser.add_argument("--price-max", default=None)
    parser.add_argument(
        "--property-type",
        action="append",
        default=[],
        help="Repeatable: House, Condo, Townhouse, Apartment, Land",
    )
    parser.add_argument("--bedrooms-min", default=None)
    parser.add_argument("--bathrooms-min", default=None)
    parser.add_argument("--square-feet-min", default=None)
    parser.add_argument(
        "--favorites",
        action="store_true",
        help="Only show favorited properties",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    args = parser.parse_args()

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error: Failed to load settings. {e}")
        print("Settings are read from HOME_CATALOG_* environment variables or a .env file.")
        sys.exit(1)

    configure_logging(
        json_output=settings.log_json,
        level=logging.DEBUG if args.debug else settings.log_level,
    )

    if args.serve:
        import uvicorn

        from home_catalog.web.app import create_app

        app = create_app(settings)
        uvicorn.run(app, host=settings.web_host, port=settings.web_port, log_level="info")
        return

    state = BrowseState(
        filters=FilterCriteria.model_validate(
            {
                "price_min": args.price_min,
                "price_max": args.price_max,
                "property_types": args.property_type,
                "bedrooms_min": args.bedrooms_min,
                "bathrooms_min": args.bathrooms_min,
                "square_feet_min": args.square_feet_min,
            }
        )
    )
    state.set_query(args.search)
    state.set_sort(args.sort)
    sys.exit(asyncio.run(run_browse(settings, state, favorites_only=args.favorites)))


if __name__ == "__main__":
    main()
