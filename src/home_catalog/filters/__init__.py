"""Predicate engine: search, filter and sort listings."""

from home_catalog.filters.browse import BrowseState
from home_catalog.filters.criteria import FilterCriteria, parse_threshold
from home_catalog.filters.engine import has_active_filters, project

__all__ = ["BrowseState", "FilterCriteria", "has_active_filters", "parse_threshold", "project"]
