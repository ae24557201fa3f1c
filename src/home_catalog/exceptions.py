"""Error taxonomy for the listing catalog.

Every error raised by the core is recoverable: callers at the presentation
boundary decide how to report it and must leave prior state untouched.
"""


class CatalogError(Exception):
    """Base class for all catalog errors."""


class NotFoundError(CatalogError):
    """A referenced property or saved entry does not exist."""


class AlreadySavedError(CatalogError):
    """The property is already in the saved collection."""


class ValidationError(CatalogError):
    """Input is fundamentally malformed (not merely an unparsable filter value)."""


class StoreUnavailableError(CatalogError):
    """A record store call failed or was rejected."""


class StaleLoadError(CatalogError):
    """A load finished after a newer load superseded it; its result was discarded."""
