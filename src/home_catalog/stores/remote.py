"""Record stores backed by a remote JSON record API.

Transport failures, timeouts and unexpected statuses surface as
StoreUnavailableError. A 404 becomes NotFoundError and a 409 on create
becomes AlreadySavedError, matching the in-memory stores.
"""

from typing import Any, Final

import httpx
import pydantic
from pydantic import TypeAdapter

from home_catalog.exceptions import AlreadySavedError, NotFoundError, StoreUnavailableError
from home_catalog.filters.criteria import FilterCriteria
from home_catalog.logging import get_logger
from home_catalog.models import Property, SavedProperty
from home_catalog.stores.base import PropertyStore, SavedPropertyStore

logger = get_logger(__name__)

DEFAULT_TIMEOUT: Final = 10.0

_PROPERTY = TypeAdapter(Property)
_PROPERTY_LIST = TypeAdapter(list[Property])
_SAVED = TypeAdapter(SavedProperty)
_SAVED_LIST = TypeAdapter(list[SavedProperty])


def criteria_to_record(criteria: FilterCriteria) -> dict[str, Any]:
    """Serialize criteria for the API, omitting unset fields."""
    record: dict[str, Any] = {
        "priceMin": criteria.price_min,
        "priceMax": criteria.price_max,
        "bedroomsMin": criteria.bedrooms_min,
        "bathroomsMin": criteria.bathrooms_min,
        "squareFeetMin": criteria.square_feet_min,
    }
    if criteria.property_types:
        record["propertyTypes"] = sorted(t.value for t in criteria.property_types)
    return {k: v for k, v in record.items() if v is not None}


class _RecordApiClient:
    """Shared request/response handling for one record collection."""

    resource: str = ""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self, method: str, path: str, *, not_found: str | None = None, **kwargs: Any
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the API base URL.
            not_found: Message for NotFoundError on a 404. None treats 404 as a failure.
            **kwargs: Passed through to ``httpx.AsyncClient.request``.
        """
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(
                "store_request_failed", method=method, path=path, error=str(e), exc_info=True
            )
            raise StoreUnavailableError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404 and not_found is not None:
            raise NotFoundError(not_found)
        if resp.status_code == 409:
            raise AlreadySavedError(resp.text or f"{method} {path} conflicted")
        if resp.is_error:
            logger.warning(
                "store_request_rejected", method=method, path=path, status=resp.status_code
            )
            raise StoreUnavailableError(f"{method} {path} returned {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise StoreUnavailableError(f"{method} {path} returned invalid JSON") from e
        # Record platforms commonly wrap results in an envelope
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    @staticmethod
    def _parse(adapter: TypeAdapter[Any], payload: Any, *, what: str) -> Any:
        try:
            return adapter.validate_python(payload)
        except pydantic.ValidationError as e:
            logger.warning("store_response_malformed", what=what, errors=e.error_count())
            raise StoreUnavailableError(f"Malformed {what} in store response") from e


class RemotePropertyStore(_RecordApiClient, PropertyStore):
    """Listings served by ``/properties``."""

    resource = "/properties"

    async def get_all(self) -> list[Property]:
        data = await self._request("GET", self.resource)
        result: list[Property] = self._parse(_PROPERTY_LIST, data, what="properties")
        return result

    async def get_by_id(self, property_id: str) -> Property:
        data = await self._request(
            "GET",
            f"{self.resource}/{property_id}",
            not_found=f"Property {property_id} not found",
        )
        result: Property = self._parse(_PROPERTY, data, what="property")
        return result

    async def search(self, text: str) -> list[Property]:
        data = await self._request("GET", self.resource, params={"search": text})
        result: list[Property] = self._parse(_PROPERTY_LIST, data, what="properties")
        return result

    async def filter(self, criteria: FilterCriteria) -> list[Property]:
        data = await self._request(
            "POST", f"{self.resource}/filter", json=criteria_to_record(criteria)
        )
        result: list[Property] = self._parse(_PROPERTY_LIST, data, what="properties")
        return result

    async def create(self, prop: Property) -> Property:
        data = await self._request("POST", self.resource, json=prop.to_record())
        result: Property = self._parse(_PROPERTY, data, what="property")
        return result

    async def update(self, property_id: str, changes: dict[str, Any]) -> Property:
        data = await self._request(
            "PATCH",
            f"{self.resource}/{property_id}",
            json=changes,
            not_found=f"Property {property_id} not found",
        )
        result: Property = self._parse(_PROPERTY, data, what="property")
        return result

    async def delete(self, property_id: str) -> Property:
        data = await self._request(
            "DELETE",
            f"{self.resource}/{property_id}",
            not_found=f"Property {property_id} not found",
        )
        result: Property = self._parse(_PROPERTY, data, what="property")
        return result


class RemoteSavedPropertyStore(_RecordApiClient, SavedPropertyStore):
    """Saved entries served by ``/saved-properties``, addressed by property ID."""

    resource = "/saved-properties"

    async def get_all(self) -> list[SavedProperty]:
        data = await self._request("GET", self.resource)
        result: list[SavedProperty] = self._parse(_SAVED_LIST, data, what="saved properties")
        return result

    async def get_by_property_id(self, property_id: str) -> SavedProperty:
        data = await self._request(
            "GET",
            f"{self.resource}/{property_id}",
            not_found=f"Saved property {property_id} not found",
        )
        result: SavedProperty = self._parse(_SAVED, data, what="saved property")
        return result

    async def create(self, entry: SavedProperty) -> SavedProperty:
        data = await self._request("POST", self.resource, json=entry.to_record())
        result: SavedProperty = self._parse(_SAVED, data, what="saved property")
        return result

    async def update(self, property_id: str, changes: dict[str, Any]) -> SavedProperty:
        data = await self._request(
            "PATCH",
            f"{self.resource}/{property_id}",
            json=changes,
            not_found=f"Saved property {property_id} not found",
        )
        result: SavedProperty = self._parse(_SAVED, data, what="saved property")
        return result

    async def delete(self, property_id: str) -> SavedProperty:
        data = await self._request(
            "DELETE",
            f"{self.resource}/{property_id}",
            not_found=f"Saved property {property_id} not found",
        )
        result: SavedProperty = self._parse(_SAVED, data, what="saved property")
        return result

    async def is_saved(self, property_id: str) -> bool:
        try:
            await self._request(
                "GET", f"{self.resource}/{property_id}", not_found="not saved"
            )
        except NotFoundError:
            return False
        return True
