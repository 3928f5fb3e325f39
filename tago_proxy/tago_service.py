"""Client for the TAGO bus location service."""
from typing import Any, Dict, List
import logging

import httpx
from pydantic import ValidationError

from .config import Settings
from .coordinates import resolve_item_coordinates
from .errors import MisconfiguredService, ParseError, UpstreamError
from .models import City, LocationQuery, LocationRecord, city_from_item, location_from_item
from .payload import decode_payload, extract_items

logger = logging.getLogger(__name__)

BUS_LOCATIONS_OPERATION = "getRouteAcctoBusLcList"
CITY_CODES_OPERATION = "getCtyCodeList"


class TagoService:
    """Fetch and normalize data from the TAGO public transit API."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        """
        Initialize the service.

        Args:
            settings: Application settings holding the service key
            client: Shared HTTP client used for upstream calls
        """
        self.settings = settings
        self.client = client

    def _service_key(self) -> str:
        if not self.settings.credential_configured:
            raise MisconfiguredService()
        return self.settings.tago_service_key

    async def _get(self, operation: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Call a TAGO operation and return its normalized item list."""
        url = f"{self.settings.tago_base_url.rstrip('/')}/{operation}"
        params = {
            "serviceKey": self._service_key(),
            "_type": self.settings.response_format,
            **params,
        }

        try:
            response = await self.client.get(
                url,
                params=params,
                timeout=self.settings.request_timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logger.error(f"TAGO {operation} timed out: {e!r}")
            raise UpstreamError("TAGO API request timed out")
        except httpx.HTTPError as e:
            logger.error(f"TAGO {operation} request failed: {e!r}")
            raise UpstreamError("TAGO API request failed", detail=str(e))

        if not response.is_success:
            logger.warning(f"TAGO {operation} returned HTTP {response.status_code}")
            raise UpstreamError("TAGO API error", status=response.status_code)

        try:
            return extract_items(decode_payload(response.text))
        except UpstreamError as e:
            logger.error(f"TAGO {operation} returned an unusable payload: {e.to_dict()}")
            raise

    async def fetch_locations(self, query: LocationQuery) -> List[LocationRecord]:
        """
        Get the current positions of the buses running on a route.

        Args:
            query: City code and route id

        Returns:
            One record per active bus, empty when no bus is running
        """
        items = await self._get(
            BUS_LOCATIONS_OPERATION,
            {
                "cityCode": query.city_code,
                "routeId": query.route_id,
                "numOfRows": self.settings.num_of_rows,
                "pageNo": 1,
            },
        )

        records = []
        for item in items:
            lat, lng = resolve_item_coordinates(item)
            try:
                records.append(location_from_item(item, lat, lng))
            except ValidationError as e:
                raise ParseError(detail=str(e))

        logger.info(
            f"Fetched {len(records)} bus locations for city={query.city_code} route={query.route_id}"
        )
        return records

    async def fetch_cities(self) -> List[City]:
        """Get the city codes supported by TAGO."""
        items = await self._get(CITY_CODES_OPERATION, {})
        try:
            return [city_from_item(item) for item in items]
        except ValidationError as e:
            raise ParseError(detail=str(e))
