import asyncio
import logging
from typing import Optional, Tuple

import httpx

from freightdesk.core.config import settings
from freightdesk.core.errors import DependencyError, GeocodeFailed, RouteNotFound
from freightdesk.schemas.pricing import GeocodeResult, GeoPoint, RouteMeasurement

logger = logging.getLogger(__name__)


class RouteMeasurementProvider:
    """
    Resolve two free-text addresses into a RouteMeasurement using
    OpenRouteService.

    Steps:
      1. Geocode both addresses via ORS /geocode/search (in parallel).
      2. Request /v2/directions/driving-car/geojson for the route summary.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        country_boundary: Optional[str] = None,
        default_country: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ORS_API_KEY
        self.base_url = (base_url or settings.ORS_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.ORS_TIMEOUT
        self.country_boundary = country_boundary or settings.ORS_COUNTRY_BOUNDARY
        self.default_country = default_country or settings.DEFAULT_COUNTRY
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def geocode(self, client: httpx.AsyncClient, address: str) -> GeocodeResult:
        try:
            response = await client.get(
                f"{self.base_url}/geocode/search",
                params={
                    "api_key": self.api_key,
                    "text": address,
                    "size": "1",
                    "boundary.country": self.country_boundary,
                },
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GeocodeFailed(f"Error geocoding '{address}': {e}") from e

        features = data.get("features") or []
        if not features:
            raise GeocodeFailed(f"No results for address '{address}'")

        feature = features[0]
        lng, lat = feature["geometry"]["coordinates"][:2]
        properties = feature.get("properties") or {}
        return GeocodeResult(
            lat=lat,
            lng=lng,
            label=properties.get("label") or address,
            country=properties.get("country") or self.default_country,
        )

    async def route(
        self, client: httpx.AsyncClient, origin: GeoPoint, destination: GeoPoint
    ) -> Tuple[float, float]:
        """Return (km, minutes) of the fastest driving route."""
        payload = {
            "coordinates": [[origin.lng, origin.lat], [destination.lng, destination.lat]],
            "preference": "fastest",
        }
        try:
            response = await client.post(
                f"{self.base_url}/v2/directions/driving-car/geojson",
                headers={"Authorization": self.api_key, "Content-Type": "application/json"},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RouteNotFound(f"Error calculating route: {e}") from e

        try:
            summary = data["features"][0]["properties"]["summary"]
            meters = float(summary["distance"])
            seconds = float(summary.get("duration", 0))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RouteNotFound("Route response has no summary") from e

        return round(meters / 1000, 2), float(round(seconds / 60))

    async def measure(self, origin: str, destination: str) -> RouteMeasurement:
        if not self.api_key:
            raise DependencyError("ORS_API_KEY not configured in settings.")

        async with self._client() as client:
            origin_geo, destination_geo = await asyncio.gather(
                self.geocode(client, origin),
                self.geocode(client, destination),
            )
            origin_point = GeoPoint(lat=origin_geo.lat, lng=origin_geo.lng)
            destination_point = GeoPoint(lat=destination_geo.lat, lng=destination_geo.lng)
            km, minutes = await self.route(client, origin_point, destination_point)

        logger.info(
            f"Measured {origin_geo.label} -> {destination_geo.label}: {km} km, {minutes} min"
        )
        return RouteMeasurement(
            distance_km=km,
            duration_min=minutes,
            origin_country=origin_geo.country,
            destination_country=destination_geo.country,
            origin_label=origin_geo.label,
            destination_label=destination_geo.label,
            origin_coords=origin_point,
            destination_coords=destination_point,
        )
