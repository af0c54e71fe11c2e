import json
import pytest
import httpx

from freightdesk.services.route_provider import RouteMeasurementProvider
from freightdesk.core.errors import DependencyError, GeocodeFailed, RouteNotFound

GEOCODE = {
    "Madrid": {"coordinates": [-3.7038, 40.4168], "label": "Madrid, España", "country": "Spain"},
    "Lisboa": {"coordinates": [-9.1393, 38.7223], "label": "Lisboa, Portugal", "country": "Portugal"},
}


def ors_handler(route_status=200, summary=None, geocode_status=200):
    summary = summary if summary is not None else {"distance": 624321.0, "duration": 21660.0}
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/geocode/search":
            if geocode_status != 200:
                return httpx.Response(geocode_status)
            place = GEOCODE.get(request.url.params["text"])
            features = []
            if place:
                features.append({
                    "geometry": {"coordinates": place["coordinates"]},
                    "properties": {"label": place["label"], "country": place["country"]},
                })
            return httpx.Response(200, json={"features": features})
        if request.url.path == "/v2/directions/driving-car/geojson":
            if route_status != 200:
                return httpx.Response(route_status, json={"error": "no route"})
            return httpx.Response(200, json={"features": [{"properties": {"summary": summary}}]})
        return httpx.Response(404)

    return handler, seen


def provider_for(handler, api_key="test-key"):
    return RouteMeasurementProvider(
        api_key=api_key,
        base_url="https://ors.test",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestRouteMeasurementProvider:

    @pytest.mark.asyncio
    async def test_measure(self):
        handler, seen = ors_handler()
        measurement = await provider_for(handler).measure("Madrid", "Lisboa")

        assert measurement.distance_km == 624.32
        assert measurement.duration_min == 361
        assert measurement.origin_country == "Spain"
        assert measurement.destination_country == "Portugal"
        assert measurement.destination_label == "Lisboa, Portugal"
        assert measurement.origin_coords.lat == 40.4168

        route_request = seen[-1]
        assert route_request.headers["Authorization"] == "test-key"
        body = json.loads(route_request.content)
        assert body["coordinates"] == [[-3.7038, 40.4168], [-9.1393, 38.7223]]

    @pytest.mark.asyncio
    async def test_geocode_sends_country_boundary(self):
        handler, seen = ors_handler()
        await provider_for(handler).measure("Madrid", "Lisboa")

        geocode_request = seen[0]
        assert geocode_request.url.params["boundary.country"] == "ES,PT,FR"
        assert geocode_request.url.params["size"] == "1"

    @pytest.mark.asyncio
    async def test_unknown_address(self):
        handler, _ = ors_handler()
        with pytest.raises(GeocodeFailed):
            await provider_for(handler).measure("Madrid", "Atlantis")

    @pytest.mark.asyncio
    async def test_geocoder_http_error(self):
        handler, _ = ors_handler(geocode_status=503)
        with pytest.raises(GeocodeFailed):
            await provider_for(handler).measure("Madrid", "Lisboa")

    @pytest.mark.asyncio
    async def test_route_http_error(self):
        handler, _ = ors_handler(route_status=404)
        with pytest.raises(RouteNotFound):
            await provider_for(handler).measure("Madrid", "Lisboa")

    @pytest.mark.asyncio
    async def test_route_without_summary(self):
        handler, _ = ors_handler(summary={})
        with pytest.raises(RouteNotFound) as exc:
            await provider_for(handler).measure("Madrid", "Lisboa")
        assert isinstance(exc.value, DependencyError)

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        handler, seen = ors_handler()
        with pytest.raises(DependencyError):
            await provider_for(handler, api_key="").measure("Madrid", "Lisboa")
        assert seen == []
