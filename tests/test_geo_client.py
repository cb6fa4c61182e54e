"""Geocoding / routing client tests against ``httpx.MockTransport``."""

import httpx
import pytest

from src.domain import polyline
from src.domain.distance import fallback_distance_km
from src.infrastructure.geo_client import GeoClient
from tests.conftest import GARRISON, RUMUOKORO

ROUTE_POINTS = [(4.8096, 7.0125), (4.8400, 7.0050), (4.8700, 6.9980)]


def _client(handler) -> GeoClient:
    return GeoClient(
        geocoder_url="https://geo.test/search",
        router_url="https://route.test/",
        country_codes="ng",
        transport=httpx.MockTransport(handler),
    )


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("service unreachable", request=request)


class TestSearch:
    @pytest.mark.asyncio
    async def test_short_query_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        assert await _client(handler).search("ab ") == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_returns_ranked_places(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(
                200,
                json=[
                    {"lat": str(4.80 + i / 100), "lon": "7.01", "display_name": f"Place {i}"}
                    for i in range(7)
                ],
            )

        places = await _client(handler).search("Garrison")
        assert seen["q"] == "Garrison"
        assert seen["countrycodes"] == "ng"
        assert seen["limit"] == "5"
        assert [p.label for p in places] == [f"Place {i}" for i in range(5)]
        assert places[0].latitude == pytest.approx(4.80)
        assert places[0].longitude == pytest.approx(7.01)

    @pytest.mark.asyncio
    async def test_network_failure_yields_empty_list(self):
        assert await _client(_unreachable).search("Garrison") == []

    @pytest.mark.asyncio
    async def test_server_error_yields_empty_list(self):
        client = _client(lambda request: httpx.Response(503))
        assert await client.search("Garrison") == []

    @pytest.mark.asyncio
    async def test_malformed_payload_yields_empty_list(self):
        client = _client(lambda request: httpx.Response(200, json=[{"lat": "x"}]))
        assert await client.search("Garrison") == []


class TestRoute:
    @pytest.mark.asyncio
    async def test_decodes_route(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={
                    "code": "Ok",
                    "routes": [
                        {"distance": 8240.0, "geometry": polyline.encode(ROUTE_POINTS)}
                    ],
                },
            )

        route = await _client(handler).route(GARRISON, RUMUOKORO)
        # OSRM takes lng,lat
        assert seen["path"] == "/route/v1/driving/7.0125,4.8096;6.998,4.87"
        assert seen["params"] == {"overview": "full", "geometries": "polyline"}
        assert route.distance_km == pytest.approx(8.24)
        assert route.fallback is False
        assert route.points == [pytest.approx(p) for p in ROUTE_POINTS]

    @pytest.mark.asyncio
    async def test_network_failure_falls_back_to_haversine(self):
        route = await _client(_unreachable).route(GARRISON, RUMUOKORO)
        assert route.fallback is True
        assert route.points == []
        assert route.distance_km == fallback_distance_km(
            GARRISON.latitude, GARRISON.longitude,
            RUMUOKORO.latitude, RUMUOKORO.longitude,
        )

    @pytest.mark.asyncio
    async def test_no_route_falls_back(self):
        client = _client(
            lambda request: httpx.Response(200, json={"code": "NoRoute", "routes": []})
        )
        route = await client.route(GARRISON, RUMUOKORO)
        assert route.fallback is True
        assert route.distance_km > 0
