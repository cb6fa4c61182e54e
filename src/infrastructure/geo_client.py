"""
Geocoding / routing client.

Talks to two external HTTP services:

* **Nominatim** forward search -- free text to ranked candidate places.
* **OSRM** route service -- driving route between two points, returned as
  an encoded polyline plus a distance in metres.

Both calls are optional enrichments.  Failures never propagate: search
degrades to an empty list and routing degrades to the straight-line
haversine distance with no path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from src.domain import polyline
from src.domain.distance import fallback_distance_km
from src.domain.entities import Location

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
MAX_RESULTS = 5


@dataclass(frozen=True)
class Place:
    latitude: float
    longitude: float
    label: str


@dataclass
class Route:
    distance_km: float
    points: list[tuple[float, float]] = field(default_factory=list)
    fallback: bool = False


class GeoClient:
    def __init__(
        self,
        geocoder_url: str,
        router_url: str,
        country_codes: str = "ng",
        user_agent: str = "dispatch-service/1.0",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.geocoder_url = geocoder_url
        self.router_url = router_url.rstrip("/")
        self.country_codes = country_codes
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings) -> "GeoClient":
        return cls(
            geocoder_url=settings.geocoder_url,
            router_url=settings.router_url,
            country_codes=settings.geo_country_codes,
            user_agent=settings.geo_user_agent,
            timeout=settings.geo_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"headers": {"User-Agent": self.user_agent}}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def search(self, query: str) -> list[Place]:
        """Up to five candidate places for *query*, best first."""
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        params = {
            "format": "json",
            "q": query,
            "countrycodes": self.country_codes,
            "limit": MAX_RESULTS,
        }
        try:
            async with self._client() as client:
                response = await client.get(self.geocoder_url, params=params)
                response.raise_for_status()
                data = response.json()
            return [
                Place(float(item["lat"]), float(item["lon"]), item["display_name"])
                for item in data[:MAX_RESULTS]
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Address search failed for %r: %s", query, exc)
            return []

    async def route(self, origin: Location, destination: Location) -> Route:
        """Driving route, or a haversine fallback with no path."""
        coords = (
            f"{origin.longitude},{origin.latitude};"
            f"{destination.longitude},{destination.latitude}"
        )
        url = f"{self.router_url}/route/v1/driving/{coords}"
        try:
            async with self._client() as client:
                response = await client.get(
                    url, params={"overview": "full", "geometries": "polyline"}
                )
                response.raise_for_status()
                data = response.json()
            if data.get("code", "Ok") != "Ok" or not data.get("routes"):
                raise ValueError(f"no route ({data.get('code')})")
            best = data["routes"][0]
            return Route(
                distance_km=float(best["distance"]) / 1000,
                points=polyline.decode(best["geometry"]),
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Routing failed, using haversine fallback: %s", exc)
            return Route(
                distance_km=fallback_distance_km(
                    origin.latitude,
                    origin.longitude,
                    destination.latitude,
                    destination.longitude,
                ),
                fallback=True,
            )
