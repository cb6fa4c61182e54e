"""
Order quoting and placement.

A quote resolves the route (or its haversine fallback) and prices it for
the requested vehicle class.  Placing an order re-quotes on the service
side so the stored price never comes from the client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.domain.entities import Location, Mission
from src.domain.enums import MissionStatus, Role, VehicleClass
from src.domain.lifecycle import generate_pin, require_role
from src.domain.pricing import PricingEngine
from src.infrastructure.geo_client import GeoClient
from src.infrastructure.repositories import MissionRepository
from src.services.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass
class Quote:
    distance_km: float
    vehicle: VehicleClass
    price: int
    route_points: list[tuple[float, float]] = field(default_factory=list)
    fallback: bool = False


async def quote(
    geo: GeoClient,
    pricing: PricingEngine,
    pickup: Location,
    dropoff: Location,
    vehicle: VehicleClass = VehicleClass.BIKE,
) -> Quote:
    route = await geo.route(pickup, dropoff)
    return Quote(
        distance_km=route.distance_km,
        vehicle=vehicle,
        price=pricing.calculate_price(route.distance_km, vehicle),
        route_points=route.points,
        fallback=route.fallback,
    )


async def place_order(
    missions: MissionRepository,
    geo: GeoClient,
    pricing: PricingEngine,
    actor: SessionContext,
    *,
    pickup: str,
    pickup_location: Location,
    dropoff: str,
    dropoff_location: Location,
    vehicle: VehicleClass = VehicleClass.BIKE,
) -> tuple[Mission, Quote]:
    """Quote the trip and insert it as a pending mission with a fresh PIN."""
    require_role(actor, Role.CUSTOMER)
    q = await quote(geo, pricing, pickup_location, dropoff_location, vehicle)
    mission = Mission(
        customer_id=actor.user_id,
        pickup=pickup,
        pickup_location=pickup_location,
        dropoff=dropoff,
        dropoff_location=dropoff_location,
        distance_km=q.distance_km,
        vehicle=vehicle,
        price=q.price,
        status=MissionStatus.PENDING,
        delivery_pin=generate_pin(),
    )
    await missions.insert(mission)
    logger.info(
        "Mission %s placed by %s (%.1f km, %s, %d)",
        mission.id, actor.user_id, q.distance_km, vehicle.value, q.price,
    )
    return mission, q
