"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.config import settings
from src.domain.entities import Location, Mission, Profile
from src.domain.enums import Role, VehicleClass
from src.domain.pricing import format_price
from src.services.orders import Quote
from src.services.session import SessionContext
from src.services.views import AdminView, CustomerView, DriverView, RoleView


# ── Requests ──────────────────────────────────────────────────────────


class ProfileCreateRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=64, description="Auth identity.")
    full_name: Optional[str] = Field(None, max_length=120)
    phone_number: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=255)


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(None, max_length=120)
    phone_number: Optional[str] = Field(None, max_length=32)


class QuoteRequest(BaseModel):
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    dropoff_lat: float = Field(..., ge=-90, le=90)
    dropoff_lng: float = Field(..., ge=-180, le=180)
    vehicle: VehicleClass = VehicleClass.BIKE

    @property
    def pickup_location(self) -> Location:
        return Location(self.pickup_lat, self.pickup_lng)

    @property
    def dropoff_location(self) -> Location:
        return Location(self.dropoff_lat, self.dropoff_lng)


class MissionCreateRequest(QuoteRequest):
    pickup: str = Field(..., min_length=1, max_length=255)
    dropoff: str = Field(..., min_length=1, max_length=255)


class RatingRequest(BaseModel):
    stars: int = Field(..., ge=1, le=5)


class OnlineRequest(BaseModel):
    is_online: bool


class LocationRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# ── Responses ─────────────────────────────────────────────────────────


class ProfileResponse(BaseModel):
    id: str
    role: Optional[Role] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    is_online: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            role=profile.role,
            full_name=profile.full_name,
            phone_number=profile.phone_number,
            email=profile.email,
            is_online=profile.is_online,
            latitude=profile.location.latitude if profile.location else None,
            longitude=profile.location.longitude if profile.location else None,
        )


class MissionResponse(BaseModel):
    id: int
    customer_id: str
    pickup: str
    pickup_lat: float
    pickup_lng: float
    dropoff: str
    dropoff_lat: float
    dropoff_lng: float
    distance_km: float
    vehicle: VehicleClass
    price: int
    price_display: str
    status: str
    delivery_pin: Optional[str] = None
    driver_id: Optional[str] = None
    rating: Optional[int] = None
    created_at: Optional[datetime] = None
    # Only set in a driver's job list
    distance_to_pickup_km: Optional[float] = None


def mission_response(
    mission: Mission,
    viewer: SessionContext,
    distance_to_pickup_km: Optional[float] = None,
) -> MissionResponse:
    """The PIN is only disclosed to the ordering customer and to admins."""
    show_pin = viewer.role == Role.ADMIN or viewer.user_id == mission.customer_id
    return MissionResponse(
        id=mission.id,
        customer_id=mission.customer_id,
        pickup=mission.pickup,
        pickup_lat=mission.pickup_location.latitude,
        pickup_lng=mission.pickup_location.longitude,
        dropoff=mission.dropoff,
        dropoff_lat=mission.dropoff_location.latitude,
        dropoff_lng=mission.dropoff_location.longitude,
        distance_km=mission.distance_km,
        vehicle=mission.vehicle,
        price=mission.price,
        price_display=format_price(mission.price, settings.currency_symbol),
        status=mission.status.value,
        delivery_pin=mission.delivery_pin if show_pin else None,
        driver_id=mission.driver_id,
        rating=mission.rating,
        created_at=mission.created_at,
        distance_to_pickup_km=distance_to_pickup_km,
    )


class QuoteResponse(BaseModel):
    distance_km: float
    vehicle: VehicleClass
    price: int
    price_display: str
    route: list[tuple[float, float]] = []
    fallback: bool = False

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteResponse":
        return cls(
            distance_km=quote.distance_km,
            vehicle=quote.vehicle,
            price=quote.price,
            price_display=format_price(quote.price, settings.currency_symbol),
            route=quote.route_points,
            fallback=quote.fallback,
        )


class PlacedMissionResponse(BaseModel):
    mission: MissionResponse
    quote: QuoteResponse


class PlaceResponse(BaseModel):
    latitude: float
    longitude: float
    label: str

    model_config = {"from_attributes": True}


class CustomerOrderResponse(BaseModel):
    mission: MissionResponse
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None


class CustomerViewResponse(BaseModel):
    role: Literal["customer"] = "customer"
    orders: list[CustomerOrderResponse] = []


class DriverViewResponse(BaseModel):
    role: Literal["driver"] = "driver"
    is_online: bool
    available: list[MissionResponse] = []
    active: list[MissionResponse] = []
    earnings: int
    earnings_display: str
    completed_count: int
    rating: float
    weekly_earnings: list[int]


class AdminViewResponse(BaseModel):
    role: Literal["admin"] = "admin"
    missions: list[MissionResponse] = []
    drivers: list[ProfileResponse] = []
    revenue: int
    revenue_display: str
    active_count: int
    fleet_size: int
    online_drivers: int


def view_response(view: RoleView, viewer: SessionContext):
    if isinstance(view, AdminView):
        return AdminViewResponse(
            missions=[mission_response(m, viewer) for m in view.missions],
            drivers=[ProfileResponse.from_entity(d) for d in view.drivers],
            revenue=view.revenue,
            revenue_display=format_price(view.revenue, settings.currency_symbol),
            active_count=view.active_count,
            fleet_size=view.fleet_size,
            online_drivers=view.online_drivers,
        )
    if isinstance(view, DriverView):
        return DriverViewResponse(
            is_online=view.is_online,
            available=[
                mission_response(match.mission, viewer, match.distance_km)
                for match in view.available
            ],
            active=[mission_response(m, viewer) for m in view.active],
            earnings=view.earnings,
            earnings_display=format_price(view.earnings, settings.currency_symbol),
            completed_count=view.completed_count,
            rating=round(view.rating, 2),
            weekly_earnings=view.weekly_earnings,
        )
    if isinstance(view, CustomerView):
        return CustomerViewResponse(
            orders=[
                CustomerOrderResponse(
                    mission=mission_response(o.mission, viewer),
                    driver_name=o.driver_name,
                    driver_phone=o.driver_phone,
                )
                for o in view.orders
            ]
        )
    raise TypeError(f"Unsupported view type: {type(view).__name__}")


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
