"""
Role-based view composition.

Each builder reads the slice of the mission and profile stores that one
role sees and folds it into a snapshot.  Pollers call these on every tick,
so aggregates are recomputed from scratch each time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain import stats
from src.domain.entities import Mission, Profile
from src.domain.enums import MissionStatus, Role
from src.domain.matching import MissionMatch, nearby_missions
from src.infrastructure.repositories import MissionRepository, ProfileRepository
from src.services.session import SessionContext


@dataclass
class CustomerOrder:
    mission: Mission
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None


@dataclass
class CustomerView:
    user_id: str
    orders: list[CustomerOrder] = field(default_factory=list)
    role: Role = Role.CUSTOMER


@dataclass
class DriverView:
    user_id: str
    is_online: bool = False
    available: list[MissionMatch] = field(default_factory=list)
    active: list[Mission] = field(default_factory=list)
    earnings: int = 0
    completed_count: int = 0
    rating: float = stats.DEFAULT_RATING
    weekly_earnings: list[int] = field(default_factory=lambda: [0] * 7)
    role: Role = Role.DRIVER


@dataclass
class AdminView:
    missions: list[Mission] = field(default_factory=list)
    drivers: list[Profile] = field(default_factory=list)
    revenue: int = 0
    active_count: int = 0
    fleet_size: int = 0
    online_drivers: int = 0
    role: Role = Role.ADMIN


RoleView = Union[CustomerView, DriverView, AdminView]


async def build_customer_view(
    missions: MissionRepository, profiles: ProfileRepository, user_id: str
) -> CustomerView:
    own = await missions.select(customer_id=user_id)
    drivers = await profiles.get_many(m.driver_id for m in own)
    orders = []
    for m in own:
        driver = drivers.get(m.driver_id) if m.driver_id else None
        orders.append(
            CustomerOrder(
                mission=m,
                driver_name=driver.full_name if driver else None,
                driver_phone=driver.phone_number if driver else None,
            )
        )
    return CustomerView(user_id=user_id, orders=orders)


async def build_driver_view(
    missions: MissionRepository, profiles: ProfileRepository, user_id: str
) -> DriverView:
    profile = await profiles.get(user_id)
    view = DriverView(user_id=user_id, is_online=bool(profile and profile.is_online))

    if view.is_online:
        pending = await missions.select(status=MissionStatus.PENDING)
        view.available = nearby_missions(
            profile.location,
            pending,
            radius_km=settings.match_radius_km,
            resolution=settings.h3_resolution,
        )
        view.active = await missions.select(
            driver_id=user_id,
            statuses=(MissionStatus.IN_PROGRESS, MissionStatus.ARRIVED),
        )

    # Earnings are shown whether or not the driver is online.
    done = await missions.select(driver_id=user_id, status=MissionStatus.COMPLETED)
    view.earnings = stats.driver_earnings(done, user_id)
    view.completed_count = len(done)
    view.rating = stats.average_rating(done)
    view.weekly_earnings = stats.earnings_by_weekday(done)
    return view


async def build_admin_view(
    missions: MissionRepository, profiles: ProfileRepository
) -> AdminView:
    everything = await missions.select()
    drivers = await profiles.select(role=Role.DRIVER)
    return AdminView(
        missions=everything,
        drivers=drivers,
        revenue=stats.total_revenue(everything),
        active_count=stats.count_active(everything),
        fleet_size=len(drivers),
        online_drivers=sum(1 for d in drivers if d.is_online),
    )


async def build_view(session: AsyncSession, ctx: SessionContext) -> RoleView:
    """Dispatch to the builder for the session's role."""
    missions = MissionRepository(session)
    profiles = ProfileRepository(session)
    if ctx.role == Role.ADMIN:
        return await build_admin_view(missions, profiles)
    if ctx.role == Role.DRIVER:
        return await build_driver_view(missions, profiles, ctx.user_id)
    return await build_customer_view(missions, profiles, ctx.user_id)
