"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
the store operations the dispatch flow needs: insert, select, partial
update and delete.  Rows leave this module only as validated domain
entities.

Writes are ``UPDATE ... WHERE id = :id`` statements with no version
check, optionally guarded by the statuses the row may still hold.
Concurrent writers that pass the guard resolve by last-write-wins.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import MissionModel, ProfileModel
from src.domain.entities import Location, MalformedRecord, Mission, Profile
from src.domain.enums import MissionStatus, Role, VehicleClass

logger = logging.getLogger(__name__)


def _plain(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v.value if isinstance(v, enum.Enum) else v for k, v in values.items()}


# ── Row decoding ──────────────────────────────────────────────────────


def mission_from_row(row: MissionModel) -> Mission:
    """Decode and validate a mission row; raise ``MalformedRecord``."""
    try:
        mission = Mission(
            id=row.id,
            customer_id=row.customer_id,
            pickup=row.pickup,
            pickup_location=Location(float(row.pickup_lat), float(row.pickup_lng)),
            dropoff=row.dropoff,
            dropoff_location=Location(float(row.dropoff_lat), float(row.dropoff_lng)),
            distance_km=float(row.distance_km),
            vehicle=VehicleClass(row.vehicle),
            price=int(row.price),
            status=MissionStatus(row.status),
            delivery_pin=row.delivery_pin,
            driver_id=row.driver_id,
            rating=row.rating,
            created_at=row.created_at,
        )
    except (TypeError, ValueError) as exc:
        raise MalformedRecord(f"Mission {row.id}: {exc}") from exc
    mission.check_invariants()
    return mission


def profile_from_row(row: ProfileModel) -> Profile:
    try:
        role = Role(row.role) if row.role is not None else None
    except ValueError:
        role = None
    location = None
    if row.current_lat is not None and row.current_lng is not None:
        location = Location(row.current_lat, row.current_lng)
    return Profile(
        id=row.id,
        role=role,
        full_name=row.full_name,
        phone_number=row.phone_number,
        email=row.email,
        is_online=bool(row.is_online),
        location=location,
        created_at=row.created_at,
    )


def _decode_missions(rows: Iterable[MissionModel]) -> list[Mission]:
    missions = []
    for row in rows:
        try:
            missions.append(mission_from_row(row))
        except MalformedRecord as exc:
            logger.warning("Skipping malformed mission row: %s", exc)
    return missions


# ── Repositories ──────────────────────────────────────────────────────


class MissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, mission: Mission) -> int:
        """Persist a new mission and return its id."""
        row = MissionModel(
            customer_id=mission.customer_id,
            pickup=mission.pickup,
            pickup_lat=mission.pickup_location.latitude,
            pickup_lng=mission.pickup_location.longitude,
            dropoff=mission.dropoff,
            dropoff_lat=mission.dropoff_location.latitude,
            dropoff_lng=mission.dropoff_location.longitude,
            distance_km=mission.distance_km,
            vehicle=mission.vehicle.value,
            price=mission.price,
            status=mission.status.value,
            delivery_pin=mission.delivery_pin,
            driver_id=mission.driver_id,
            rating=mission.rating,
        )
        self.session.add(row)
        await self.session.flush()
        mission.id = row.id
        mission.created_at = row.created_at
        return row.id

    async def get(self, mission_id: int) -> Optional[Mission]:
        row = await self.session.get(MissionModel, mission_id)
        return mission_from_row(row) if row else None

    async def select(
        self,
        *,
        status: MissionStatus | None = None,
        exclude_status: MissionStatus | None = None,
        statuses: Iterable[MissionStatus] | None = None,
        driver_id: str | None = None,
        customer_id: str | None = None,
    ) -> list[Mission]:
        """Filtered read, newest first."""
        query = select(MissionModel)
        if status is not None:
            query = query.where(MissionModel.status == status.value)
        if exclude_status is not None:
            query = query.where(MissionModel.status != exclude_status.value)
        if statuses is not None:
            query = query.where(MissionModel.status.in_([s.value for s in statuses]))
        if driver_id is not None:
            query = query.where(MissionModel.driver_id == driver_id)
        if customer_id is not None:
            query = query.where(MissionModel.customer_id == customer_id)
        query = query.order_by(MissionModel.created_at.desc(), MissionModel.id.desc())
        result = await self.session.execute(query)
        return _decode_missions(result.scalars().all())

    async def update(
        self,
        mission_id: int,
        *,
        when_status: Iterable[MissionStatus] | None = None,
        **fields: Any,
    ) -> bool:
        """
        Partial update.  Returns False when no row matched.

        With *when_status* the row is only written while its stored status
        is one of those values, so a write based on a stale read cannot
        move a mission backward.
        """
        if "delivery_pin" in fields:
            raise ValueError("delivery_pin is immutable")
        query = update(MissionModel).where(MissionModel.id == mission_id)
        if when_status is not None:
            query = query.where(
                MissionModel.status.in_([s.value for s in when_status])
            )
        result = await self.session.execute(query.values(**_plain(fields)))
        return result.rowcount > 0

    async def delete(
        self, mission_id: int, *, when_status: MissionStatus | None = None
    ) -> bool:
        query = delete(MissionModel).where(MissionModel.id == mission_id)
        if when_status is not None:
            query = query.where(MissionModel.status == when_status.value)
        result = await self.session.execute(query)
        return result.rowcount > 0


class ProfileRepository:
    IMMUTABLE_FIELDS = frozenset({"id", "role"})

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, profile: Profile) -> str:
        row = ProfileModel(
            id=profile.id,
            role=profile.role.value if profile.role else None,
            full_name=profile.full_name,
            phone_number=profile.phone_number,
            email=profile.email,
            is_online=profile.is_online,
            current_lat=profile.location.latitude if profile.location else None,
            current_lng=profile.location.longitude if profile.location else None,
        )
        self.session.add(row)
        await self.session.flush()
        profile.created_at = row.created_at
        return row.id

    async def get(self, profile_id: str) -> Optional[Profile]:
        row = await self.session.get(ProfileModel, profile_id)
        return profile_from_row(row) if row else None

    async def get_many(self, profile_ids: Iterable[str]) -> dict[str, Profile]:
        ids = {pid for pid in profile_ids if pid}
        if not ids:
            return {}
        result = await self.session.execute(
            select(ProfileModel).where(ProfileModel.id.in_(ids))
        )
        return {row.id: profile_from_row(row) for row in result.scalars().all()}

    async def select(self, *, role: Role | None = None) -> list[Profile]:
        query = select(ProfileModel)
        if role is not None:
            query = query.where(ProfileModel.role == role.value)
        result = await self.session.execute(query.order_by(ProfileModel.id))
        return [profile_from_row(row) for row in result.scalars().all()]

    async def update(self, profile_id: str, **fields: Any) -> bool:
        forbidden = self.IMMUTABLE_FIELDS.intersection(fields)
        if forbidden:
            raise ValueError(f"Immutable profile fields: {sorted(forbidden)}")
        if "location" in fields:
            location: Optional[Location] = fields.pop("location")
            fields["current_lat"] = location.latitude if location else None
            fields["current_lng"] = location.longitude if location else None
        result = await self.session.execute(
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(**_plain(fields))
        )
        return result.rowcount > 0
