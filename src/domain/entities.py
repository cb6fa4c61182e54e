"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Mission``: enforces the forward-only lifecycle
  (pending -> in_progress -> arrived -> completed).
- ``Mission.check_invariants`` encodes the driver-assignment and PIN rules
  that the store boundary validates on every decoded row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import MISSION_TRANSITIONS, MissionStatus, Role, VehicleClass

PIN_PATTERN = re.compile(r"^\d{4}$")


class InvalidStateTransition(Exception):
    """Raised when a mission status change violates the state machine."""


class NotAuthorized(Exception):
    """Raised when the acting identity may not perform an operation."""


class MalformedRecord(Exception):
    """Raised when a stored row cannot be decoded into a domain entity."""


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Mission:
    id: Optional[int] = None
    customer_id: str = ""
    pickup: str = ""
    pickup_location: Location = field(default_factory=lambda: Location(0, 0))
    dropoff: str = ""
    dropoff_location: Location = field(default_factory=lambda: Location(0, 0))
    distance_km: float = 0.0
    vehicle: VehicleClass = VehicleClass.BIKE
    price: int = 0
    status: MissionStatus = MissionStatus.PENDING
    delivery_pin: str = ""
    driver_id: Optional[str] = None
    rating: Optional[int] = None
    created_at: Optional[datetime] = None

    def transition_to(self, new_status: MissionStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = MISSION_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    @property
    def is_cancellable(self) -> bool:
        return self.status == MissionStatus.PENDING

    def check_invariants(self) -> None:
        if not PIN_PATTERN.match(self.delivery_pin or ""):
            raise MalformedRecord(f"Mission {self.id}: invalid delivery PIN")
        if self.status == MissionStatus.PENDING and self.driver_id is not None:
            raise MalformedRecord(f"Mission {self.id}: pending with a driver")
        if self.status != MissionStatus.PENDING and not self.driver_id:
            raise MalformedRecord(
                f"Mission {self.id}: {self.status.value} without a driver"
            )
        if self.price < 0:
            raise MalformedRecord(f"Mission {self.id}: negative price")
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise MalformedRecord(f"Mission {self.id}: rating out of range")


@dataclass
class Profile:
    id: str = ""
    role: Optional[Role] = None  # None when the stored role is missing/unknown
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    is_online: bool = False
    location: Optional[Location] = None
    created_at: Optional[datetime] = None

    @property
    def is_driver(self) -> bool:
        return self.role == Role.DRIVER
