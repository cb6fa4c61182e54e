"""Domain enumerations and state-transition rules."""

import enum


class MissionStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ARRIVED = "arrived"
    COMPLETED = "completed"


# Lifecycle order; a mission never moves backward through it.
MISSION_STATUS_ORDER: tuple[MissionStatus, ...] = (
    MissionStatus.PENDING,
    MissionStatus.IN_PROGRESS,
    MissionStatus.ARRIVED,
    MissionStatus.COMPLETED,
)

# State machine: maps current status -> set of valid next statuses.
# Cancellation is a delete of a PENDING row, not a status.
MISSION_TRANSITIONS: dict[MissionStatus, set[MissionStatus]] = {
    MissionStatus.PENDING: {MissionStatus.IN_PROGRESS},
    MissionStatus.IN_PROGRESS: {MissionStatus.ARRIVED},
    MissionStatus.ARRIVED: {MissionStatus.COMPLETED},
    MissionStatus.COMPLETED: set(),
}

ACTIVE_STATUSES: frozenset[MissionStatus] = frozenset(
    {MissionStatus.PENDING, MissionStatus.IN_PROGRESS, MissionStatus.ARRIVED}
)


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    ADMIN = "admin"


class VehicleClass(str, enum.Enum):
    BIKE = "bike"
    CAR = "car"
    VAN = "van"
