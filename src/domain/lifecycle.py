"""
Mission lifecycle operations with actor checks.

Each operation validates the acting identity, applies the transition to
the in-memory ``Mission`` and returns the partial field dict that the
caller writes through ``MissionRepository.update``.

Concurrency note
----------------
``accept`` does not compare-and-set on ``driver_id``.  Two drivers who
both saw the same pending mission will both pass the check here, and the
store keeps whichever update lands last.  Neither caller receives an
error.  Every write is still guarded by ``write_precondition`` so a stale
read can never move the stored status backward.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any, Optional

from .entities import InvalidStateTransition, Mission, NotAuthorized
from .enums import MissionStatus, Role

if TYPE_CHECKING:
    from src.services.session import SessionContext


# Statuses the stored row may hold when a write lands.  Accept also lands
# on ``in_progress`` so racing accepts keep last-write-wins on driver_id.
WRITE_PRECONDITIONS: dict[MissionStatus, tuple[MissionStatus, ...]] = {
    MissionStatus.IN_PROGRESS: (MissionStatus.PENDING, MissionStatus.IN_PROGRESS),
    MissionStatus.ARRIVED: (MissionStatus.IN_PROGRESS,),
    MissionStatus.COMPLETED: (MissionStatus.ARRIVED,),
}


def write_precondition(changes: dict[str, Any]) -> tuple[MissionStatus, ...]:
    """Statuses the row must still hold for *changes* to be written."""
    target = changes.get("status")
    if target is None:
        # Rating: only completed missions carry one.
        return (MissionStatus.COMPLETED,)
    return WRITE_PRECONDITIONS[MissionStatus(target)]


def generate_pin() -> str:
    """Four-digit delivery PIN in 1000..9999."""
    return str(1000 + secrets.randbelow(9000))


def require_role(actor: "SessionContext", role: Role) -> None:
    if actor.role != role:
        raise NotAuthorized(f"Only a {role.value} may perform this action")


def _require_assigned_driver(mission: Mission, actor: "SessionContext") -> None:
    require_role(actor, Role.DRIVER)
    if mission.driver_id != actor.user_id:
        raise NotAuthorized(f"Mission {mission.id} is assigned to another driver")


def accept(mission: Mission, actor: "SessionContext") -> dict[str, Any]:
    """pending -> in_progress; assigns the acting driver."""
    require_role(actor, Role.DRIVER)
    mission.transition_to(MissionStatus.IN_PROGRESS)
    mission.driver_id = actor.user_id
    return {"status": mission.status, "driver_id": mission.driver_id}


def mark_arrived(mission: Mission, actor: "SessionContext") -> dict[str, Any]:
    """in_progress -> arrived; assigned driver only."""
    _require_assigned_driver(mission, actor)
    mission.transition_to(MissionStatus.ARRIVED)
    return {"status": mission.status}


def complete(mission: Mission, actor: "SessionContext") -> dict[str, Any]:
    """arrived -> completed; assigned driver only."""
    _require_assigned_driver(mission, actor)
    mission.transition_to(MissionStatus.COMPLETED)
    return {"status": mission.status}


def check_cancel(mission: Mission, actor: "SessionContext") -> None:
    """Raise unless *actor* created *mission* and it is still pending."""
    if mission.customer_id != actor.user_id:
        raise NotAuthorized("Only the customer who placed a mission may cancel it")
    if not mission.is_cancellable:
        raise InvalidStateTransition(
            f"Cannot cancel mission in status {mission.status.value}"
        )


def rate(
    mission: Mission, actor: "SessionContext", stars: int
) -> dict[str, Optional[int]]:
    """Attach a 1-5 rating to a completed mission, once, by its customer."""
    if mission.customer_id != actor.user_id:
        raise NotAuthorized("Only the customer who placed a mission may rate it")
    if mission.status != MissionStatus.COMPLETED:
        raise InvalidStateTransition("Only completed missions can be rated")
    if mission.rating is not None:
        raise InvalidStateTransition(f"Mission {mission.id} is already rated")
    if not 1 <= stars <= 5:
        raise ValueError("Rating must be between 1 and 5")
    mission.rating = stars
    return {"rating": stars}
