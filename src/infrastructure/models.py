"""
SQLAlchemy ORM models.

Tables
------
* ``profiles``  -- one row per auth identity (customer, driver or admin)
* ``missions``  -- delivery orders

Status, role and vehicle columns are plain strings; they are validated
when rows are decoded into domain entities, so a bad value written by
another client is rejected at read time instead of crashing the mapper.

Indexes
-------
* **B-Tree** on ``missions.status``, ``customer_id``, ``driver_id`` and
  ``created_at`` for the per-role poll queries.
* **B-Tree** on ``profiles.role`` for the admin fleet query.

Check constraints keep ``price`` non-negative and ``rating`` in 1..5.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    role = Column(String(20), nullable=True)
    full_name = Column(String(120), nullable=True)
    phone_number = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)

    # Drivers only
    is_online = Column(Boolean, default=False, nullable=False)
    current_lat = Column(Float, nullable=True)
    current_lng = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (Index("idx_profiles_role", "role"),)


class MissionModel(Base):
    __tablename__ = "missions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(64), ForeignKey("profiles.id"), nullable=False)

    pickup = Column(String(255), nullable=False)
    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    dropoff = Column(String(255), nullable=False)
    dropoff_lat = Column(Float, nullable=False)
    dropoff_lng = Column(Float, nullable=False)

    distance_km = Column(Float, nullable=False)
    vehicle = Column(String(10), nullable=False, default="bike")
    price = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    delivery_pin = Column(String(4), nullable=False)
    driver_id = Column(String(64), ForeignKey("profiles.id"), nullable=True)
    rating = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("idx_missions_status", "status"),
        Index("idx_missions_customer", "customer_id"),
        Index("idx_missions_driver", "driver_id"),
        Index("idx_missions_created", "created_at"),
        CheckConstraint("price >= 0", name="ck_missions_price_non_negative"),
        CheckConstraint(
            "rating IS NULL OR rating BETWEEN 1 AND 5",
            name="ck_missions_rating_range",
        ),
    )
