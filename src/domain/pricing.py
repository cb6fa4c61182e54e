"""
Delivery Pricing  (Strategy Pattern)
====================================

Formula
-------
Rounded = ceil((Base_Fare + Distance x Rate_Per_KM) / 100) x 100
Price   = Rounded x Vehicle_Multiplier

* **Vehicle_Multiplier**: bike x1.0, car x1.5, van x2.5, applied to the
  already-rounded base.

Decimal arithmetic keeps the result exact (3.2 km by car is 1950, not
1950.0000000000002).  Output is a non-negative integer in whole currency
units; formatting with a currency symbol is a presentation concern.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from .enums import VehicleClass


def _to_decimal(value: float | int | str) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float) -> int: ...


class DistancePricing(PricingStrategy):
    """Base fare plus a per-km rate, rounded up to the next step."""

    def __init__(
        self, base_fare: int = 500, rate_per_km: int = 250, rounding_step: int = 100
    ):
        self.base_fare = _to_decimal(base_fare)
        self.rate_per_km = _to_decimal(rate_per_km)
        self.rounding_step = _to_decimal(rounding_step)

    def rounded_base(self, distance_km: float) -> Decimal:
        distance = _to_decimal(distance_km)
        if distance < 0:
            raise ValueError(f"Distance must be non-negative, got {distance_km}")
        raw = self.base_fare + self.rate_per_km * distance
        steps = (raw / self.rounding_step).to_integral_value(rounding=ROUND_CEILING)
        return steps * self.rounding_step

    def calculate(self, distance_km: float) -> int:
        return int(self.rounded_base(distance_km))


class VehiclePricing(DistancePricing):
    """Applies a vehicle-class multiplier to the rounded distance price."""

    def __init__(self, multiplier: float | str = "1.0", **kwargs):
        super().__init__(**kwargs)
        self.multiplier = _to_decimal(multiplier)

    def calculate(self, distance_km: float) -> int:
        price = self.rounded_base(distance_km) * self.multiplier
        return int(price.to_integral_value(rounding=ROUND_HALF_UP))


# ── Engine facade ─────────────────────────────────────────────────────


class PricingEngine:
    """High-level API used by order placement and quoting."""

    DEFAULT_MULTIPLIERS = {
        VehicleClass.BIKE: "1.0",
        VehicleClass.CAR: "1.5",
        VehicleClass.VAN: "2.5",
    }

    def __init__(
        self,
        base_fare: int = 500,
        rate_per_km: int = 250,
        rounding_step: int = 100,
        multipliers: dict[VehicleClass, str] | None = None,
    ):
        self.base_fare = base_fare
        self.rate_per_km = rate_per_km
        self.rounding_step = rounding_step
        self.multipliers = dict(multipliers or self.DEFAULT_MULTIPLIERS)

    @classmethod
    def from_settings(cls, settings) -> "PricingEngine":
        return cls(
            base_fare=settings.base_fare,
            rate_per_km=settings.rate_per_km,
            rounding_step=settings.rounding_step,
            multipliers={
                VehicleClass.BIKE: settings.bike_multiplier,
                VehicleClass.CAR: settings.car_multiplier,
                VehicleClass.VAN: settings.van_multiplier,
            },
        )

    def strategy_for(self, vehicle: VehicleClass) -> PricingStrategy:
        return VehiclePricing(
            multiplier=self.multipliers[VehicleClass(vehicle)],
            base_fare=self.base_fare,
            rate_per_km=self.rate_per_km,
            rounding_step=self.rounding_step,
        )

    def calculate_price(
        self, distance_km: float, vehicle: VehicleClass = VehicleClass.BIKE
    ) -> int:
        return self.strategy_for(vehicle).calculate(distance_km)


def format_price(amount: int, symbol: str = "₦") -> str:
    """Render an integer price for display, e.g. ``₦1,950``."""
    return f"{symbol}{amount:,}"
