"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 1 admin, 3 customers and 4 drivers (around Port Harcourt)
  - 6 sample missions (mix of pending, in_progress, arrived, completed)

Drivers and admins cannot sign up through the API; this script is how
they are provisioned in development.
"""

import asyncio

from sqlalchemy import text

from src.config import settings
from src.domain.entities import Location, Mission, Profile
from src.domain.enums import MissionStatus, Role, VehicleClass
from src.domain.distance import fallback_distance_km
from src.domain.lifecycle import generate_pin
from src.domain.pricing import PricingEngine
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.repositories import MissionRepository, ProfileRepository

# Port Harcourt city centre (approx)
CITY_LAT, CITY_LNG = 4.8156, 7.0498


PROFILES = [
    {"id": "admin-1", "role": Role.ADMIN, "full_name": "Ops Desk", "phone": "+2348000000001"},
    {"id": "cust-ada", "role": Role.CUSTOMER, "full_name": "Ada Okafor", "phone": "+2348010000001"},
    {"id": "cust-tunde", "role": Role.CUSTOMER, "full_name": "Tunde Bello", "phone": "+2348010000002"},
    {"id": "cust-ngozi", "role": Role.CUSTOMER, "full_name": "Ngozi Eze", "phone": "+2348010000003"},
    {"id": "drv-emeka", "role": Role.DRIVER, "full_name": "Emeka Obi", "phone": "+2348020000001",
     "online": True, "lat": 4.8170, "lng": 7.0480},
    {"id": "drv-musa", "role": Role.DRIVER, "full_name": "Musa Ali", "phone": "+2348020000002",
     "online": True, "lat": 4.8300, "lng": 7.0100},
    {"id": "drv-ife", "role": Role.DRIVER, "full_name": "Ife Adeyemi", "phone": "+2348020000003",
     "online": False, "lat": 4.7900, "lng": 7.0200},
    {"id": "drv-kemi", "role": Role.DRIVER, "full_name": "Kemi Lawal", "phone": "+2348020000004",
     "online": False},
]

MISSIONS = [
    # (customer, pickup, dropoff, vehicle, status, driver, rating)
    ("cust-ada", ("Garrison Junction", 4.8096, 7.0125), ("Rumuokoro", 4.8700, 6.9980),
     VehicleClass.BIKE, MissionStatus.PENDING, None, None),
    ("cust-tunde", ("Waterlines", 4.8120, 7.0230), ("Trans Amadi", 4.8130, 7.0550),
     VehicleClass.CAR, MissionStatus.PENDING, None, None),
    ("cust-ngozi", ("Mile 1 Market", 4.7970, 7.0040), ("GRA Phase 2", 4.8240, 7.0020),
     VehicleClass.VAN, MissionStatus.IN_PROGRESS, "drv-emeka", None),
    ("cust-ada", ("Rumuola", 4.8350, 7.0160), ("Eliozu", 4.8600, 7.0300),
     VehicleClass.BIKE, MissionStatus.ARRIVED, "drv-musa", None),
    ("cust-tunde", ("D-Line", 4.8050, 7.0150), ("Choba", 4.8960, 6.9260),
     VehicleClass.CAR, MissionStatus.COMPLETED, "drv-emeka", 5),
    ("cust-ngozi", ("Old GRA", 4.7800, 7.0100), ("Borokiri", 4.7570, 7.0330),
     VehicleClass.BIKE, MissionStatus.COMPLETED, "drv-musa", 4),
]


async def seed():
    pricing = PricingEngine.from_settings(settings)

    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM profiles"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Profiles ──────────────────────────────────────────────────
        profiles = ProfileRepository(session)
        for p in PROFILES:
            location = Location(p["lat"], p["lng"]) if "lat" in p else None
            await profiles.insert(
                Profile(
                    id=p["id"],
                    role=p["role"],
                    full_name=p["full_name"],
                    phone_number=p["phone"],
                    is_online=p.get("online", False),
                    location=location,
                )
            )
        print(f"  Created {len(PROFILES)} profiles")

        # ── Missions ──────────────────────────────────────────────────
        missions = MissionRepository(session)
        for customer, (p_name, p_lat, p_lng), (d_name, d_lat, d_lng), vehicle, status, driver, rating in MISSIONS:
            distance = fallback_distance_km(p_lat, p_lng, d_lat, d_lng)
            mission = Mission(
                customer_id=customer,
                pickup=p_name,
                pickup_location=Location(p_lat, p_lng),
                dropoff=d_name,
                dropoff_location=Location(d_lat, d_lng),
                distance_km=distance,
                vehicle=vehicle,
                price=pricing.calculate_price(distance, vehicle),
                status=MissionStatus.PENDING,
                delivery_pin=generate_pin(),
            )
            mission_id = await missions.insert(mission)
            if status != MissionStatus.PENDING:
                await missions.update(
                    mission_id, status=status, driver_id=driver, rating=rating
                )
        print(f"  Created {len(MISSIONS)} missions")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
