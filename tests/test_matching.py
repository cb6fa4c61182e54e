"""Unit tests for distance, H3 binning and driver/mission matching."""

import math
import random

import pytest

from src.domain.distance import fallback_distance_km, haversine_km
from src.domain.entities import Location, Mission
from src.domain.matching import (
    mission_h3_cell,
    nearby_missions,
    ring_size_for_radius,
)


def _mission(mission_id: int, lat: float, lng: float) -> Mission:
    return Mission(
        id=mission_id,
        customer_id="c",
        pickup_location=Location(lat, lng),
        delivery_pin="1234",
    )


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(4.8156, 7.0498, 4.8156, 7.0498) == 0.0

    def test_known_distance(self):
        # Garrison -> Rumuokoro is roughly 6.9 km as the crow flies
        d = haversine_km(4.8096, 7.0125, 4.8700, 6.9980)
        assert 6.0 < d < 8.0

    def test_symmetric(self):
        d1 = haversine_km(4.8, 7.0, 6.5, 3.4)
        d2 = haversine_km(6.5, 3.4, 4.8, 7.0)
        assert abs(d1 - d2) < 1e-9


class TestFallbackDistance:
    def test_truncates_to_one_decimal(self):
        exact = haversine_km(4.8096, 7.0125, 4.8700, 6.9980)
        truncated = fallback_distance_km(4.8096, 7.0125, 4.8700, 6.9980)
        assert truncated <= exact < truncated + 0.1
        assert round(truncated, 1) == truncated

    def test_zero(self):
        assert fallback_distance_km(4.8, 7.0, 4.8, 7.0) == 0.0


class TestH3Cell:
    def test_returns_string(self):
        cell = mission_h3_cell(4.8156, 7.0498, 7)
        assert isinstance(cell, str)
        assert len(cell) > 0

    def test_nearby_points_same_cell(self):
        c1 = mission_h3_cell(4.8156, 7.0498, 7)
        c2 = mission_h3_cell(4.8157, 7.0499, 7)
        assert c1 == c2

    def test_ring_grows_with_radius(self):
        assert ring_size_for_radius(20, 7) > ring_size_for_radius(2, 7) >= 1


class TestNearbyMissions:
    def test_ranked_nearest_first(self):
        driver = Location(4.8156, 7.0498)
        far = _mission(1, 4.8700, 6.9980)  # ~8 km
        near = _mission(2, 4.8170, 7.0480)  # ~0.3 km
        matches = nearby_missions(driver, [far, near], radius_km=10)
        assert [m.mission.id for m in matches] == [2, 1]
        assert matches[0].distance_km < matches[1].distance_km

    def test_outside_radius_dropped(self):
        driver = Location(4.8156, 7.0498)
        lagos = _mission(1, 6.5244, 3.3792)
        near = _mission(2, 4.8170, 7.0480)
        matches = nearby_missions(driver, [lagos, near], radius_km=10)
        assert [m.mission.id for m in matches] == [2]

    def test_unknown_location_keeps_order_unranked(self):
        missions = [_mission(3, 4.87, 6.99), _mission(1, 4.81, 7.01)]
        matches = nearby_missions(None, missions)
        assert [m.mission.id for m in matches] == [3, 1]
        assert all(m.distance_km is None for m in matches)

    @pytest.mark.parametrize("radius", [0.5, 3, 10, 25])
    def test_every_match_within_radius(self, radius):
        driver = Location(4.8156, 7.0498)
        grid = [
            _mission(i, 4.70 + 0.02 * (i % 10), 6.95 + 0.02 * (i // 10))
            for i in range(100)
        ]
        for match in nearby_missions(driver, grid, radius_km=radius):
            assert match.distance_km <= radius

    @pytest.mark.parametrize(
        "radius,resolution",
        [(10, 7), (10, 8), (30, 8), (5, 9), (50, 9)],
    )
    def test_no_mission_within_radius_is_missed(self, radius, resolution):
        driver = Location(4.8156, 7.0498)
        rng = random.Random(radius * 100 + resolution)
        span_lat = radius * 1.3 / 111.0
        span_lng = span_lat / math.cos(math.radians(driver.latitude))
        missions = [
            _mission(
                i,
                driver.latitude + rng.uniform(-span_lat, span_lat),
                driver.longitude + rng.uniform(-span_lng, span_lng),
            )
            for i in range(3000)
        ]
        expected = {
            m.id
            for m in missions
            if haversine_km(
                driver.latitude,
                driver.longitude,
                m.pickup_location.latitude,
                m.pickup_location.longitude,
            )
            <= radius
        }
        matches = nearby_missions(
            driver, missions, radius_km=radius, resolution=resolution
        )
        assert {m.mission.id for m in matches} == expected
