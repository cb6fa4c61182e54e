"""Unit tests for the encoded polyline codec."""

import pytest

from src.domain import polyline

# Reference example from the polyline algorithm documentation.
ENCODED = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_reference_polyline():
    decoded = polyline.decode(ENCODED)
    assert len(decoded) == 3
    for (lat, lng), (exp_lat, exp_lng) in zip(decoded, POINTS):
        assert lat == pytest.approx(exp_lat, abs=1e-5)
        assert lng == pytest.approx(exp_lng, abs=1e-5)


def test_encode_reference_points():
    assert polyline.encode(POINTS) == ENCODED


def test_empty():
    assert polyline.decode("") == []
    assert polyline.encode([]) == ""


def test_round_trip_within_precision():
    route = [(4.80961, 7.01253), (4.81502, 7.00877), (4.86998, 6.99801)]
    decoded = polyline.decode(polyline.encode(route))
    for (lat, lng), (exp_lat, exp_lng) in zip(decoded, route):
        assert abs(lat - exp_lat) <= 1e-5
        assert abs(lng - exp_lng) <= 1e-5


def test_truncated_input_rejected():
    with pytest.raises(ValueError):
        polyline.decode(ENCODED[:-1] + "_")
