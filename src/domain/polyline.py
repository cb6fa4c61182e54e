"""
Encoded polyline codec (precision 1e5).

Each coordinate is stored as the signed delta from the previous one,
zig-zag encoded and split into 5-bit chunks, least significant first.
Every chunk except the last carries the 0x20 continuation bit, and 63 is
added so the output stays in printable ASCII.
"""

from __future__ import annotations

PRECISION = 1e5

LatLng = tuple[float, float]


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise ValueError("Truncated polyline")
        chunk = ord(encoded[index]) - 63
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode(encoded: str) -> list[LatLng]:
    """Decode an encoded polyline into ``(lat, lng)`` pairs."""
    points: list[LatLng] = []
    index = lat = lng = 0
    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        dlng, index = _decode_value(encoded, index)
        lat += dlat
        lng += dlng
        points.append((lat / PRECISION, lng / PRECISION))
    return points


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode(points: list[LatLng]) -> str:
    """Encode ``(lat, lng)`` pairs into a polyline string."""
    out = []
    prev_lat = prev_lng = 0
    for lat, lng in points:
        ilat = round(lat * PRECISION)
        ilng = round(lng * PRECISION)
        out.append(_encode_value(ilat - prev_lat))
        out.append(_encode_value(ilng - prev_lng))
        prev_lat, prev_lng = ilat, ilng
    return "".join(out)
