"""
Driver-to-Mission Geo Matching
==============================

1. **Spatial Binning**   -- each pending mission's pickup is mapped to an
   H3 hexagon (resolution 7, ~5.16 km²).
2. **Neighbourhood Prefilter** -- a driver only considers missions whose
   pickup cell lies in the ``k``-ring around the driver's own cell, with
   ``k`` derived from the match radius.
3. **Exact Filter + Rank** -- surviving candidates are filtered by
   haversine distance to the pickup and sorted nearest first.

Complexity
----------
Let N = pending missions, K = cells in the k-ring.

* Binning:  O(N)   -- one H3 call per mission
* Ring:     O(K)
* Rank:     O(M log M) for the M missions inside the ring

A driver with no known location gets the missions unranked, newest first,
since there is nothing to measure from.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import h3

from .distance import haversine_km
from .entities import Location, Mission


@dataclass(frozen=True)
class MissionMatch:
    mission: Mission
    distance_km: Optional[float]


def mission_h3_cell(lat: float, lng: float, resolution: int = 7) -> str:
    """Map a geo-point to an H3 hexagonal cell index.  O(1)."""
    return h3.latlng_to_cell(lat, lng, resolution)


def ring_size_for_radius(
    radius_km: float, resolution: int = 7, origin: Optional[str] = None
) -> int:
    """
    k such that the k-ring around *origin* holds every point within
    *radius_km* of any point in *origin*.

    Centres ``k`` grid steps apart are at least ``1.5 * edge * k`` apart,
    and a point lies at most one edge from its own cell centre.  Edge
    lengths are taken from *origin* when given, else the resolution
    average.
    """
    if origin is not None:
        edges = [
            h3.edge_length(e, unit="km") for e in h3.origin_to_directed_edges(origin)
        ]
        shortest, longest = min(edges), max(edges)
    else:
        shortest = longest = h3.average_hexagon_edge_length(resolution, unit="km")
    return max(1, math.ceil((radius_km + 2 * longest) / (1.5 * shortest)))


def nearby_missions(
    driver_location: Optional[Location],
    missions: Iterable[Mission],
    radius_km: float = 10.0,
    resolution: int = 7,
) -> list[MissionMatch]:
    """Rank *missions* by pickup distance from *driver_location*."""
    missions = list(missions)
    if driver_location is None:
        return [MissionMatch(m, None) for m in missions]

    origin = mission_h3_cell(
        driver_location.latitude, driver_location.longitude, resolution
    )
    ring = set(
        h3.grid_disk(origin, ring_size_for_radius(radius_km, resolution, origin))
    )

    matches: list[MissionMatch] = []
    for mission in missions:
        pickup = mission.pickup_location
        if mission_h3_cell(pickup.latitude, pickup.longitude, resolution) not in ring:
            continue
        d = haversine_km(
            driver_location.latitude,
            driver_location.longitude,
            pickup.latitude,
            pickup.longitude,
        )
        if d <= radius_km:
            matches.append(MissionMatch(mission, d))

    matches.sort(key=lambda m: m.distance_km)
    return matches
