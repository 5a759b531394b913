"""Exclusivity radius: no pin may be placed closer than radius_m to an existing pin."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

# Same sphere the map widget measures distances on.
EARTH_RADIUS_M = 6_371_000.0
DEFAULT_EXCLUSIVITY_RADIUS_M = 10.0

Position = Sequence[float]  # (lat, lng)


@dataclass(frozen=True)
class PlacementDecision:
    allowed: bool
    nearest_distance_m: float | None = None

    @property
    def too_close(self) -> bool:
        return not self.allowed


def haversine_m(a: Position, b: Position) -> float:
    """Great-circle distance in meters between two (lat, lng) pairs."""
    lat1, lng1 = math.radians(a[0]), math.radians(a[1])
    lat2, lng2 = math.radians(b[0]), math.radians(b[1])
    sin_dlat = math.sin((lat2 - lat1) / 2)
    sin_dlng = math.sin((lng2 - lng1) / 2)
    h = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def check_exclusivity(
    candidate: Position,
    existing: Iterable[Position],
    radius_m: float = DEFAULT_EXCLUSIVITY_RADIUS_M,
) -> PlacementDecision:
    """Rejects iff some existing pin is strictly closer than radius_m."""
    nearest = None
    for pos in existing:
        d = haversine_m(candidate, pos)
        if nearest is None or d < nearest:
            nearest = d
    if nearest is not None and nearest < radius_m:
        return PlacementDecision(allowed=False, nearest_distance_m=nearest)
    return PlacementDecision(allowed=True, nearest_distance_m=nearest)


def bounding_box(candidate: Position, radius_m: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) that contains every point within radius_m.

    Used to narrow a store query before the exact distance test. The longitude
    half-width is the widest point of the circle, asin(sin(d) / cos(lat)); when
    that reaches a pole the box spans every longitude.
    """
    lat, lng = candidate[0], candidate[1]
    angular = radius_m / EARTH_RADIUS_M
    dlat = math.degrees(angular)
    cos_lat = math.cos(math.radians(lat))
    if abs(lat) + dlat >= 90 or cos_lat <= 0:
        return lat - dlat * 1.01, lat + dlat * 1.01, -180.0, 180.0
    ratio = math.sin(angular) / cos_lat
    if ratio >= 1:
        return lat - dlat * 1.01, lat + dlat * 1.01, -180.0, 180.0
    # 1% pad for float error at the edges.
    dlng = math.degrees(math.asin(ratio)) * 1.01
    dlat *= 1.01
    if lng - dlng < -180 or lng + dlng > 180:
        # Box wraps the antimeridian.
        return lat - dlat, lat + dlat, -180.0, 180.0
    return lat - dlat, lat + dlat, lng - dlng, lng + dlng
