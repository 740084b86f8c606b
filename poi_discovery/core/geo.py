from __future__ import annotations

import math
from typing import Sequence, Tuple

from poi_discovery.core.contracts import BBox4

_EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Great-circle distance in km between two (lat, lng) points."""
    lat1, lon1 = math.radians(a[0]), math.radians(a[1])
    lat2, lon2 = math.radians(b[0]), math.radians(b[1])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2.0 * _EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(x)))


def route_distance_km(geometry: Sequence[Tuple[float, float]]) -> float:
    total = 0.0
    for i in range(1, len(geometry)):
        total += haversine_km(geometry[i - 1], geometry[i])
    return total


def bbox_around_points(points: Sequence[Tuple[float, float]], buffer_km: float) -> BBox4:
    """Tight BBox4 around (lat, lng) points, grown by a km buffer."""
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lng, max_lng = min(lngs), max(lngs)

    buf_deg_lat = buffer_km / 111.32
    center_lat = (min_lat + max_lat) / 2.0
    cos_v = max(0.2, math.cos(math.radians(center_lat)))
    buf_deg_lng = buffer_km / (111.32 * cos_v)

    return BBox4(
        minLat=min_lat - buf_deg_lat,
        maxLat=max_lat + buf_deg_lat,
        minLng=min_lng - buf_deg_lng,
        maxLng=max_lng + buf_deg_lng,
    )


def min_distance_to_points_km(
    lat: float, lng: float, points: Sequence[Tuple[float, float]]
) -> float:
    """
    Approximate distance from a point to the route as the minimum distance
    to any of its sample points.  Good enough for detour estimates without
    segment projection.
    """
    best = float("inf")
    for p in points:
        d = haversine_km((lat, lng), p)
        if d < best:
            best = d
            if d < 0.5:
                break
    return best
