from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from poi_discovery.core.contracts import Location, POISuggestion
from poi_discovery.core.geo import haversine_km, min_distance_to_points_km

EXCLUSION_FRACTION = 0.04
EXCLUSION_MIN_KM = 25.0
EXCLUSION_MAX_KM = 40.0

# Detours assume ~60 km/h off the main road, there and back.
DETOUR_SPEED_KMH = 60.0


def exclusion_radius_km(total_km: float) -> float:
    return min(EXCLUSION_MAX_KM, max(EXCLUSION_MIN_KM, total_km * EXCLUSION_FRACTION))


def estimate_detour_minutes(distance_from_route_km: float) -> int:
    return int(round(distance_from_route_km * 2.0 / DETOUR_SPEED_KMH * 60.0))


def classify_along_way(
    items: Sequence[POISuggestion],
    *,
    origin: Location,
    destination: Location,
    total_km: float,
    route_points: Sequence[Tuple[float, float]] = (),
) -> List[POISuggestion]:
    """
    Keep corridor candidates that are outside the exclusion radius of both
    endpoints. Survivors come back as along-way copies; the inputs are
    left untouched. Anything near an endpoint is left to the destination
    query.
    """
    radius = exclusion_radius_km(total_km)
    o = (origin.lat, origin.lng)
    d = (destination.lat, destination.lng)

    out: List[POISuggestion] = []
    for it in items:
        p = (it.lat, it.lng)
        if haversine_km(p, o) <= radius or haversine_km(p, d) <= radius:
            continue
        update: Dict[str, Any] = {"bucket": "along-way"}
        if route_points:
            dist = min_distance_to_points_km(it.lat, it.lng, route_points)
            update["distance_from_route_km"] = round(dist, 2)
            update["detour_time_minutes"] = estimate_detour_minutes(dist)
        out.append(it.model_copy(update=update))
    return out


def label_destination(
    items: Sequence[POISuggestion], *, destination: Location
) -> List[POISuggestion]:
    d = (destination.lat, destination.lng)
    return [
        it.model_copy(update={
            "bucket": "destination",
            "distance_from_route_km": round(haversine_km((it.lat, it.lng), d), 2),
        })
        for it in items
    ]
