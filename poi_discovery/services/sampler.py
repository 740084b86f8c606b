from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from poi_discovery.core.geo import haversine_km

logger = logging.getLogger(__name__)

# Last sample must land within this of the true destination.
ENDPOINT_TOLERANCE_KM = 1.0


def step_km_for_distance(distance_km: float) -> int:
    """
    Sample spacing for a route of the given length.  Wider steps on longer
    routes keep the number of Overpass queries bounded.
    """
    if distance_km < 500:
        return 30
    if distance_km <= 1500:
        return 60
    return 100


def sample_route(
    geometry: Sequence[Tuple[float, float]],
    total_km: float,
    *,
    max_samples: int = 20,
) -> List[Tuple[float, float]]:
    """
    Reduce a route polyline to ordered anchor points for corridor queries.

    Walks the vertices accumulating great-circle distance and emits the
    current vertex every time the accumulator reaches the step size.  The
    first point is always included; the true last point is appended when the
    walk ended more than 1 km short of it.  Never returns more than
    ``max_samples`` points (the final slot is reused for the destination when
    the cap was hit).
    """
    if len(geometry) <= 2:
        return [(float(p[0]), float(p[1])) for p in geometry]

    cap = max(2, int(max_samples))
    step_km = step_km_for_distance(total_km)

    samples: List[Tuple[float, float]] = [(float(geometry[0][0]), float(geometry[0][1]))]
    acc = 0.0

    for i in range(1, len(geometry)):
        p0 = geometry[i - 1]
        p1 = (float(geometry[i][0]), float(geometry[i][1]))
        seg = haversine_km(p0, p1)
        if seg != seg:  # NaN
            continue
        acc += seg
        if acc >= step_km:
            samples.append(p1)
            acc = 0.0
            if len(samples) >= cap:
                break

    last = (float(geometry[-1][0]), float(geometry[-1][1]))
    if haversine_km(samples[-1], last) > ENDPOINT_TOLERANCE_KM:
        if len(samples) >= cap:
            samples[-1] = last
        else:
            samples.append(last)

    logger.debug(
        "[sampler] points=%d total_km=%.1f step_km=%d samples=%d",
        len(geometry), total_km, step_km, len(samples),
    )
    return samples
