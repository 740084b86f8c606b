from __future__ import annotations

import base64
import hashlib
from typing import Any, Iterable, List, Sequence, Tuple

import orjson

from poi_discovery.core.contracts import Location

# Session cache keys tolerate ~1 km drift between route recalculations.
_KEY_PRECISION = 2
_KEY_MAX_POINTS = 20


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b32(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def downsample_geometry(
    geometry: Sequence[Tuple[float, float]], max_points: int = _KEY_MAX_POINTS
) -> List[Tuple[float, float]]:
    """Every Nth point so that roughly ``max_points`` remain."""
    step = max(1, len(geometry) // max_points)
    return [p for i, p in enumerate(geometry) if i % step == 0]


def discovery_key(
    geometry: Sequence[Tuple[float, float]],
    destination: Location,
    preferences: Iterable[str],
) -> str:
    """
    Deterministic session-cache key for one discovery run:
    down-sampled route + destination, rounded to ~1 km, plus the sorted
    preference set.
    """
    coords = [
        [round(float(lat), _KEY_PRECISION), round(float(lng), _KEY_PRECISION)]
        for lat, lng in downsample_geometry(geometry)
    ]
    payload = {
        "route": coords,
        "dest": [
            round(float(destination.lat), _KEY_PRECISION),
            round(float(destination.lng), _KEY_PRECISION),
        ],
        "prefs": sorted(set(preferences)),
    }
    return sha256_b32(_orjson_dumps(payload))
