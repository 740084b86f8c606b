from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from poi_discovery.core.categories import (
    AREA_TAG_QUERIES,
    CATEGORY_RADIUS_M,
    CATEGORY_TAG_QUERIES,
)
from poi_discovery.core.contracts import BBox4, POICategory

# ──────────────────────────────────────────────────────────────
# Execution directives
# ──────────────────────────────────────────────────────────────
# maxsize caps the server-side result buffer at 5 MB; dense city data
# otherwise fills it before corridor content is reached.

CORRIDOR_TIMEOUT_S = 60
BBOX_TIMEOUT_S = 45
RELATION_TIMEOUT_S = 30
DESTINATION_TIMEOUT_S = 45
MAXSIZE_BYTES = 5_242_880


def _header(timeout_s: int, maxsize: int | None = None) -> str:
    if maxsize:
        return f"[out:json][timeout:{timeout_s}][maxsize:{maxsize}];"
    return f"[out:json][timeout:{timeout_s}];"


def _union(header: str, parts: List[str]) -> str:
    return f"{header}({''.join(parts)});out center;"


def _around(radius_m: int, lat: float, lng: float) -> str:
    return f"(around:{int(radius_m)},{lat:.5f},{lng:.5f})"


def is_empty_query(ql: str) -> bool:
    """True for a union with no statements; callers skip the request."""
    return "();" in ql


def batch_points(
    points: Sequence[Tuple[float, float]], size: int
) -> List[List[Tuple[float, float]]]:
    size = max(1, int(size))
    return [list(points[i:i + size]) for i in range(0, len(points), size)]


# ──────────────────────────────────────────────────────────────
# Builders
# ──────────────────────────────────────────────────────────────

def build_around_query(
    points: Sequence[Tuple[float, float]],
    categories: Iterable[POICategory],
) -> str:
    """
    Per-point corridor query: one ``around`` circle per (point, category, tag)
    at the category's radius, all packed into a single union so one request
    covers the whole batch.  Queries node + way only.
    """
    cats = list(categories)
    parts: List[str] = []
    for lat, lng in points:
        for cat in cats:
            around = _around(CATEGORY_RADIUS_M[cat], lat, lng)
            for tag in CATEGORY_TAG_QUERIES[cat]:
                parts.append(f"node{tag}{around};")
                parts.append(f"way{tag}{around};")
    return _union(_header(CORRIDOR_TIMEOUT_S, MAXSIZE_BYTES), parts)


def build_bbox_query(bbox: BBox4, categories: Iterable[POICategory]) -> str:
    """
    Single union over a rectangle.  Cheaper than per-point circles but only
    safe for point/line features: administrative-area predicates are left
    out because evaluating them over a large bbox times out server-side.
    """
    bbox_str = f"({bbox.minLat:.5f},{bbox.minLng:.5f},{bbox.maxLat:.5f},{bbox.maxLng:.5f})"
    parts: List[str] = []
    for cat in categories:
        for tag in CATEGORY_TAG_QUERIES[cat]:
            if tag in AREA_TAG_QUERIES:
                continue
            parts.append(f"node{tag}{bbox_str};")
            parts.append(f"way{tag}{bbox_str};")
    return _union(_header(BBOX_TIMEOUT_S, MAXSIZE_BYTES), parts)


def build_area_relation_query(
    points: Sequence[Tuple[float, float]], radius_m: int = 20_000
) -> str:
    """
    Named protected-area relations (provincial / national parks) around each
    sample point.  Small circles stay fast where a bbox would time out.
    """
    parts = [
        f'relation["boundary"="protected_area"]["name"]{_around(radius_m, lat, lng)};'
        for lat, lng in points
    ]
    return _union(_header(RELATION_TIMEOUT_S), parts)


def build_destination_query(
    destination: Tuple[float, float],
    categories: Iterable[POICategory],
    radius_m: int = 50_000,
) -> str:
    """
    Everything around the destination at one wide radius (covers the whole
    urban area).  Includes relations so parks mapped as boundaries show up.
    """
    lat, lng = destination
    around = _around(radius_m, lat, lng)
    parts: List[str] = []
    for cat in categories:
        for tag in CATEGORY_TAG_QUERIES[cat]:
            parts.append(f"node{tag}{around};")
            parts.append(f"way{tag}{around};")
            parts.append(f"relation{tag}{around};")
    return _union(_header(DESTINATION_TIMEOUT_S), parts)
