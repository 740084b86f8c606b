from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from fastapi import APIRouter, Depends

from poi_discovery.core.categories import PREFERENCE_CATEGORY_MAP
from poi_discovery.core.contracts import DiscoverRequest, POISuggestionGroup
from poi_discovery.core.errors import bad_request, unprocessable
from poi_discovery.core.polyline import decode_polyline
from poi_discovery.services.discovery import Discovery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pois")


def get_discovery_service() -> Discovery:
    raise RuntimeError("Discovery must be provided by app dependency override")


def _route_geometry(req: DiscoverRequest) -> List[Tuple[float, float]]:
    if req.geometry:
        return [(float(lat), float(lng)) for lat, lng in req.geometry]
    if req.polyline6:
        try:
            return decode_polyline(req.polyline6, precision=6)
        except ValueError as e:
            unprocessable("bad_polyline", str(e))
    bad_request("bad_discover_request", "Provide geometry or polyline6")


# ──────────────────────────────────────────────────────────────
# /pois/discover
# ──────────────────────────────────────────────────────────────

@router.post("/discover", response_model=POISuggestionGroup)
async def pois_discover(
    req: DiscoverRequest,
    discovery: Discovery = Depends(get_discovery_service),
) -> POISuggestionGroup:
    geometry = _route_geometry(req)

    logger.info(
        "pois_discover: points=%d prefs=%s dest=(%.4f,%.4f)",
        len(geometry),
        ",".join(req.preferences) or "-",
        req.destination.lat,
        req.destination.lng,
    )

    return await discovery.fetch_poi_suggestions(
        geometry=geometry,
        origin=req.origin,
        destination=req.destination,
        preferences=req.preferences,
    )


# ──────────────────────────────────────────────────────────────
# /pois/categories
# ──────────────────────────────────────────────────────────────

@router.get("/categories")
def pois_categories() -> Dict[str, List[str]]:
    return {pref: list(cats) for pref, cats in PREFERENCE_CATEGORY_MAP.items()}
