from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

LatLng = Tuple[float, float]


class BBox4(BaseModel):
    minLng: float
    minLat: float
    maxLng: float
    maxLat: float


class Location(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    lat: float
    lng: float
    role: Literal["origin", "destination", "waypoint"] = "waypoint"


# ──────────────────────────────────────────────────────────────
# POI taxonomy
# ──────────────────────────────────────────────────────────────
# Discovery tier (wide search radius)
#   viewpoint      Lookouts & scenic viewpoints
#   park           Parks, nature reserves, protected areas
#   waterfall      Waterfalls + natural wonders (caves, arches, cliffs, beaches)
#   landmark       Memorials, monuments, castles, ruins, public artwork
#   attraction     Attractions, theme parks, zoos, camp/picnic sites, visitor info
#   museum         Museums & galleries
#   entertainment  Arcades, bowling, water parks, cinemas
#
# Amenity tier (narrow search radius)
#   restaurant     Sit-down restaurants
#   cafe           Cafés & coffee shops
#   gas            Fuel stations
#   hotel          Hotels, motels, guest houses
#   shopping       Supermarkets, malls, department stores
# ──────────────────────────────────────────────────────────────

POICategory = Literal[
    # Discovery
    "viewpoint", "park", "waterfall", "landmark",
    "attraction", "museum", "entertainment",
    # Amenities
    "restaurant", "cafe", "gas", "hotel", "shopping",
]

TripPreference = Literal["scenic", "family", "budget", "foodie"]

POIBucket = Literal["along-way", "destination"]

OsmType = Literal["node", "way", "relation"]


# ──────────────────────────────────────────────────────────────
# Overpass wire format
# ──────────────────────────────────────────────────────────────

class OverpassCenter(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class OverpassElement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: OsmType = "node"
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[OverpassCenter] = None
    tags: Dict[str, str] = Field(default_factory=dict)


# ──────────────────────────────────────────────────────────────
# Suggestions
# ──────────────────────────────────────────────────────────────

class POISuggestion(BaseModel):
    id: str                                  # "osm-{type}-{id}", stable across fetches
    name: str
    category: POICategory
    lat: float
    lng: float
    address: Optional[str] = None
    bucket: POIBucket = "along-way"

    distance_from_route_km: float = 0.0
    detour_time_minutes: int = 0
    popularity_score: int = 50               # 0..100

    # Filled by the ranking stage
    ranking_score: float = 0.0
    category_match_score: float = 0.0
    timing_fit_score: float = 0.0
    action_state: Literal["suggested", "added", "dismissed"] = "suggested"

    osm_type: OsmType
    osm_id: str
    tags: Dict[str, str] = Field(default_factory=dict)


class POISuggestionGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    along_way: List[POISuggestion] = Field(default_factory=list, alias="alongWay")
    at_destination: List[POISuggestion] = Field(default_factory=list, alias="atDestination")
    total_found: int = Field(default=0, alias="totalFound")
    query_duration_ms: float = Field(default=0.0, alias="queryDurationMs")


# ──────────────────────────────────────────────────────────────
# HTTP request
# ──────────────────────────────────────────────────────────────

class DiscoverRequest(BaseModel):
    geometry: Optional[List[LatLng]] = None  # [(lat, lng), ...]
    polyline6: Optional[str] = None          # alternative to geometry
    origin: Location
    destination: Location
    preferences: List[TripPreference] = Field(default_factory=list)
