from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from poi_discovery.core.contracts import OverpassElement, POICategory, POISuggestion


# ──────────────────────────────────────────────────────────────
# Category decision table
# ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryRule:
    key: str
    values: Optional[FrozenSet[str]]  # None: any non-empty value
    category: POICategory

    def matches(self, tags: Mapping[str, str]) -> bool:
        v = tags.get(self.key)
        if not v:
            return False
        return self.values is None or v in self.values


def _rule(key: str, values: Optional[Tuple[str, ...]], category: POICategory) -> CategoryRule:
    return CategoryRule(key, frozenset(values) if values is not None else None, category)


# Evaluated top to bottom, first match wins.
# Priority: tourism, historic, natural, leisure, boundary, amenity, shop.
CATEGORY_RULES: List[CategoryRule] = [
    _rule("tourism", ("viewpoint",), "viewpoint"),
    _rule("tourism", ("museum", "gallery"), "museum"),
    _rule("tourism", ("attraction", "theme_park", "zoo"), "attraction"),
    _rule("tourism", ("camp_site", "picnic_site"), "attraction"),
    _rule("tourism", ("information",), "attraction"),  # visitor centres
    _rule("tourism", ("artwork",), "landmark"),
    _rule("tourism", ("hotel", "motel", "guest_house"), "hotel"),
    _rule("historic", None, "landmark"),
    _rule("natural", ("waterfall",), "waterfall"),
    _rule("waterfall", ("yes",), "waterfall"),
    # natural wonders share the waterfall bucket
    _rule("natural", ("beach", "cave_entrance", "arch", "cliff"), "waterfall"),
    _rule("leisure", ("park", "nature_reserve"), "park"),
    _rule("leisure", ("amusement_arcade", "bowling_alley", "water_park"), "entertainment"),
    _rule("boundary", ("national_park", "protected_area"), "park"),
    _rule("amenity", ("restaurant",), "restaurant"),
    _rule("amenity", ("cafe",), "cafe"),
    _rule("amenity", ("fuel",), "gas"),
    _rule("amenity", ("cinema",), "entertainment"),
    _rule("shop", None, "shopping"),
]


def infer_category(tags: Mapping[str, str]) -> Optional[POICategory]:
    for rule in CATEGORY_RULES:
        if rule.matches(tags):
            return rule.category
    return None


# ──────────────────────────────────────────────────────────────
# Popularity
# ──────────────────────────────────────────────────────────────
# Deterministic "worth visiting" proxy: well-documented OSM objects tend to
# be the notable ones.

POPULARITY_BASE = 50

_POPULARITY_BONUSES: List[Tuple[str, Optional[str], int]] = [
    ("tourism", "attraction", 20),
    ("heritage", None, 15),
    ("wikipedia", None, 10),
    ("website", None, 5),
    ("phone", None, 5),
    ("opening_hours", None, 5),
    ("description", None, 5),
    ("stars", None, 10),
]


def popularity_score(tags: Mapping[str, str]) -> int:
    score = POPULARITY_BASE
    for key, value, bonus in _POPULARITY_BONUSES:
        v = tags.get(key)
        if not v:
            continue
        if value is None or v == value:
            score += bonus
    return max(0, min(100, score))


# ──────────────────────────────────────────────────────────────
# Element → suggestion
# ──────────────────────────────────────────────────────────────

def _coords(el: OverpassElement) -> Optional[Tuple[float, float]]:
    if el.lat is not None and el.lon is not None:
        return el.lat, el.lon
    if el.center is not None and el.center.lat is not None and el.center.lon is not None:
        return el.center.lat, el.center.lon
    return None


def suggestion_id(osm_type: str, osm_id: Any) -> str:
    return f"osm-{osm_type}-{osm_id}"


def element_to_suggestion(raw: Dict[str, Any]) -> Optional[POISuggestion]:
    """
    Map one Overpass element to a suggestion, or None when it has no usable
    coordinates, no name, or no recognised category.
    """
    try:
        el = OverpassElement.model_validate(raw)
    except ValidationError:
        return None

    coords = _coords(el)
    if coords is None:
        return None

    tags = el.tags
    name = tags.get("name") or tags.get("name:en")
    if not name:
        return None

    category = infer_category(tags)
    if category is None:
        return None

    return POISuggestion(
        id=suggestion_id(el.type, el.id),
        name=name,
        category=category,
        lat=float(coords[0]),
        lng=float(coords[1]),
        address=tags.get("addr:full") or tags.get("addr:street"),
        popularity_score=popularity_score(tags),
        osm_type=el.type,
        osm_id=str(el.id),
        tags=dict(tags),
    )


def normalize_elements(elements: List[Dict[str, Any]]) -> List[POISuggestion]:
    out: List[POISuggestion] = []
    for raw in elements:
        it = element_to_suggestion(raw)
        if it is not None:
            out.append(it)
    return out
