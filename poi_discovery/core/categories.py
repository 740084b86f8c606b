from __future__ import annotations

from typing import Dict, Iterable, List

from poi_discovery.core.contracts import POICategory, TripPreference

# ──────────────────────────────────────────────────────────────
# Overpass tag predicates per category
# ──────────────────────────────────────────────────────────────
# Multiple predicates for one category are OR'd together in the union query.
# Park carries boundary=protected_area as well: provincial / national parks
# are mapped as relations, not nodes/ways with leisure tags.

CATEGORY_TAG_QUERIES: Dict[POICategory, List[str]] = {
    "viewpoint":     ['["tourism"="viewpoint"]'],
    "attraction":    ['["tourism"~"attraction|theme_park|zoo|camp_site|picnic_site|information"]'],
    "museum":        ['["tourism"~"museum|gallery|artwork"]'],
    "park":          ['["leisure"~"park|nature_reserve"]', '["boundary"="protected_area"]'],
    "landmark":      ['["historic"~"memorial|monument|castle|ruins|archaeological_site|heritage"]'],
    "waterfall":     ['["natural"~"waterfall|cave_entrance|beach|arch|cliff"]'],
    "restaurant":    ['["amenity"="restaurant"]'],
    "cafe":          ['["amenity"="cafe"]'],
    "gas":           ['["amenity"="fuel"]'],
    "hotel":         ['["tourism"~"hotel|motel|guest_house"]'],
    "shopping":      ['["shop"~"supermarket|mall|department_store"]'],
    "entertainment": ['["leisure"~"amusement_arcade|bowling_alley|water_park"]'],
}

# Administrative-area predicates: evaluated over a bbox they time out
# server-side, so only the per-point relation query may use them.
AREA_TAG_QUERIES = frozenset({'["boundary"="protected_area"]'})

# ──────────────────────────────────────────────────────────────
# Search radii (metres)
# ──────────────────────────────────────────────────────────────

DISCOVERY_RADIUS_M = 15_000
AMENITY_RADIUS_M = 5_000

CATEGORY_RADIUS_M: Dict[POICategory, int] = {
    "viewpoint": DISCOVERY_RADIUS_M,
    "park": DISCOVERY_RADIUS_M,
    "waterfall": DISCOVERY_RADIUS_M,
    "landmark": DISCOVERY_RADIUS_M,
    "attraction": DISCOVERY_RADIUS_M,
    "museum": DISCOVERY_RADIUS_M,
    "entertainment": DISCOVERY_RADIUS_M,
    "restaurant": AMENITY_RADIUS_M,
    "cafe": AMENITY_RADIUS_M,
    "gas": AMENITY_RADIUS_M,
    "hotel": AMENITY_RADIUS_M,
    "shopping": AMENITY_RADIUS_M,
}

# ──────────────────────────────────────────────────────────────
# Preferences
# ──────────────────────────────────────────────────────────────

PREFERENCE_CATEGORY_MAP: Dict[TripPreference, List[POICategory]] = {
    "scenic": ["viewpoint", "park", "waterfall", "landmark"],
    "family": ["attraction", "park", "entertainment", "landmark"],
    "budget": ["viewpoint", "park", "cafe", "waterfall"],
    "foodie": ["restaurant", "cafe"],
}

# Added whenever the user asked for anything at all.
ALWAYS_DISCOVER: List[POICategory] = ["viewpoint", "landmark", "waterfall"]


def _ordered_union(*groups: Iterable[POICategory]) -> List[POICategory]:
    out: List[POICategory] = []
    for g in groups:
        for c in g:
            if c not in out:
                out.append(c)
    return out


def relevant_categories(preferences: Iterable[TripPreference]) -> List[POICategory]:
    prefs = list(preferences)
    if not prefs:
        # Nothing asked for: don't spend rate-limit quota.
        return []
    return _ordered_union(*(PREFERENCE_CATEGORY_MAP[p] for p in prefs), ALWAYS_DISCOVER)
