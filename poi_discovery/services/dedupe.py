from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from poi_discovery.core.contracts import POISuggestion


def dedupe_suggestions(items: Iterable[POISuggestion]) -> List[POISuggestion]:
    """
    Drop repeats by (osm_type, osm_id), keeping the first occurrence in
    order.  Overlapping around-circles and overlapping category predicates
    both return the same OSM object more than once.
    """
    seen: Set[Tuple[str, str]] = set()
    out: List[POISuggestion] = []
    for it in items:
        key = (it.osm_type, it.osm_id)
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out
