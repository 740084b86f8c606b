from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Sequence, Set, Tuple

from poi_discovery.core.categories import relevant_categories
from poi_discovery.core.contracts import (
    Location,
    POICategory,
    POISuggestion,
    POISuggestionGroup,
    TripPreference,
)
from poi_discovery.core.geo import bbox_around_points, route_distance_km
from poi_discovery.core.keying import discovery_key
from poi_discovery.core.settings import settings
from poi_discovery.services.cache import DiscoveryCache
from poi_discovery.services.dedupe import dedupe_suggestions
from poi_discovery.services.normalizer import normalize_elements
from poi_discovery.services.overpass import OverpassClient
from poi_discovery.services.query_builder import (
    batch_points,
    build_area_relation_query,
    build_around_query,
    build_bbox_query,
    build_destination_query,
    is_empty_query,
)
from poi_discovery.services.sampler import sample_route
from poi_discovery.services.zones import classify_along_way, label_destination

logger = logging.getLogger(__name__)


def _keep_categories(items: List[POISuggestion], wanted: Set[POICategory]) -> List[POISuggestion]:
    return [it for it in items if it.category in wanted]


class Discovery:
    """
    Route POI discovery pipeline.

    One run makes up to three sequential Overpass phases, paused between
    each other to stay clear of 429s:

      1) corridor: per-point ``around`` unions over batches of route samples
         (or one bbox union when ``corridor_mode == "bbox"``)
      2) area relations: named protected-area relations around the samples,
         only when parks were requested
      3) destination: every requested category in one wide circle

    Runs are memoised and coalesced through the shared ``DiscoveryCache``.
    Failed queries just contribute nothing. A run that raises outright is
    reported as an empty group and left uncached.
    """

    def __init__(
        self,
        *,
        client: OverpassClient,
        cache: DiscoveryCache,
        batch_size: int | None = None,
        max_samples: int | None = None,
        corridor_mode: str | None = None,
        bbox_buffer_km: float | None = None,
        relation_radius_m: int | None = None,
        destination_radius_m: int | None = None,
        phase_delay_s: float | None = None,
        destination_delay_s: float | None = None,
    ):
        self.client = client
        self.cache = cache

        self.batch_size = int(batch_size if batch_size is not None else settings.poi_batch_size)
        self.max_samples = int(max_samples if max_samples is not None else settings.poi_max_samples)
        self.corridor_mode = corridor_mode or settings.poi_corridor_mode
        self.bbox_buffer_km = float(bbox_buffer_km if bbox_buffer_km is not None else settings.poi_bbox_buffer_km)
        self.relation_radius_m = int(
            relation_radius_m if relation_radius_m is not None else settings.poi_area_relation_radius_m
        )
        self.destination_radius_m = int(
            destination_radius_m if destination_radius_m is not None else settings.poi_destination_radius_m
        )
        self.phase_delay_s = float(phase_delay_s if phase_delay_s is not None else settings.overpass_phase_delay_s)
        self.destination_delay_s = float(
            destination_delay_s if destination_delay_s is not None else settings.overpass_destination_delay_s
        )

    # ──────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────

    async def fetch_poi_suggestions(
        self,
        *,
        geometry: Sequence[Tuple[float, float]],
        origin: Location,
        destination: Location,
        preferences: Sequence[TripPreference],
    ) -> POISuggestionGroup:
        started = time.perf_counter()
        key = discovery_key(geometry, destination, preferences)
        try:
            return await self.cache.get_or_start(
                key,
                lambda: self._run(
                    geometry=list(geometry),
                    origin=origin,
                    destination=destination,
                    preferences=list(preferences),
                ),
            )
        except Exception:
            # failed runs are not cached; the next request retries
            logger.exception("[discovery] run FAILED — returning empty result")
            return POISuggestionGroup(query_duration_ms=(time.perf_counter() - started) * 1000.0)

    # ──────────────────────────────────────────────────────────
    # Phases
    # ──────────────────────────────────────────────────────────

    def _corridor_queries(
        self,
        geometry: List[Tuple[float, float]],
        samples: List[Tuple[float, float]],
        categories: List[POICategory],
    ) -> List[str]:
        if not samples:
            return []
        if self.corridor_mode == "bbox":
            queries = [build_bbox_query(bbox_around_points(geometry, self.bbox_buffer_km), categories)]
        else:
            queries = [build_around_query(b, categories) for b in batch_points(samples, self.batch_size)]
        return [q for q in queries if not is_empty_query(q)]

    async def _corridor_elements(
        self,
        geometry: List[Tuple[float, float]],
        samples: List[Tuple[float, float]],
        categories: List[POICategory],
    ) -> List[Dict[str, Any]]:
        elements: List[Dict[str, Any]] = []

        queries = self._corridor_queries(geometry, samples, categories)
        for batch in await self.client.run_all(queries):
            elements.extend(batch)

        if "park" in categories and samples:
            await self.client.pause(self.phase_delay_s)
            rel_queries = [
                build_area_relation_query(b, self.relation_radius_m)
                for b in batch_points(samples, self.batch_size)
            ]
            for batch in await self.client.run_all(rel_queries):
                elements.extend(batch)

        return elements

    async def _destination_elements(
        self, destination: Location, categories: List[POICategory]
    ) -> List[Dict[str, Any]]:
        ql = build_destination_query(
            (destination.lat, destination.lng), categories, self.destination_radius_m
        )
        if is_empty_query(ql):
            return []
        await self.client.pause(self.destination_delay_s)
        return await self.client.execute(ql)

    async def _run(
        self,
        *,
        geometry: List[Tuple[float, float]],
        origin: Location,
        destination: Location,
        preferences: List[TripPreference],
    ) -> POISuggestionGroup:
        started = time.perf_counter()

        categories = relevant_categories(preferences)
        if not categories:
            return POISuggestionGroup()
        wanted = set(categories)

        total_km = route_distance_km(geometry)
        samples = sample_route(geometry, total_km, max_samples=self.max_samples)

        corridor_raw = await self._corridor_elements(geometry, samples, categories)
        corridor = _keep_categories(dedupe_suggestions(normalize_elements(corridor_raw)), wanted)
        along_way = classify_along_way(
            corridor,
            origin=origin,
            destination=destination,
            total_km=total_km,
            route_points=samples,
        )

        dest_raw = await self._destination_elements(destination, categories)
        at_destination = label_destination(
            _keep_categories(dedupe_suggestions(normalize_elements(dest_raw)), wanted),
            destination=destination,
        )

        # one bucket per POI: the destination query owns anything it returned
        dest_ids = {it.id for it in at_destination}
        along_way = [it for it in along_way if it.id not in dest_ids]

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            "[discovery] summary: total_km=%.1f samples=%d corridor_raw=%d dest_raw=%d "
            "along_way=%d at_destination=%d ms=%.0f",
            total_km, len(samples), len(corridor_raw), len(dest_raw),
            len(along_way), len(at_destination), elapsed_ms,
        )

        return POISuggestionGroup(
            along_way=along_way,
            at_destination=at_destination,
            total_found=len(along_way) + len(at_destination),
            query_duration_ms=elapsed_ms,
        )
