from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # ──────────────────────────────────────────────────────────────
    # Overpass (remote tag database)
    # ──────────────────────────────────────────────────────────────

    overpass_url: str = Field(default="https://overpass-api.de/api/interpreter", alias="OVERPASS_URL")
    overpass_user_agent: str = Field(default="poi-discovery/1.0", alias="OVERPASS_USER_AGENT")

    # Client-side read timeout. The query's own [timeout:N] directive is the
    # real limit; this only guards against a dead socket.
    overpass_timeout_s: float = Field(default=90.0, alias="OVERPASS_TIMEOUT_S")

    overpass_concurrency: int = Field(default=2, alias="OVERPASS_CONCURRENCY")
    overpass_retries: int = Field(default=3, alias="OVERPASS_RETRIES")

    # Overpass asks for ~30s cooldown after a 429. At base 12s retries land
    # at ~12s, ~24s, ~48s.
    overpass_retry_base_s: float = Field(default=12.0, alias="OVERPASS_RETRY_BASE_S")

    # Pauses between sequential query phases (corridor → relations → destination)
    overpass_phase_delay_s: float = Field(default=1.5, alias="OVERPASS_PHASE_DELAY_S")
    overpass_destination_delay_s: float = Field(default=2.5, alias="OVERPASS_DESTINATION_DELAY_S")

    # ──────────────────────────────────────────────────────────────
    # Discovery pipeline
    # ──────────────────────────────────────────────────────────────

    poi_batch_size: int = Field(default=4, alias="POI_BATCH_SIZE")
    poi_max_samples: int = Field(default=20, alias="POI_MAX_SAMPLES")
    poi_destination_radius_m: int = Field(default=50_000, alias="POI_DESTINATION_RADIUS_M")
    poi_area_relation_radius_m: int = Field(default=20_000, alias="POI_AREA_RELATION_RADIUS_M")
    poi_bbox_buffer_km: float = Field(default=15.0, alias="POI_BBOX_BUFFER_KM")
    poi_corridor_mode: Literal["around", "bbox"] = Field(default="around", alias="POI_CORRIDOR_MODE")

    # Session cache
    poi_cache_ttl_s: int = Field(default=30 * 60, alias="POI_CACHE_TTL_S")  # 30 min
    poi_cache_max_entries: int = Field(default=10, alias="POI_CACHE_MAX_ENTRIES")


settings = Settings()
