# poi_discovery/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load the repo-root .env (main.py is /poi_discovery/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from poi_discovery.api import api_router
from poi_discovery.api import pois as pois_api
from poi_discovery.services.cache import DiscoveryCache
from poi_discovery.services.discovery import Discovery
from poi_discovery.services.overpass import OverpassClient

logger = logging.getLogger(__name__)

app = FastAPI(title="POI Discovery", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        # Local web dev
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# Shared state (one per process)
# ──────────────────────────────────────────────────────────────

_overpass = OverpassClient()
_discovery_cache = DiscoveryCache()

# ──────────────────────────────────────────────────────────────
# Dependency providers
# ──────────────────────────────────────────────────────────────


def provide_discovery_service() -> Discovery:
    return Discovery(client=_overpass, cache=_discovery_cache)


app.dependency_overrides[pois_api.get_discovery_service] = provide_discovery_service

# Routes
app.include_router(api_router)

# ──────────────────────────────────────────────────────────────
# Shutdown
# ──────────────────────────────────────────────────────────────


@app.on_event("shutdown")
async def shutdown():
    logger.info("[app] Shutting down — closing Overpass client")
    try:
        await _overpass.aclose()
    except Exception as e:
        logger.warning(f"[app] Error closing Overpass client: {e}")
