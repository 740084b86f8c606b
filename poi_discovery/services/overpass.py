from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from poi_discovery.core.settings import settings

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
JITTER_FRACTION = 0.2

Sleep = Callable[[float], Awaitable[Any]]


class OverpassClient:
    """
    Executes Overpass QL strings under Overpass' public rate limits.

    - at most ``concurrency`` requests in flight (shared-cursor worker pool)
    - 429 → exponential backoff (base · 2^attempt, ±20% jitter)
    - any other failure (transport, non-2xx, bad JSON) → linear backoff (base · (attempt + 1))
    - after ``max_retries`` retries the query yields ``[]``; a partial miss
      never fails the caller
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        concurrency: int | None = None,
        max_retries: int | None = None,
        retry_base_s: float | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
        rng: random.Random | None = None,
    ):
        self.url = url or settings.overpass_url
        self.concurrency = max(1, int(concurrency if concurrency is not None else settings.overpass_concurrency))
        self.max_retries = max(0, int(max_retries if max_retries is not None else settings.overpass_retries))
        self.retry_base_s = float(retry_base_s if retry_base_s is not None else settings.overpass_retry_base_s)

        timeout = httpx.Timeout(float(timeout_s or settings.overpass_timeout_s), connect=15.0)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": settings.overpass_user_agent},
        )
        self._sleep: Sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────────────────
    # Backoff
    # ──────────────────────────────────────────────────────────

    def rate_limit_delay(self, attempt: int) -> float:
        base = self.retry_base_s * (2 ** attempt)
        jitter = base * JITTER_FRACTION * (2.0 * self._rng.random() - 1.0)
        return max(0.0, base + jitter)

    def failure_delay(self, attempt: int) -> float:
        return self.retry_base_s * (attempt + 1)

    async def pause(self, seconds: float) -> None:
        """Inter-phase breathing room between sequential query phases."""
        if seconds > 0:
            await self._sleep(seconds)

    # ──────────────────────────────────────────────────────────
    # Single query
    # ──────────────────────────────────────────────────────────

    async def _post(self, ql: str) -> tuple[Optional[List[Dict[str, Any]]], Optional[str], bool]:
        """
        One request.  Returns (elements, failure_reason, rate_limited);
        elements is None when the attempt failed.
        """
        try:
            r = await self._client.post(self.url, data={"data": ql})
        except Exception as e:
            return None, repr(e), False

        if r.status_code == RATE_LIMIT_STATUS:
            return None, "HTTP 429", True
        if not r.is_success:
            return None, f"HTTP {r.status_code}", False

        try:
            data = r.json()
        except ValueError as e:
            return None, f"bad json: {e}", False

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            return [], None, False
        return [el for el in elements if isinstance(el, dict)], None, False

    async def execute(self, ql: str) -> List[Dict[str, Any]]:
        reason: Optional[str] = None
        for attempt in range(self.max_retries + 1):
            elements, reason, rate_limited = await self._post(ql)
            if elements is not None:
                return elements
            if attempt == self.max_retries:
                break

            wait = self.rate_limit_delay(attempt) if rate_limited else self.failure_delay(attempt)
            logger.warning(
                "[overpass] %s — retrying in %.1fs (attempt %d/%d)",
                reason, wait, attempt + 1, self.max_retries,
            )
            await self._sleep(wait)

        logger.error(
            "[overpass] query failed after %d retries (%s) — returning no elements",
            self.max_retries, reason,
        )
        return []

    # ──────────────────────────────────────────────────────────
    # Many queries
    # ──────────────────────────────────────────────────────────

    async def run_all(self, queries: Sequence[str]) -> List[List[Dict[str, Any]]]:
        """
        Execute ``queries`` with at most ``concurrency`` in flight.  Result
        ``i`` belongs to query ``i``; failed queries contribute ``[]``.
        """
        results: List[List[Dict[str, Any]]] = [[] for _ in queries]
        cursor = 0

        async def worker() -> None:
            nonlocal cursor
            while cursor < len(queries):
                idx = cursor
                cursor += 1
                results[idx] = await self.execute(queries[idx])

        n_workers = min(self.concurrency, len(queries))
        if n_workers:
            await asyncio.gather(*(worker() for _ in range(n_workers)))
        return results
