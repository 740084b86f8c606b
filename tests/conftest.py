from typing import Callable

import httpx
import pytest

from overpass_fakes import SleepRecorder
from poi_discovery.services.overpass import OverpassClient


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_client(sleep_recorder) -> Callable[..., OverpassClient]:
    def _make(handler, **kwargs) -> OverpassClient:
        kwargs.setdefault("url", "https://overpass.test/api/interpreter")
        kwargs.setdefault("retry_base_s", 1.0)
        kwargs.setdefault("max_retries", 3)
        kwargs.setdefault("concurrency", 2)
        return OverpassClient(
            transport=httpx.MockTransport(handler),
            sleep=sleep_recorder,
            **kwargs,
        )

    return _make
