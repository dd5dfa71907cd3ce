"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from region_crawler.config import (
    CsvConfig,
    DestinationConfig,
    EndpointConfig,
    GlobalConfig,
    PipelineConfig,
)
from region_crawler.engine import FileMutexRegistry, RecordStore

BASE_URL = "https://example.test/wilayah/"

Route = Any


@pytest.fixture(autouse=True)
def crawler_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("REGION_CRAWLER_HOME", str(home))
    return home


@pytest.fixture
def sample_global_config(tmp_path: Path) -> GlobalConfig:
    return GlobalConfig(
        endpoint=EndpointConfig(base_url=BASE_URL, timeout=5),
        destinations=DestinationConfig(output_dir=tmp_path / "outputs"),
        pipeline=PipelineConfig(max_concurrency=3, batch_size=100, backoff_unit=0.0, write_retry_step=0.0),
        csv=CsvConfig(),
        enable_progress_bar=False,
    )


@pytest.fixture
def locks() -> FileMutexRegistry:
    return FileMutexRegistry()


@pytest.fixture
def store(locks: FileMutexRegistry) -> RecordStore:
    return RecordStore(locks)


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


class RouteTable:
    """Serve canned responses keyed by path relative to ``BASE_URL``.

    A route is a JSON-serialisable payload (served with status 200), an
    ``httpx.Response``, or a callable taking the request. Unknown paths get 404.
    """

    def __init__(self, routes: dict[str, Route]) -> None:
        self.routes = dict(routes)
        self.requests: list[str] = []

    @staticmethod
    def sequence(*steps: Route) -> Callable[[httpx.Request], httpx.Response]:
        """Serve ``steps`` one per request, repeating the last one."""

        remaining = list(steps)

        def _next(request: httpx.Request) -> httpx.Response:
            step = remaining.pop(0) if len(remaining) > 1 else remaining[0]
            return RouteTable._respond(step, request)

        return _next

    @staticmethod
    def _respond(route: Route, request: httpx.Request) -> httpx.Response:
        if isinstance(route, httpx.Response):
            return route
        if callable(route):
            return route(request)
        return httpx.Response(200, content=json.dumps(route).encode("utf-8"), request=request)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix(httpx.URL(BASE_URL).path)
        self.requests.append(path)
        if path not in self.routes:
            return httpx.Response(404, request=request)
        return self._respond(self.routes[path], request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def route_table() -> type[RouteTable]:
    return RouteTable
