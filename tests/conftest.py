from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import requests

from gitnr.config import AppConfig
from gitnr.context import build_context


class FakeResponse:
    def __init__(self, url: str, text: str = "", status_code: int = 200) -> None:
        self.url = url
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)

    def json(self):
        return json.loads(self.text)


class FakeSession:
    def __init__(self, routes: dict[str, object] | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.headers: list[dict[str, str] | None] = []

    def get(self, url: str, headers=None, timeout=None) -> FakeResponse:
        self.calls.append(url)
        self.headers.append(headers)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(url, "Not Found", status_code=404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(url, str(route))


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeClipboard:
    def __init__(self) -> None:
        self.copied: list[str] = []

    def __call__(self, content: str) -> None:
        self.copied.append(content)


def make_config(cache_dir: Path, refresh: bool = False) -> AppConfig:
    return AppConfig(
        refresh=refresh,
        cache_dir=cache_dir,
        http_timeout=None,
        github_token="",
        log_level="WARNING",
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def make_context(session, clock, clipboard, cache_dir):
    def factory(refresh: bool = False):
        return build_context(
            make_config(cache_dir, refresh=refresh),
            session=session,
            clock=clock,
            clipboard=clipboard,
        )

    return factory


@pytest.fixture
def context(make_context):
    return make_context()
