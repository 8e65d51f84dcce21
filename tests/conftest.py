"""Shared pytest fixtures for wayback-resolver tests.

Fixture summary
---------------
settings     Settings pointing at a fake API host with short, known delays.
sleeps       List recording every delay the retry policy asked for.
wb_mock      respx router mounted on the fake API host.
http_client  Plain httpx.Client, routed through ``wb_mock``.
client       WaybackClient over ``http_client``.
resolver     WaybackResolver over ``http_client`` that records sleeps.

No test in ``tests/unit`` or ``tests/wayback`` touches the network or sleeps.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx

from wayback_resolver.config.settings import Settings
from wayback_resolver.wayback.client import WaybackClient
from wayback_resolver.wayback.resolver import WaybackResolver

API_BASE = "https://wwwb-api.test"
ARCHIVE_ROOT = "https://web.archive.org/web"

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "api_responses" / "wayback"


def load_fixture(name: str) -> dict[str, Any]:
    """Load a Wayback API JSON fixture by file stem."""
    return json.loads((FIXTURES_DIR / f"{name}.json").read_text(encoding="utf-8"))


def fixture_response(name: str, status_code: int = 200) -> httpx.Response:
    """Build an httpx response whose body is the named JSON fixture."""
    return httpx.Response(status_code, json=load_fixture(name))


class TrackedStream(httpx.SyncByteStream):
    """Response body that records whether httpx closed it.

    Yields *chunks*, then raises *error* if one is given.
    """

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self.chunks
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base=API_BASE,
        archive_root=ARCHIVE_ROOT,
        retry_attempts=3,
        availability_retry_delay=1.0,
        poll_base_delay=1.0,
        rate_limit_delay=1.0,
        pending_delay=3.0,
        save_cookie="logged-in-sig=abc; logged-in-user=researcher",
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def wb_mock() -> Iterator[respx.MockRouter]:
    with respx.mock(base_url=API_BASE, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def http_client(wb_mock: respx.MockRouter) -> Iterator[httpx.Client]:
    with httpx.Client() as http:
        yield http


@pytest.fixture
def client(settings: Settings, http_client: httpx.Client) -> WaybackClient:
    return WaybackClient(settings=settings, http_client=http_client)


@pytest.fixture
def resolver(
    settings: Settings,
    http_client: httpx.Client,
    sleeps: list[float],
) -> Iterator[WaybackResolver]:
    with WaybackResolver(settings=settings, http_client=http_client, sleep=sleeps.append) as r:
        yield r
