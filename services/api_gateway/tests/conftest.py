"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

Handler = Callable[[httpx.Request], object]


@pytest.fixture(autouse=True)
def _no_config_file(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep a developer's local gateway.json out of the tests."""
    monkeypatch.setenv("GATEWAY_CONFIG_FILE", str(tmp_path / "missing.json"))


@pytest.fixture
def recorded_sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps: list[float]):
    """A sleep that records the delay and yields control without waiting."""

    async def sleep(delay: float) -> None:
        recorded_sleeps.append(delay)
        await asyncio.sleep(0)

    return sleep


@pytest.fixture
def mock_client_factory() -> Callable[[Handler], httpx.AsyncClient]:
    """Build ``httpx.AsyncClient`` instances backed by ``MockTransport``."""

    def factory(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
