"""Unit tests for the per-target retry controller."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

from api_gateway.services.warmup.models import WarmupOutcome, WarmupState, WarmupTarget
from api_gateway.services.warmup.retry import RetryController

TARGET = WarmupTarget("orders", httpx.URL("http://orders:8001/health"))


class ScriptedProber:
    """Returns queued outcomes, repeating the last one once the queue runs dry."""

    timeout = 30.0

    def __init__(self, *outcomes: WarmupOutcome) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def probe(self, uri: httpx.URL) -> WarmupOutcome:
        self.calls += 1
        if len(self._outcomes) > 1:
            return self._outcomes.pop(0)
        return self._outcomes[0]


def _events(logs: list[dict], name: str) -> list[dict]:
    return [entry for entry in logs if entry["event"] == name]


class TestRetryBudget:
    """Attempt counting and delays."""

    async def test_exhausts_after_max_retries_plus_one(self, fake_sleep, recorded_sleeps):
        prober = ScriptedProber(WarmupOutcome.server_error(503))
        controller = RetryController(prober, max_retries=5, retry_delay=4, sleep=fake_sleep)

        with capture_logs() as logs:
            state = await controller.run(TARGET)

        assert state is WarmupState.EXHAUSTED
        assert prober.calls == 6
        assert recorded_sleeps == [4.0] * 5
        exhausted = _events(logs, "warmup_exhausted")
        assert len(exhausted) == 1
        assert exhausted[0]["log_level"] == "error"
        assert exhausted[0]["cluster"] == "orders"

    async def test_stops_on_first_success(self, fake_sleep, recorded_sleeps):
        prober = ScriptedProber(
            WarmupOutcome.timeout(),
            WarmupOutcome.success(200),
        )
        controller = RetryController(prober, max_retries=5, retry_delay=4, sleep=fake_sleep)

        with capture_logs() as logs:
            state = await controller.run(TARGET)

        assert state is WarmupState.WARMED
        assert prober.calls == 2
        assert recorded_sleeps == [4.0]
        success = _events(logs, "warmup_success")
        assert success[0]["attempt"] == 2
        assert success[0]["total_attempts"] == 6
        assert success[0]["status_code"] == 200
        assert not _events(logs, "warmup_exhausted")

    async def test_zero_retries_means_single_attempt(self, fake_sleep, recorded_sleeps):
        prober = ScriptedProber(WarmupOutcome.server_error(500))
        controller = RetryController(prober, max_retries=0, retry_delay=4, sleep=fake_sleep)

        state = await controller.run(TARGET)

        assert state is WarmupState.EXHAUSTED
        assert prober.calls == 1
        assert recorded_sleeps == []

    async def test_zero_delay_skips_sleep(self, fake_sleep, recorded_sleeps):
        prober = ScriptedProber(WarmupOutcome.server_error(500))
        controller = RetryController(prober, max_retries=3, retry_delay=0, sleep=fake_sleep)

        await controller.run(TARGET)

        assert prober.calls == 4
        assert recorded_sleeps == []


class TestRetryLogging:
    """Each failed attempt is logged with its own event."""

    async def test_failure_kinds_logged(self, fake_sleep):
        prober = ScriptedProber(
            WarmupOutcome.server_error(502),
            WarmupOutcome.timeout(),
            WarmupOutcome.transport_error(httpx.ConnectError("refused")),
        )
        controller = RetryController(prober, max_retries=2, retry_delay=1, sleep=fake_sleep)

        with capture_logs() as logs:
            await controller.run(TARGET)

        events = [entry["event"] for entry in logs]
        assert events == [
            "warmup_server_error",
            "warmup_timeout",
            "warmup_failed",
            "warmup_exhausted",
        ]
        assert logs[0]["status_code"] == 502
        assert logs[1]["timeout_seconds"] == 30.0
        assert "refused" in logs[2]["error"]
        assert [entry.get("attempt") for entry in logs[:3]] == [1, 2, 3]


class TestRetryCancellation:
    """Shutdown during a delay is not exhaustion."""

    async def test_cancel_during_delay(self):
        sleeping = asyncio.Event()

        async def blocking_sleep(delay: float) -> None:
            sleeping.set()
            await asyncio.Event().wait()

        prober = ScriptedProber(WarmupOutcome.server_error(503))
        controller = RetryController(prober, max_retries=5, retry_delay=4, sleep=blocking_sleep)

        with capture_logs() as logs:
            task = asyncio.create_task(controller.run(TARGET))
            await sleeping.wait()
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        assert prober.calls == 1
        assert not _events(logs, "warmup_exhausted")
        assert not [entry for entry in logs if entry["log_level"] == "error"]

    async def test_shutdown_already_set_sends_nothing(self, fake_sleep):
        shutdown = asyncio.Event()
        shutdown.set()
        prober = ScriptedProber(WarmupOutcome.success(200))
        controller = RetryController(prober, max_retries=5, retry_delay=4, sleep=fake_sleep)

        with pytest.raises(asyncio.CancelledError):
            await controller.run(TARGET, shutdown)

        assert prober.calls == 0

    async def test_shutdown_set_during_delay_stops_retries(self):
        shutdown = asyncio.Event()

        async def sleep(delay: float) -> None:
            shutdown.set()

        prober = ScriptedProber(WarmupOutcome.server_error(503))
        controller = RetryController(prober, max_retries=5, retry_delay=4, sleep=sleep)

        with capture_logs() as logs:
            with pytest.raises(asyncio.CancelledError):
                await controller.run(TARGET, shutdown)

        assert prober.calls == 1
        assert not _events(logs, "warmup_exhausted")

    async def test_shutdown_set_during_last_attempt_is_not_exhaustion(self, fake_sleep):
        shutdown = asyncio.Event()

        class ShutdownOnProbe(ScriptedProber):
            async def probe(self, uri: httpx.URL) -> WarmupOutcome:
                shutdown.set()
                return await super().probe(uri)

        prober = ShutdownOnProbe(WarmupOutcome.timeout())
        controller = RetryController(prober, max_retries=0, retry_delay=4, sleep=fake_sleep)

        with capture_logs() as logs:
            with pytest.raises(asyncio.CancelledError):
                await controller.run(TARGET, shutdown)

        assert prober.calls == 1
        assert not [entry for entry in logs if entry["log_level"] == "error"]
