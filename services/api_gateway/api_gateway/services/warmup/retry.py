"""Warmup — per-target retry controller.

Runs up to ``max_retries + 1`` sequential probe attempts against one
target with a fixed delay between failed attempts:

    Attempting(1) ──success──► WARMED
        │ failure, attempts left: sleep(retry_delay)
        ▼
    Attempting(n) ──failure, last attempt──► EXHAUSTED

Cancellation (shutdown) can land during an attempt or a delay and always
propagates; it is neither ``EXHAUSTED`` nor logged as a failure. A set
``shutdown`` event is checked before each attempt and after each delay, so
work stops even when no await point has yielded to the cancellation yet.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx
import structlog

from api_gateway.services.warmup.models import (
    OutcomeKind,
    WarmupOutcome,
    WarmupState,
    WarmupTarget,
)

logger = structlog.get_logger()

Sleep = Callable[[float], Awaitable[None]]


class SupportsProbe(Protocol):
    timeout: float

    async def probe(self, uri: httpx.URL) -> WarmupOutcome: ...


class RetryController:
    """Drives one target to ``WARMED`` or ``EXHAUSTED``."""

    def __init__(
        self,
        prober: SupportsProbe,
        *,
        max_retries: int,
        retry_delay: float,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._prober = prober
        self._total_attempts = max(max_retries, 0) + 1
        self._retry_delay = max(retry_delay, 0.0)
        self._sleep = sleep

    async def run(
        self,
        target: WarmupTarget,
        shutdown: asyncio.Event | None = None,
    ) -> WarmupState:
        log = logger.bind(
            cluster=target.cluster_name,
            uri=str(target.uri),
            total_attempts=self._total_attempts,
        )

        for attempt in range(1, self._total_attempts + 1):
            _raise_if_shutdown(shutdown)
            outcome = await self._prober.probe(target.uri)

            if outcome.ok:
                log.info(
                    "warmup_success",
                    status_code=outcome.status_code,
                    attempt=attempt,
                )
                return WarmupState.WARMED

            if outcome.kind is OutcomeKind.SERVER_ERROR:
                log.warning(
                    "warmup_server_error",
                    status_code=outcome.status_code,
                    attempt=attempt,
                )
            elif outcome.kind is OutcomeKind.TIMEOUT:
                log.warning(
                    "warmup_timeout",
                    attempt=attempt,
                    timeout_seconds=self._prober.timeout,
                )
            else:
                log.warning(
                    "warmup_failed",
                    attempt=attempt,
                    error=repr(outcome.error),
                )

            if attempt < self._total_attempts and self._retry_delay > 0:
                await self._sleep(self._retry_delay)
                _raise_if_shutdown(shutdown)

        _raise_if_shutdown(shutdown)
        log.error("warmup_exhausted")
        return WarmupState.EXHAUSTED


def _raise_if_shutdown(shutdown: asyncio.Event | None) -> None:
    # A set event means the task is about to be cancelled; stop here instead
    if shutdown is not None and shutdown.is_set():
        raise asyncio.CancelledError
