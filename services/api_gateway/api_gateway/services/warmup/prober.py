"""Warmup — single-attempt HTTP prober."""

from __future__ import annotations

import asyncio

import httpx

from api_gateway.services.warmup.models import WarmupOutcome


class Prober:
    """Issues one GET per call and classifies the result.

    The per-attempt deadline is an ``asyncio.timeout`` scope inside the
    calling task. When the deadline fires the attempt is a ``TIMEOUT``.
    When the task itself is cancelled (process shutdown) the
    ``CancelledError`` is not caught here and reaches the caller untouched.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def probe(self, uri: httpx.URL | str) -> WarmupOutcome:
        try:
            async with asyncio.timeout(self._timeout):
                # Headers are enough; the body is discarded unread on exit
                async with self._client.stream("GET", uri) as response:
                    status_code = response.status_code
        except (TimeoutError, httpx.TimeoutException):
            return WarmupOutcome.timeout()
        except Exception as exc:
            return WarmupOutcome.transport_error(exc)

        if status_code < 500:
            return WarmupOutcome.success(status_code)
        return WarmupOutcome.server_error(status_code)
