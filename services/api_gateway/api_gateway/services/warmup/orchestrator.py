"""Warmup — startup orchestrator.

Resolves every configured destination once, then warms all of them
concurrently (one task per target, no throttling) and waits for each to
reach ``WARMED`` or ``EXHAUSTED``. Outcomes are only logged: nothing is
removed from the proxy's routing table and ``start`` never raises for a
failed backend.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import httpx
import structlog

from api_gateway.core.config import WarmupSettings
from api_gateway.services.warmup.models import ClusterConfig, WarmupState, WarmupTarget
from api_gateway.services.warmup.prober import Prober
from api_gateway.services.warmup.resolver import resolve_targets
from api_gateway.services.warmup.retry import RetryController, Sleep

logger = structlog.get_logger()


class GatewayWarmupService:
    """Startup hook that pre-warms backend destinations."""

    def __init__(
        self,
        settings: WarmupSettings,
        clusters: Sequence[ClusterConfig],
        client: httpx.AsyncClient,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._clusters = tuple(clusters)
        self._client = client
        self._sleep = sleep

    async def start(self, shutdown: asyncio.Event | None = None) -> None:
        """Run warmup to completion, or until *shutdown* is set."""
        if not self._settings.enabled:
            logger.info("warmup_disabled")
            return

        if shutdown is not None and shutdown.is_set():
            logger.info("warmup_cancelled", target_count=0)
            return

        targets = resolve_targets(self._clusters, self._settings.default_path)
        if not targets:
            logger.info("warmup_skipped", reason="no valid destinations configured")
            return

        logger.info(
            "warmup_started",
            target_count=len(targets),
            timeout_seconds=self._settings.request_timeout_seconds,
            retries=self._settings.max_retries,
            delay_seconds=self._settings.retry_delay_seconds,
        )

        warm = asyncio.create_task(self._warm_all(targets, shutdown), name="gateway-warmup")
        waiters: set[asyncio.Task] = {warm}
        stopper = None
        if shutdown is not None:
            stopper = asyncio.create_task(shutdown.wait(), name="gateway-warmup-shutdown")
            waiters.add(stopper)

        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if stopper is not None:
                stopper.cancel()
            if not warm.done():
                warm.cancel()
                await asyncio.wait({warm})

        if warm.cancelled():
            logger.info("warmup_cancelled", target_count=len(targets))
            return

        error = warm.exception()
        if error is not None:
            logger.error("warmup_aborted", error=repr(error))
            return

        states = warm.result()
        warmed = sum(1 for state in states if state is WarmupState.WARMED)
        logger.info(
            "warmup_finished",
            warmed=warmed,
            exhausted=len(states) - warmed,
        )

    async def stop(self, shutdown: asyncio.Event | None = None) -> None:
        """Nothing to tear down; in-flight warmup follows the shutdown event."""

    async def _warm_all(
        self,
        targets: Sequence[WarmupTarget],
        shutdown: asyncio.Event | None,
    ) -> list[WarmupState]:
        controller = RetryController(
            Prober(self._client, float(self._settings.request_timeout_seconds)),
            max_retries=self._settings.max_retries,
            retry_delay=float(self._settings.retry_delay_seconds),
            sleep=self._sleep,
        )

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    self._warm_one(controller, target, shutdown),
                    name=f"warmup:{target.cluster_name}:{target.uri}",
                )
                for target in targets
            ]
        return [task.result() for task in tasks]

    @staticmethod
    async def _warm_one(
        controller: RetryController,
        target: WarmupTarget,
        shutdown: asyncio.Event | None,
    ) -> WarmupState:
        # One broken target must not cancel its siblings in the task group
        try:
            return await controller.run(target, shutdown)
        except Exception:
            logger.exception(
                "warmup_target_error",
                cluster=target.cluster_name,
                uri=str(target.uri),
            )
            return WarmupState.EXHAUSTED
