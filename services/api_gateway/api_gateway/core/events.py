"""API Gateway — application lifespan (startup / shutdown hooks)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI

from api_gateway.core.config import ApiGatewaySettings, settings
from api_gateway.services.warmup.orchestrator import GatewayWarmupService

log = structlog.get_logger()


def build_warmup_service(
    config: ApiGatewaySettings, client: httpx.AsyncClient
) -> GatewayWarmupService:
    return GatewayWarmupService(
        config.gateway_warmup,
        config.reverse_proxy.cluster_configs(),
        client,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start warmup in the background and cancel it on shutdown.

    The gateway begins serving as soon as this yields; warmup keeps
    running alongside until every target is warmed or exhausted.
    """
    config: ApiGatewaySettings = getattr(app.state, "settings", settings)
    log.info("api_gateway starting up", clusters=len(config.reverse_proxy.clusters))

    # One pool for every probe; the per-attempt deadline is enforced by the prober
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(float(config.gateway_warmup.request_timeout_seconds)),
        follow_redirects=False,
    )
    warmup = build_warmup_service(config, client)
    shutdown = asyncio.Event()
    warmup_task = asyncio.create_task(warmup.start(shutdown), name="gateway-warmup-start")
    app.state.warmup_task = warmup_task

    try:
        yield
    finally:
        log.info("api_gateway shutting down")
        shutdown.set()
        await warmup.stop(shutdown)
        await asyncio.wait({warmup_task})
        await client.aclose()
