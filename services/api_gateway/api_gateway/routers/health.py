"""API Gateway — health-check endpoints.

Liveness only: the gateway serves traffic regardless of warmup results,
so there is no readiness gate on backend state.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", summary="Liveness probe")
async def liveness() -> dict[str, str]:
    return {"status": "alive"}
