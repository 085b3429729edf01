"""API Gateway — FastAPI application factory.

Run with the factory so logging is configured per worker::

    uvicorn --factory api_gateway.main:create_app
"""

from __future__ import annotations

from fastapi import FastAPI

from api_gateway import __version__
from api_gateway.core.config import ApiGatewaySettings, settings
from api_gateway.core.events import lifespan
from api_gateway.routers import health

from gateway_shared.logging import setup_logging


def create_app(config: ApiGatewaySettings | None = None) -> FastAPI:
    config = config or settings
    setup_logging(
        log_level=config.log_level,
        json_logs=config.json_logs,
        service_name=config.service_name,
    )

    application = FastAPI(
        title="API Gateway",
        version=__version__,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
        lifespan=lifespan,
    )
    application.state.settings = config

    application.include_router(health.router)

    return application
