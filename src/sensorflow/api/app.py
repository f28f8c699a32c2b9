"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from sensorflow import __version__
from sensorflow.api.routes import health, pipelines
from sensorflow.core.config import AppSettings
from sensorflow.core.logging import configure_logging
from sensorflow.persistence import Backends, create_backends


def create_app(settings: AppSettings | None = None, backends: Backends | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``backends`` defaults to the AWS backends built from ``settings``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level, json_logs=app_settings.log_json)
        app.state.settings = app_settings
        app.state.backends = backends or create_backends(app_settings)
        yield

    app = FastAPI(
        title="sensorflow file processing pipeline",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(pipelines.router, prefix="/pipelines")
    return app
