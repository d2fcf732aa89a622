"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from simpl_bulk_writer import __version__
from simpl_bulk_writer.api import api_router
from simpl_bulk_writer.api.dependencies import get_planning_service, get_settings
from simpl_bulk_writer.bootstrap import MEMORY_SCHEME, S3_SCHEME
from simpl_bulk_writer.config import Settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the planning API.

    ``settings`` defaults to the environment-backed singleton.
    """

    app_settings = settings if settings is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = app.dependency_overrides.get(get_planning_service, get_planning_service)()
        app.state.planning_service = service
        logger.info(
            "%s %s ready: file systems %s://, %s:// under prefix '%s'.",
            app_settings.app_name,
            __version__,
            S3_SCHEME,
            MEMORY_SCHEME,
            app_settings.api_prefix or "/",
        )
        yield
        logger.info("%s shutting down.", app_settings.app_name)

    app = FastAPI(
        title=app_settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.include_router(api_router, prefix=app_settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    """Serve the planning API with the configured host and port."""

    settings = get_settings()
    uvicorn.run(
        "simpl_bulk_writer.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


__all__ = ["app", "create_app", "run"]
