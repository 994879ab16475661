"""
Main entrypoint for the Library API.

This module assembles the FastAPI application, sets up logging and
includes the versioned routers.  The ``create_app`` function builds
and configures the app, which is then instantiated at module import
time as ``app``::

    uvicorn library_api.app.main:app --reload

Pending database migrations are applied when the application starts.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger(__name__)
    logger.info("Using database %s", get_database_path())
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Logging is configured before anything else.  Swagger UI and the
    OpenAPI document are served under ``{api_prefix}/swagger`` in the
    development environment only.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file, sql_trace=settings.debug)

    docs_prefix = f"{settings.api_prefix}/swagger"
    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=docs_prefix if settings.docs_enabled else None,
        redoc_url=None,
        openapi_url=f"{docs_prefix}/v1/swagger.json" if settings.docs_enabled else None,
    )

    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


app = create_app()
