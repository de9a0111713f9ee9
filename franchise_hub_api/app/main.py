"""
Main entrypoint for the Franchise Hub API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time as
``app``.  Run it with uvicorn or another ASGI server, e.g.::

    uvicorn franchise_hub_api.app.main:app --reload

On startup the storage schema is migrated, the data store is (re)loaded
from storage and, if enabled, the demo users are seeded.
"""

import logging

from fastapi import FastAPI

from .core.config import settings
from .core.logging_config import setup_logging
from .api.v1.router import router as v1_router
from .core.db import init_db


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that imports below can
    # safely log messages.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version)

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        from .core.store import get_store, reset_store
        from .services.user_service import UserService

        init_db()
        # Always start from what is persisted, not from a store built
        # before the application was configured.
        reset_store()
        counts = get_store().get_data_counts()
        if settings.seed_demo_users:
            await UserService.seed_demo_users()
        logging.getLogger(__name__).info("%s started with %s", settings.project_name, counts)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
