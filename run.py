"""Entry point for the Franchise Hub API.

Starts the FastAPI application with Uvicorn.  Intended to be executed
from the project root, e.g. under Docker where only a single Python file
is specified.

Host and port are read from the environment variables ``API_HOST`` and
``API_PORT`` (defaults ``0.0.0.0`` and ``8000``).  Application settings
(``DATABASE_URL``, ``SECRET_KEY`` and so on) are documented in
``franchise_hub_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from franchise_hub_api.app.main import app
from franchise_hub_api.app.core.config import settings


async def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
