"""
Application package initializer.

This package contains the main entrypoint for the API and its
submodules:

* ``core``: configuration, logging, key-value storage, broadcast
  subjects and the in-memory data store.
* ``schemas``: pydantic models for stored records and payloads.
* ``services``: business logic operating on the data store.
* ``api``: versioned FastAPI routers.
"""

from .main import app  # noqa: F401
