"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (franchises, applications,
payments, etc.) under a unified prefix.  When a new domain is added,
include its router here.
"""

from fastapi import APIRouter

from .endpoints import (
    auth,
    franchises,
    applications,
    payments,
    notifications,
    partnerships,
    dashboard,
    storage,
)

# Create a router for version 1 and include sub-routers for each domain.
router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(franchises.router, prefix="/franchises", tags=["franchises"])
router.include_router(applications.router, prefix="/applications", tags=["applications"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(partnerships.router, prefix="/partnerships", tags=["partnerships"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(storage.router, prefix="/storage", tags=["storage"])
