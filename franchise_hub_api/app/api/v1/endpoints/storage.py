"""
Storage maintenance endpoints for API v1.

Inspect record counts, reload persisted data into memory and, in debug
mode only, wipe all stored data.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.security import get_current_user
from franchise_hub_api.app.core.store import get_store


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/counts")
async def data_counts(current_user: dict = Depends(get_current_user)) -> Dict[str, int]:
    return get_store().get_data_counts()


@router.post("/reload")
async def reload_data(current_user: dict = Depends(get_current_user)) -> Dict[str, int]:
    """Merge records from storage that are not yet in memory."""
    store = get_store()
    store.load_from_storage()
    return store.get_data_counts()


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_data(current_user: dict = Depends(get_current_user)) -> None:
    if not settings.debug:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Clearing stored data is only allowed in debug mode",
        )
    logger.warning("Stored data cleared by %s", current_user["sub"])
    get_store().clear_stored_data()
