"""
Partnership endpoints for API v1.

Deactivation and reactivation live under ``/applications/{id}``; this
router only lists the partnerships of the calling partner.
"""

from typing import List

from fastapi import APIRouter, Depends

from franchise_hub_api.app.core.security import require_roles
from franchise_hub_api.app.schemas.partnership import Partnership
from franchise_hub_api.app.schemas.user import UserRole
from franchise_hub_api.app.services.partnership_service import PartnershipService


router = APIRouter()


@router.get("/", response_model=List[Partnership])
async def my_partnerships(current_user: dict = Depends(require_roles(UserRole.PARTNER))) -> List[Partnership]:
    return await PartnershipService.get_partnerships_for_partner(current_user["user_id"])
