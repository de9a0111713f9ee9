"""
Dashboard endpoints for API v1.

``/stats`` returns figures for the caller's role.  The chart endpoints
are only meaningful for business owners.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from franchise_hub_api.app.core.security import get_current_user, require_roles
from franchise_hub_api.app.schemas.user import UserRole
from franchise_hub_api.app.services.statistics_service import StatisticsService


router = APIRouter()

business_only = require_roles(UserRole.BUSINESS)


@router.get("/stats")
async def dashboard_stats(current_user: dict = Depends(get_current_user)) -> Dict[str, Any]:
    return await StatisticsService.get_dashboard_stats(
        current_user["user_id"], UserRole(current_user["role"])
    )


@router.get("/revenue-chart")
async def revenue_chart(
    months: int = Query(6, ge=1, le=24), current_user: dict = Depends(business_only)
) -> List[Dict[str, Any]]:
    return await StatisticsService.get_revenue_chart_data(current_user["user_id"], months)


@router.get("/applications-chart")
async def applications_chart(current_user: dict = Depends(business_only)) -> List[Dict[str, Any]]:
    return await StatisticsService.get_applications_chart_data(current_user["user_id"])
