"""
Franchise endpoints for API v1.

Anyone may browse and search franchises.  Creating, editing and
changing the status of a franchise is reserved for business owners, and
only for the franchises they own.
"""

from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from franchise_hub_api.app.api.v1.errors import service_errors
from franchise_hub_api.app.core.security import require_roles
from franchise_hub_api.app.schemas.franchise import (
    Franchise,
    FranchiseBulkStatusUpdate,
    FranchiseCategory,
    FranchiseCreate,
    FranchisePerformanceMetrics,
    FranchiseSearchFilters,
    FranchiseStatusUpdate,
    FranchiseUpdate,
)
from franchise_hub_api.app.schemas.user import UserRole
from franchise_hub_api.app.services.franchise_service import FranchiseService


router = APIRouter()

business_only = require_roles(UserRole.BUSINESS)


async def _owned_franchise(franchise_id: str, current_user: dict) -> Franchise:
    with service_errors():
        franchise = await FranchiseService.get_franchise(franchise_id)
    if franchise.business_owner_id != current_user["user_id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not the owner of this franchise")
    return franchise


@router.get("/", response_model=List[Franchise])
async def list_franchises() -> List[Franchise]:
    """List all franchises, newest first."""
    return await FranchiseService.list_franchises()


@router.get("/featured", response_model=List[Franchise])
async def featured_franchises(limit: int = Query(3, ge=1, le=50)) -> List[Franchise]:
    return await FranchiseService.get_featured_franchises(limit)


@router.get("/mine", response_model=List[Franchise])
async def my_franchises(current_user: dict = Depends(business_only)) -> List[Franchise]:
    return await FranchiseService.get_franchises_by_owner(current_user["user_id"])


@router.get("/search", response_model=List[Franchise])
async def search_franchises(
    query: str | None = None,
    category: FranchiseCategory | None = None,
    is_active: bool | None = None,
    min_investment: float | None = None,
    max_investment: float | None = None,
    sort_by: Literal["name", "category", "created_at"] | None = None,
    sort_direction: Literal["asc", "desc"] = "asc",
) -> List[Franchise]:
    """Search franchises.

    ``query`` matches name or description (case-insensitive).  Investment
    bounds apply to the franchise's minimum and maximum initial
    investment respectively.
    """
    filters = FranchiseSearchFilters(
        query=query,
        category=category,
        status=is_active,
        min_investment=min_investment,
        max_investment=max_investment,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    return await FranchiseService.search_franchises(filters)


@router.post("/", response_model=Franchise, status_code=status.HTTP_201_CREATED)
async def create_franchise(data: FranchiseCreate, current_user: dict = Depends(business_only)) -> Franchise:
    return await FranchiseService.create_franchise(data, current_user)


@router.post("/bulk-status", response_model=List[Franchise])
async def bulk_update_status(
    data: FranchiseBulkStatusUpdate, current_user: dict = Depends(business_only)
) -> List[Franchise]:
    """Activate or deactivate several franchises.  Ids not owned by the caller are ignored."""
    owned = {f.id for f in await FranchiseService.get_franchises_by_owner(current_user["user_id"])}
    franchise_ids = [fid for fid in data.franchise_ids if fid in owned]
    return await FranchiseService.bulk_update_franchise_status(franchise_ids, data.is_active)


@router.get("/{franchise_id}", response_model=Franchise)
async def get_franchise(franchise_id: str) -> Franchise:
    with service_errors():
        return await FranchiseService.get_franchise(franchise_id)


@router.patch("/{franchise_id}", response_model=Franchise)
async def update_franchise(
    franchise_id: str, data: FranchiseUpdate, current_user: dict = Depends(business_only)
) -> Franchise:
    await _owned_franchise(franchise_id, current_user)
    with service_errors():
        return await FranchiseService.update_franchise(franchise_id, data)


@router.delete("/{franchise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_franchise(franchise_id: str, current_user: dict = Depends(business_only)) -> None:
    await _owned_franchise(franchise_id, current_user)
    if not await FranchiseService.delete_franchise(franchise_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Franchise not found")


@router.patch("/{franchise_id}/status", response_model=Franchise)
async def update_status(
    franchise_id: str, data: FranchiseStatusUpdate, current_user: dict = Depends(business_only)
) -> Franchise:
    await _owned_franchise(franchise_id, current_user)
    with service_errors():
        return await FranchiseService.update_franchise_status(franchise_id, data.is_active)


@router.get("/{franchise_id}/metrics", response_model=FranchisePerformanceMetrics)
async def performance_metrics(
    franchise_id: str, current_user: dict = Depends(business_only)
) -> FranchisePerformanceMetrics:
    await _owned_franchise(franchise_id, current_user)
    with service_errors():
        return await FranchiseService.get_franchise_performance_metrics(franchise_id)
