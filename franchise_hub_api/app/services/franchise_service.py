"""
Business logic for franchise listings.

The ``FranchiseService`` creates, updates and searches franchises held in
the data store.  Every mutation ends with ``notify_data_change`` so the
whole state is persisted and broadcast.  Missing franchises raise
``LookupError``; the endpoints translate that to HTTP 404.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from franchise_hub_api.app.core.store import apply_update, generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.application import ApplicationStatus, PaymentStatus
from franchise_hub_api.app.schemas.franchise import (
    Franchise,
    FranchiseCreate,
    FranchiseRequirements,
    FranchiseSearchFilters,
    FranchiseStatus,
    FranchiseSupport,
    FranchiseUpdate,
    FranchisePerformanceMetrics,
    ContactInfo,
)


logger = logging.getLogger(__name__)


def _newest_first(franchises: List[Franchise]) -> List[Franchise]:
    return sorted(franchises, key=lambda f: f.created_at, reverse=True)


def _month_start(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class FranchiseService:
    """Service for managing franchise listings."""

    @classmethod
    async def list_franchises(cls) -> List[Franchise]:
        return _newest_first(get_store().franchises)

    @classmethod
    async def get_franchise(cls, franchise_id: str) -> Franchise:
        franchise = get_store().find("franchises", franchise_id)
        if franchise is None:
            raise LookupError(f"Franchise {franchise_id} not found")
        return franchise

    @classmethod
    async def get_featured_franchises(cls, limit: int = 3) -> List[Franchise]:
        """Return the ``limit`` most recently created franchises.

        Duplicate ids or names in the collection are reported as warnings;
        they usually indicate a bad merge of stored data.
        """
        franchises = get_store().franchises
        duplicate_ids = [k for k, n in Counter(f.id for f in franchises).items() if n > 1]
        if duplicate_ids:
            logger.warning("Duplicate franchise ids found: %s", duplicate_ids)
        duplicate_names = [k for k, n in Counter(f.name for f in franchises).items() if n > 1]
        if duplicate_names:
            logger.warning("Duplicate franchise names found: %s", duplicate_names)
        return _newest_first(franchises)[:limit]

    @classmethod
    async def get_franchises_by_owner(cls, owner_id: str) -> List[Franchise]:
        return _newest_first([f for f in get_store().franchises if f.business_owner_id == owner_id])

    @classmethod
    async def create_franchise(cls, data: FranchiseCreate, current_user: Dict[str, str]) -> Franchise:
        """Create a franchise from the listing form.

        Fields the form does not collect are filled with defaults: a
        single company-owned unit, generic requirements, nationwide
        territories and placeholder contact details.
        """
        store = get_store()
        now = utcnow()
        franchise = Franchise(
            id=generate_unique_id(),
            name=data.name,
            description=data.description,
            category=data.category,
            status=FranchiseStatus.ACTIVE,
            business_owner_id=current_user["user_id"],
            business_owner_name=current_user.get("full_name") or "",
            franchise_fee=data.franchise_fee,
            royalty_fee=data.royalty_fee,
            marketing_fee=data.marketing_fee,
            initial_investment=data.initial_investment,
            liquid_capital_required=data.liquid_capital_required,
            net_worth_required=data.net_worth_required,
            year_established=data.year_established,
            requirements=FranchiseRequirements(experience=data.requirements.experience),
            support=FranchiseSupport(
                training=data.support.training,
                marketing=data.support.marketing,
                operations=data.support.operations,
            ),
            territories=data.territories or ["Available nationwide"],
            available_states=data.available_states or ["All states"],
            contact_info=data.contact_info or ContactInfo(),
            created_at=now,
            updated_at=now,
        )
        store.franchises.append(franchise)
        logger.info("Created franchise '%s' (%s)", franchise.name, franchise.id)
        store.notify_data_change()
        return franchise

    @classmethod
    async def update_franchise(cls, franchise_id: str, data: FranchiseUpdate) -> Franchise:
        """Apply the fields set in ``data`` to the franchise.

        Raises ``ValueError`` if the result is not a valid franchise, e.g.
        when a required field is explicitly set to ``null``.
        """
        franchise = await cls.get_franchise(franchise_id)
        changes = apply_update(franchise, data)
        if "status" in changes and "is_active" not in changes:
            franchise.is_active = franchise.status == FranchiseStatus.ACTIVE
        franchise.updated_at = utcnow()
        get_store().notify_data_change()
        return franchise

    @classmethod
    async def delete_franchise(cls, franchise_id: str) -> bool:
        store = get_store()
        franchise = store.find("franchises", franchise_id)
        if franchise is None:
            return False
        store.franchises.remove(franchise)
        logger.info("Deleted franchise %s", franchise_id)
        store.notify_data_change()
        return True

    @classmethod
    def _set_active(cls, franchise: Franchise, is_active: bool) -> None:
        franchise.is_active = is_active
        franchise.status = FranchiseStatus.ACTIVE if is_active else FranchiseStatus.INACTIVE
        franchise.updated_at = utcnow()

    @classmethod
    async def update_franchise_status(cls, franchise_id: str, is_active: bool) -> Franchise:
        franchise = await cls.get_franchise(franchise_id)
        cls._set_active(franchise, is_active)
        get_store().notify_data_change()
        return franchise

    @classmethod
    async def bulk_update_franchise_status(cls, franchise_ids: List[str], is_active: bool) -> List[Franchise]:
        """Set ``is_active`` on every known franchise in ``franchise_ids``.

        Unknown ids are skipped.  Returns the franchises that were updated.
        """
        store = get_store()
        updated = []
        for franchise_id in franchise_ids:
            franchise = store.find("franchises", franchise_id)
            if franchise is None:
                logger.warning("Bulk status update: franchise %s not found", franchise_id)
                continue
            cls._set_active(franchise, is_active)
            updated.append(franchise)
        store.notify_data_change()
        return updated

    @classmethod
    async def search_franchises(cls, filters: FranchiseSearchFilters) -> List[Franchise]:
        results = list(get_store().franchises)
        if filters.query:
            term = filters.query.lower()
            results = [
                f for f in results
                if term in f.name.lower() or term in f.description.lower()
            ]
        if filters.category:
            results = [f for f in results if f.category == filters.category]
        if filters.status is not None:
            results = [f for f in results if f.is_active == filters.status]
        if filters.min_investment is not None:
            results = [f for f in results if f.initial_investment.min >= filters.min_investment]
        if filters.max_investment is not None:
            results = [f for f in results if f.initial_investment.max <= filters.max_investment]
        if filters.sort_by:
            sort_keys = {
                "name": lambda f: f.name.lower(),
                "category": lambda f: f.category.value,
                "created_at": lambda f: f.created_at,
            }
            results.sort(
                key=sort_keys[filters.sort_by],
                reverse=filters.sort_direction == "desc",
            )
        return results

    @classmethod
    async def get_franchise_performance_metrics(
        cls, franchise_id: str, now: Optional[datetime] = None
    ) -> FranchisePerformanceMetrics:
        """Aggregate application and revenue figures for one franchise.

        ``average_time_to_partnership`` is the mean number of whole days
        between submission and review of approved applications.
        ``monthly_growth`` compares the number of applications submitted
        in the current calendar month with the previous one, in percent.
        """
        await cls.get_franchise(franchise_id)
        store = get_store()
        now = now or utcnow()
        applications = [a for a in store.applications if a.franchise_id == franchise_id]
        approved = [a for a in applications if a.status == ApplicationStatus.APPROVED]
        total_revenue = sum(
            t.amount
            for t in store.payment_transactions
            if t.franchise_id == franchise_id and t.status == PaymentStatus.COMPLETED
        )

        reviewed = [a for a in approved if a.reviewed_at is not None]
        average_days = 0.0
        if reviewed:
            total_days = sum(max((a.reviewed_at - a.submitted_at).days, 0) for a in reviewed)
            average_days = total_days / len(reviewed)

        this_month = _month_start(now)
        last_month = _month_start(this_month - timedelta(days=1))
        current = sum(1 for a in applications if a.submitted_at >= this_month)
        previous = sum(1 for a in applications if last_month <= a.submitted_at < this_month)
        if previous:
            monthly_growth = round((current - previous) / previous * 100, 1)
        else:
            monthly_growth = 100.0 if current else 0.0

        total = len(applications)
        return FranchisePerformanceMetrics(
            total_applications=total,
            approved_applications=len(approved),
            conversion_rate=(len(approved) / total * 100) if total else 0,
            total_revenue=total_revenue,
            average_time_to_partnership=round(average_days),
            monthly_growth=monthly_growth,
            active_partnerships=len(approved),
        )
