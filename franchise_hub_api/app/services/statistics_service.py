"""
Service layer for dashboard statistics.

This module aggregates the figures shown on the partner and business
dashboards: application counts, investment and revenue totals, plus
the data behind the revenue and applications charts.  All numbers are
computed from the records in the data store; nothing is sampled or
estimated.

Revenue is the sum of COMPLETED payment transactions on applications to
the business owner's franchises.  A transaction is placed in the month
it completed, or the month it was created if it has no completion time.
"""

from __future__ import annotations

import calendar
from datetime import datetime
from typing import Any, Dict, List, Optional

from franchise_hub_api.app.core.store import get_store, utcnow
from franchise_hub_api.app.schemas.application import ApplicationStatus, PaymentStatus
from franchise_hub_api.app.schemas.payment import PaymentTransaction
from franchise_hub_api.app.schemas.user import UserRole


PENDING_STATUSES = (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDER_REVIEW)

CHART_COLORS = {
    "Pending": "#ff9800",
    "Approved": "#4caf50",
    "Rejected": "#f44336",
}


def _transaction_date(transaction: PaymentTransaction) -> datetime:
    return transaction.completed_at or transaction.created_at


def _business_transactions(business_id: str) -> List[PaymentTransaction]:
    """Transactions on the owner's franchises.

    Matched on the transaction's own franchise id, so deleting an
    application keeps its payments.  Settlements are also matched through
    the owner's paid requests, which survive a franchise delete.
    """
    store = get_store()
    franchise_ids = {f.id for f in store.franchises if f.business_owner_id == business_id}
    settled_ids = {
        r.payment_transaction_id
        for r in store.payment_requests
        if r.business_owner_id == business_id and r.payment_transaction_id
    }
    return [
        t for t in store.payment_transactions
        if t.franchise_id in franchise_ids or t.id in settled_ids
    ]


class StatisticsService:
    """Service providing aggregated dashboard statistics."""

    @classmethod
    async def get_dashboard_stats(
        cls, user_id: str, role: UserRole, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Return the dashboard figures for a partner or a business owner."""
        if role == UserRole.PARTNER:
            return cls._partner_stats(user_id)
        return cls._business_stats(user_id, now or utcnow())

    @classmethod
    def _partner_stats(cls, partner_id: str) -> Dict[str, Any]:
        store = get_store()
        applications = [a for a in store.applications if a.partner_id == partner_id]
        approved = [a for a in applications if a.status == ApplicationStatus.APPROVED]
        total_investment = sum(
            t.amount
            for t in store.payment_transactions
            if t.partner_id == partner_id and t.status == PaymentStatus.COMPLETED
        )
        active_partnerships = 0
        for application in approved:
            franchise = store.find("franchises", application.franchise_id)
            if franchise is not None and franchise.is_active:
                active_partnerships += 1
        return {
            "total_applications": len(applications),
            "approved_applications": len(approved),
            "total_investment": total_investment,
            "active_partnerships": active_partnerships,
        }

    @classmethod
    def _business_stats(cls, business_id: str, now: datetime) -> Dict[str, Any]:
        store = get_store()
        franchises = [f for f in store.franchises if f.business_owner_id == business_id]
        franchise_ids = {f.id for f in franchises}
        applications = [a for a in store.applications if a.franchise_id in franchise_ids]
        transactions = _business_transactions(business_id)
        completed = [t for t in transactions if t.status == PaymentStatus.COMPLETED]
        approved = sum(1 for a in applications if a.status == ApplicationStatus.APPROVED)

        monthly_revenue = sum(
            t.amount
            for t in completed
            if _transaction_date(t).year == now.year and _transaction_date(t).month == now.month
        )
        return {
            "total_franchises": len(franchises),
            "active_franchises": sum(1 for f in franchises if f.is_active),
            "total_applications": len(applications),
            "pending_applications": sum(1 for a in applications if a.status in PENDING_STATUSES),
            "approved_applications": approved,
            "rejected_applications": sum(
                1 for a in applications if a.status == ApplicationStatus.REJECTED
            ),
            "total_revenue": sum(t.amount for t in completed),
            "monthly_revenue": monthly_revenue,
            "total_transactions": len(transactions),
            "pending_transactions": sum(1 for t in transactions if t.status == PaymentStatus.PENDING),
            "average_applications_per_franchise": (
                round(len(applications) / len(franchises), 1) if franchises else 0
            ),
            "conversion_rate": round(approved / len(applications) * 100) if applications else 0,
        }

    @classmethod
    async def get_revenue_chart_data(
        cls, business_id: str, months: int = 6, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Revenue per calendar month for the last ``months`` months, oldest first."""
        now = now or utcnow()
        buckets: List[tuple[int, int]] = []
        year, month = now.year, now.month
        for _ in range(months):
            buckets.insert(0, (year, month))
            month -= 1
            if month == 0:
                year, month = year - 1, 12

        totals = {bucket: 0.0 for bucket in buckets}
        for transaction in _business_transactions(business_id):
            if transaction.status != PaymentStatus.COMPLETED:
                continue
            when = _transaction_date(transaction)
            key = (when.year, when.month)
            if key in totals:
                totals[key] += transaction.amount

        return [
            {"month": calendar.month_abbr[m], "year": y, "revenue": totals[(y, m)]}
            for y, m in buckets
        ]

    @classmethod
    async def get_applications_chart_data(cls, business_id: str) -> List[Dict[str, Any]]:
        """Pending, approved and rejected application counts for the owner's franchises."""
        store = get_store()
        franchise_ids = {f.id for f in store.franchises if f.business_owner_id == business_id}
        applications = [a for a in store.applications if a.franchise_id in franchise_ids]
        counts = {
            "Pending": sum(1 for a in applications if a.status in PENDING_STATUSES),
            "Approved": sum(1 for a in applications if a.status == ApplicationStatus.APPROVED),
            "Rejected": sum(1 for a in applications if a.status == ApplicationStatus.REJECTED),
        }
        return [
            {"status": status, "count": count, "color": CHART_COLORS[status]}
            for status, count in counts.items()
        ]
