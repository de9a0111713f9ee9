"""
Business logic for partnerships.

An APPROVED application is an active partnership between a business
owner and a partner.  The owner may deactivate it, which records a
``PartnershipDeactivation`` and moves the application to DEACTIVATED,
and later reactivate it back to APPROVED.  The partner is notified in
both cases.
"""

import logging
from typing import Dict, List

from franchise_hub_api.app.core.store import generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.application import (
    ApplicationStatus,
    FranchiseApplication,
    PaymentStatus,
)
from franchise_hub_api.app.schemas.notification import NotificationType
from franchise_hub_api.app.schemas.partnership import (
    DEACTIVATION_REASON_LABELS,
    DeactivationReason,
    Partnership,
    PartnershipDeactivation,
)
from franchise_hub_api.app.services.application_service import ApplicationService
from franchise_hub_api.app.services.notification_service import NotificationService
from franchise_hub_api.app.services.timeline_service import TimelineService


logger = logging.getLogger(__name__)


class PartnershipService:
    """Service for deactivating, reactivating and listing partnerships."""

    @classmethod
    def _check_owner(cls, application: FranchiseApplication, current_user: Dict[str, str]) -> None:
        if application.business_owner_id != current_user["user_id"]:
            raise PermissionError("Only the franchise owner can manage this partnership")

    @classmethod
    async def deactivate_partnership(
        cls,
        application_id: str,
        reason: DeactivationReason,
        notes: str | None,
        current_user: Dict[str, str],
    ) -> FranchiseApplication:
        application = await ApplicationService.get_application(application_id)
        cls._check_owner(application, current_user)
        if application.status != ApplicationStatus.APPROVED:
            raise ValueError(
                f"Only approved partnerships can be deactivated (status is {application.status.value})"
            )

        now = utcnow()
        application.status = ApplicationStatus.DEACTIVATED
        application.updated_at = now
        store = get_store()
        store.partnership_deactivations.append(
            PartnershipDeactivation(
                id=generate_unique_id(),
                application_id=application.id,
                franchise_id=application.franchise_id,
                business_owner_id=current_user["user_id"],
                partner_id=application.partner_id,
                reason=reason,
                notes=notes,
                deactivated_at=now,
                deactivated_by=current_user["user_id"],
                created_at=now,
                updated_at=now,
            )
        )

        reason_text = DEACTIVATION_REASON_LABELS[reason]
        NotificationService.create_notification(
            application.partner_id,
            NotificationType.PARTNERSHIP_DEACTIVATED,
            "Partnership Deactivated",
            f"Your partnership for {application.franchise_name} has been deactivated. "
            f"Reason: {reason_text}",
            application_id=application.id,
            franchise_id=application.franchise_id,
            action_url=f"/partner/partnerships/{application.id}",
            action_text="View Details",
            persist=False,
        )
        timeline_notes = f"Partnership deactivated. Reason: {reason_text}"
        if notes:
            timeline_notes += f". Notes: {notes}"
        TimelineService.add_entry(
            application.id, ApplicationStatus.DEACTIVATED, current_user["user_id"], timeline_notes
        )
        logger.info("Partnership %s deactivated (%s)", application.id, reason.value)
        store.notify_data_change()
        return application

    @classmethod
    async def reactivate_partnership(
        cls, application_id: str, current_user: Dict[str, str]
    ) -> FranchiseApplication:
        application = await ApplicationService.get_application(application_id)
        cls._check_owner(application, current_user)
        if application.status != ApplicationStatus.DEACTIVATED:
            raise ValueError(
                f"Only deactivated partnerships can be reactivated (status is {application.status.value})"
            )

        application.status = ApplicationStatus.APPROVED
        application.updated_at = utcnow()
        NotificationService.create_notification(
            application.partner_id,
            NotificationType.PARTNERSHIP_REACTIVATED,
            "Partnership Reactivated",
            f"Your partnership for {application.franchise_name} has been reactivated "
            "and is now active again.",
            application_id=application.id,
            franchise_id=application.franchise_id,
            action_url=f"/partner/partnerships/{application.id}",
            action_text="View Details",
            persist=False,
        )
        TimelineService.add_entry(
            application.id,
            ApplicationStatus.APPROVED,
            current_user["user_id"],
            "Partnership reactivated and restored to active status",
        )
        logger.info("Partnership %s reactivated", application.id)
        get_store().notify_data_change()
        return application

    @classmethod
    async def get_deactivations_for_application(cls, application_id: str) -> List[PartnershipDeactivation]:
        deactivations = [
            d for d in get_store().partnership_deactivations if d.application_id == application_id
        ]
        return sorted(deactivations, key=lambda d: d.deactivated_at, reverse=True)

    @classmethod
    async def get_partnerships_for_partner(cls, partner_id: str) -> List[Partnership]:
        """Join each approved application of the partner with its franchise and payments."""
        store = get_store()
        partnerships = []
        for application in store.applications:
            if application.partner_id != partner_id or application.status != ApplicationStatus.APPROVED:
                continue
            franchise = store.find("franchises", application.franchise_id)
            transactions = [
                t for t in store.payment_transactions
                if t.application_id == application.id and t.status == PaymentStatus.COMPLETED
            ]
            partnerships.append(
                Partnership(
                    application=application,
                    franchise=franchise,
                    transactions=transactions,
                    total_investment=sum(t.amount for t in transactions),
                    status="Active" if franchise is not None and franchise.is_active else "Inactive",
                )
            )
        return partnerships
