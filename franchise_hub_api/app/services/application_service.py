"""
Business logic for franchise applications.

Partners create applications against existing franchises; business
owners review them.  The lifecycle is::

    SUBMITTED -> UNDER_REVIEW (fee paid) -> APPROVED | REJECTED
    APPROVED <-> DEACTIVATED (see PartnershipService)

Each status change writes a timeline entry and, for review outcomes, a
notification to the partner.  Rejecting an application whose fee was
paid opens a refund request.

Missing applications raise ``LookupError``, invalid transitions raise
``ValueError`` and acting on another owner's application raises
``PermissionError``.
"""

import logging
from typing import Dict, List, Optional

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.store import (
    apply_update,
    ensure_aware,
    generate_unique_id,
    get_store,
    utcnow,
)
from franchise_hub_api.app.schemas.application import (
    ApplicationCreate,
    ApplicationDocument,
    ApplicationReview,
    ApplicationSearchFilters,
    ApplicationStatistics,
    ApplicationStatus,
    ApplicationUpdate,
    DocumentUpload,
    FranchiseApplication,
    PaymentStatus,
)
from franchise_hub_api.app.schemas.franchise import Franchise
from franchise_hub_api.app.schemas.notification import NotificationType
from franchise_hub_api.app.schemas.timeline import ApplicationTimelineEntry
from franchise_hub_api.app.services.timeline_service import TimelineService


logger = logging.getLogger(__name__)

# Statuses a business owner may set through a review.
REVIEW_OUTCOMES = {
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.APPROVED,
    ApplicationStatus.REJECTED,
}
# Applications in these statuses can no longer be reviewed.
CLOSED_STATUSES = {ApplicationStatus.WITHDRAWN, ApplicationStatus.DEACTIVATED}
EDITABLE_STATUSES = {ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED}

STATUS_LABELS = {
    ApplicationStatus.UNDER_REVIEW: "is under review",
    ApplicationStatus.APPROVED: "has been approved",
    ApplicationStatus.REJECTED: "has been rejected",
}


def calculate_application_fee(franchise: Franchise) -> float:
    """Base fee plus a fraction of the franchise fee, rounded to whole rupees."""
    return round(settings.application_base_fee + franchise.franchise_fee * settings.application_fee_rate)


def _by_submission_desc(applications: List[FranchiseApplication]) -> List[FranchiseApplication]:
    return sorted(applications, key=lambda a: a.submitted_at, reverse=True)


class ApplicationService:
    """Service for franchise applications and their review workflow."""

    @classmethod
    async def create_application(
        cls, data: ApplicationCreate, current_user: Dict[str, str]
    ) -> FranchiseApplication:
        """Submit an application for the current user.

        The franchise must exist.  The application fee is derived from
        the franchise fee and the franchise's ``application_count`` is
        incremented.
        """
        store = get_store()
        franchise = store.find("franchises", data.franchise_id)
        if franchise is None:
            raise LookupError(f"Franchise {data.franchise_id} not found")

        now = utcnow()
        application = FranchiseApplication(
            id=generate_unique_id(),
            franchise_id=franchise.id,
            franchise_name=franchise.name,
            franchise_category=franchise.category,
            business_owner_id=franchise.business_owner_id,
            business_owner_name=franchise.business_owner_name or "Business Owner",
            partner_id=current_user["user_id"],
            partner_name=current_user.get("full_name") or "",
            partner_email=current_user["sub"],
            status=ApplicationStatus.SUBMITTED,
            personal_info=data.personal_info,
            financial_info=data.financial_info,
            business_info=data.business_info,
            motivation=data.motivation,
            questions=data.questions,
            references=data.references,
            application_fee=calculate_application_fee(franchise),
            payment_status=PaymentStatus.PENDING,
            submitted_at=now,
            updated_at=now,
        )
        store.applications.append(application)
        franchise.application_count += 1
        TimelineService.add_entry(
            application.id,
            ApplicationStatus.SUBMITTED,
            current_user["user_id"],
            "Application submitted successfully",
            is_system_generated=True,
        )
        logger.info(
            "Application %s submitted by %s for franchise %s",
            application.id,
            application.partner_id,
            franchise.id,
        )
        store.notify_data_change()
        return application

    @classmethod
    async def list_applications(cls) -> List[FranchiseApplication]:
        return _by_submission_desc(get_store().applications)

    @classmethod
    async def get_application(cls, application_id: str) -> FranchiseApplication:
        application = get_store().find("applications", application_id)
        if application is None:
            raise LookupError(f"Application {application_id} not found")
        return application

    @classmethod
    async def get_applications_for_business(cls, business_owner_id: str) -> List[FranchiseApplication]:
        return _by_submission_desc(
            [a for a in get_store().applications if a.business_owner_id == business_owner_id]
        )

    @classmethod
    async def get_applications_for_partner(cls, partner_id: str) -> List[FranchiseApplication]:
        return _by_submission_desc([a for a in get_store().applications if a.partner_id == partner_id])

    @classmethod
    async def get_applications_by_franchise(cls, franchise_id: str) -> List[FranchiseApplication]:
        return _by_submission_desc([a for a in get_store().applications if a.franchise_id == franchise_id])

    @classmethod
    async def update_application(
        cls, application_id: str, data: ApplicationUpdate, current_user: Dict[str, str]
    ) -> FranchiseApplication:
        """Apply partner edits while the application is still a draft or just submitted."""
        application = await cls.get_application(application_id)
        if application.partner_id != current_user["user_id"]:
            raise PermissionError("Only the applying partner can edit this application")
        if application.status not in EDITABLE_STATUSES:
            raise ValueError(
                f"Application in status {application.status.value} can no longer be edited"
            )
        apply_update(application, data)
        application.updated_at = utcnow()
        get_store().notify_data_change()
        return application

    @classmethod
    async def delete_application(cls, application_id: str) -> None:
        """Remove an application.  Its timeline entries are kept."""
        application = await cls.get_application(application_id)
        store = get_store()
        store.applications.remove(application)
        logger.info("Deleted application %s", application_id)
        store.notify_data_change()

    @classmethod
    def _check_reviewer(cls, application: FranchiseApplication, current_user: Dict[str, str]) -> None:
        if application.business_owner_id != current_user["user_id"]:
            raise PermissionError("Only the franchise owner can review this application")
        if application.status in CLOSED_STATUSES:
            raise ValueError(
                f"Application in status {application.status.value} cannot be reviewed"
            )

    @classmethod
    def _record_review(
        cls,
        application: FranchiseApplication,
        status: ApplicationStatus,
        current_user: Dict[str, str],
        notes: Optional[str],
        rejection_reason: Optional[str] = None,
    ) -> None:
        """Apply a review outcome and its side effects, without persisting."""
        from franchise_hub_api.app.services.notification_service import NotificationService
        from franchise_hub_api.app.services.payment_service import PaymentService

        now = utcnow()
        application.status = status
        application.reviewed_by = current_user["user_id"]
        application.reviewed_at = now
        application.updated_at = now
        if notes:
            application.review_notes = notes

        if status == ApplicationStatus.REJECTED and rejection_reason:
            application.rejection_reason = rejection_reason
            if application.payment_status == PaymentStatus.COMPLETED:
                PaymentService.create_refund_request(application, rejection_reason)

        TimelineService.add_entry(application.id, status, current_user["user_id"], notes)
        NotificationService.create_notification(
            application.partner_id,
            NotificationType.APPLICATION_STATUS_CHANGE,
            "Application Status Updated",
            f"Your application for {application.franchise_name} {STATUS_LABELS[status]}.",
            application_id=application.id,
            franchise_id=application.franchise_id,
            action_url=f"/partner/applications/{application.id}",
            action_text="View Application",
            persist=False,
        )
        logger.info("Application %s reviewed: %s", application.id, status.value)

    @classmethod
    async def approve_application(
        cls, application_id: str, notes: Optional[str], current_user: Dict[str, str]
    ) -> FranchiseApplication:
        application = await cls.get_application(application_id)
        cls._check_reviewer(application, current_user)
        cls._record_review(
            application,
            ApplicationStatus.APPROVED,
            current_user,
            notes or "Application approved from dashboard",
        )
        get_store().notify_data_change()
        return application

    @classmethod
    async def reject_application(
        cls,
        application_id: str,
        notes: Optional[str],
        current_user: Dict[str, str],
        reason: Optional[str] = None,
    ) -> FranchiseApplication:
        application = await cls.get_application(application_id)
        cls._check_reviewer(application, current_user)
        cls._record_review(
            application,
            ApplicationStatus.REJECTED,
            current_user,
            notes or "Application rejected from dashboard",
            rejection_reason=reason,
        )
        get_store().notify_data_change()
        return application

    @classmethod
    async def review_application(
        cls, application_id: str, review: ApplicationReview, current_user: Dict[str, str]
    ) -> FranchiseApplication:
        """Set the review outcome of an application.

        ``review.status`` must be UNDER_REVIEW, APPROVED or REJECTED.  A
        rejection with a reason on a paid application opens a refund
        request for the application fee.
        """
        if review.status not in REVIEW_OUTCOMES:
            raise ValueError(f"Cannot review an application into status {review.status.value}")
        application = await cls.get_application(application_id)
        cls._check_reviewer(application, current_user)
        cls._record_review(
            application,
            review.status,
            current_user,
            review.review_notes,
            rejection_reason=review.rejection_reason,
        )
        get_store().notify_data_change()
        return application

    @classmethod
    async def upload_application_document(
        cls, application_id: str, document: DocumentUpload
    ) -> ApplicationDocument:
        application = await cls.get_application(application_id)
        now = utcnow()
        stored = ApplicationDocument(id=generate_unique_id(), uploaded_at=now, **document.model_dump())
        application.documents.append(stored)
        application.updated_at = now
        get_store().notify_data_change()
        return stored

    @classmethod
    async def get_application_timeline(cls, application_id: str) -> List[ApplicationTimelineEntry]:
        return await TimelineService.get_timeline(application_id)

    @classmethod
    async def search_applications(cls, filters: ApplicationSearchFilters) -> List[FranchiseApplication]:
        results = list(get_store().applications)
        if filters.business_owner_id:
            results = [a for a in results if a.business_owner_id == filters.business_owner_id]
        if filters.partner_id:
            results = [a for a in results if a.partner_id == filters.partner_id]
        if filters.status:
            results = [a for a in results if a.status == filters.status]
        if filters.franchise_id:
            results = [a for a in results if a.franchise_id == filters.franchise_id]
        if filters.search_term:
            term = filters.search_term.lower()
            results = [
                a for a in results
                if term in a.partner_name.lower()
                or term in a.franchise_name.lower()
                or term in a.personal_info.email.lower()
            ]
        if filters.date_from:
            date_from = ensure_aware(filters.date_from)
            results = [a for a in results if a.submitted_at >= date_from]
        if filters.date_to:
            date_to = ensure_aware(filters.date_to)
            results = [a for a in results if a.submitted_at <= date_to]
        return _by_submission_desc(results)

    @classmethod
    async def get_application_statistics(cls, business_owner_id: str) -> ApplicationStatistics:
        applications = [a for a in get_store().applications if a.business_owner_id == business_owner_id]

        def count(status: ApplicationStatus) -> int:
            return sum(1 for a in applications if a.status == status)

        processed = [
            a for a in applications
            if a.reviewed_at is not None
            and a.status in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)
        ]
        average_days = 0
        if processed:
            total_days = sum((a.reviewed_at - a.submitted_at).days for a in processed)
            average_days = round(total_days / len(processed))

        return ApplicationStatistics(
            total=len(applications),
            submitted=count(ApplicationStatus.SUBMITTED),
            under_review=count(ApplicationStatus.UNDER_REVIEW),
            approved=count(ApplicationStatus.APPROVED),
            rejected=count(ApplicationStatus.REJECTED),
            withdrawn=count(ApplicationStatus.WITHDRAWN),
            deactivated=count(ApplicationStatus.DEACTIVATED),
            total_fees_collected=sum(
                a.application_fee for a in applications if a.payment_status == PaymentStatus.COMPLETED
            ),
            average_processing_days=average_days,
        )
