"""
Application endpoints for API v1.

Partners create, edit and pay for their applications.  Business owners
review applications to their franchises, request payments and manage the
resulting partnerships.  Both parties may read an application, its
timeline and its payment history; nobody else may.
"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from franchise_hub_api.app.api.v1.errors import service_errors
from franchise_hub_api.app.core.security import get_current_user, require_roles
from franchise_hub_api.app.schemas.application import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationDocument,
    ApplicationReview,
    ApplicationSearchFilters,
    ApplicationStatistics,
    ApplicationStatus,
    ApplicationUpdate,
    DocumentUpload,
    FranchiseApplication,
)
from franchise_hub_api.app.schemas.partnership import DeactivationCreate, PartnershipDeactivation
from franchise_hub_api.app.schemas.payment import (
    PaymentData,
    PaymentRequest,
    PaymentRequestCreate,
    PaymentTransaction,
    RefundRequest,
)
from franchise_hub_api.app.schemas.timeline import ApplicationTimelineEntry
from franchise_hub_api.app.schemas.user import UserRole
from franchise_hub_api.app.services.application_service import ApplicationService
from franchise_hub_api.app.services.partnership_service import PartnershipService
from franchise_hub_api.app.services.payment_service import PaymentService


router = APIRouter()

business_only = require_roles(UserRole.BUSINESS)
partner_only = require_roles(UserRole.PARTNER)


async def _visible_application(application_id: str, current_user: dict) -> FranchiseApplication:
    """Return the application if the current user is its partner or franchise owner."""
    with service_errors():
        application = await ApplicationService.get_application(application_id)
    if current_user["user_id"] not in (application.partner_id, application.business_owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a party to this application")
    return application


@router.post("/", response_model=FranchiseApplication, status_code=status.HTTP_201_CREATED)
async def create_application(
    data: ApplicationCreate, current_user: dict = Depends(partner_only)
) -> FranchiseApplication:
    with service_errors():
        return await ApplicationService.create_application(data, current_user)


@router.get("/", response_model=List[FranchiseApplication])
async def list_applications(
    status_param: ApplicationStatus | None = Query(None, alias="status"),
    franchise_id: str | None = None,
    search_term: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    current_user: dict = Depends(get_current_user),
) -> List[FranchiseApplication]:
    """List the caller's applications, newest first.

    Business owners see applications to their franchises; partners see
    their own.  Optional filters narrow the result.
    """
    filters = ApplicationSearchFilters(
        status=status_param,
        franchise_id=franchise_id,
        search_term=search_term,
        date_from=date_from,
        date_to=date_to,
    )
    if current_user["role"] == UserRole.BUSINESS.value:
        filters.business_owner_id = current_user["user_id"]
    else:
        filters.partner_id = current_user["user_id"]
    return await ApplicationService.search_applications(filters)


@router.get("/statistics", response_model=ApplicationStatistics)
async def application_statistics(current_user: dict = Depends(business_only)) -> ApplicationStatistics:
    return await ApplicationService.get_application_statistics(current_user["user_id"])


@router.get("/{application_id}", response_model=FranchiseApplication)
async def get_application(application_id: str, current_user: dict = Depends(get_current_user)) -> FranchiseApplication:
    return await _visible_application(application_id, current_user)


@router.patch("/{application_id}", response_model=FranchiseApplication)
async def update_application(
    application_id: str, data: ApplicationUpdate, current_user: dict = Depends(partner_only)
) -> FranchiseApplication:
    with service_errors():
        return await ApplicationService.update_application(application_id, data, current_user)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(application_id: str, current_user: dict = Depends(get_current_user)) -> None:
    await _visible_application(application_id, current_user)
    with service_errors():
        await ApplicationService.delete_application(application_id)


@router.post("/{application_id}/approve", response_model=FranchiseApplication)
async def approve_application(
    application_id: str,
    decision: ApplicationDecision | None = None,
    current_user: dict = Depends(business_only),
) -> FranchiseApplication:
    decision = decision or ApplicationDecision()
    with service_errors():
        return await ApplicationService.approve_application(application_id, decision.notes, current_user)


@router.post("/{application_id}/reject", response_model=FranchiseApplication)
async def reject_application(
    application_id: str,
    decision: ApplicationDecision | None = None,
    current_user: dict = Depends(business_only),
) -> FranchiseApplication:
    decision = decision or ApplicationDecision()
    with service_errors():
        return await ApplicationService.reject_application(
            application_id, decision.notes, current_user, reason=decision.reason
        )


@router.post("/{application_id}/review", response_model=FranchiseApplication)
async def review_application(
    application_id: str, review: ApplicationReview, current_user: dict = Depends(business_only)
) -> FranchiseApplication:
    with service_errors():
        return await ApplicationService.review_application(application_id, review, current_user)


@router.post(
    "/{application_id}/documents",
    response_model=ApplicationDocument,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    application_id: str, document: DocumentUpload, current_user: dict = Depends(partner_only)
) -> ApplicationDocument:
    await _visible_application(application_id, current_user)
    with service_errors():
        return await ApplicationService.upload_application_document(application_id, document)


@router.get("/{application_id}/timeline", response_model=List[ApplicationTimelineEntry])
async def application_timeline(
    application_id: str, current_user: dict = Depends(get_current_user)
) -> List[ApplicationTimelineEntry]:
    await _visible_application(application_id, current_user)
    return await ApplicationService.get_application_timeline(application_id)


@router.post(
    "/{application_id}/payment",
    response_model=PaymentTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def pay_application_fee(
    application_id: str,
    payment_data: PaymentData | None = None,
    current_user: dict = Depends(partner_only),
) -> PaymentTransaction:
    """Pay the application fee.  The application moves to UNDER_REVIEW."""
    await _visible_application(application_id, current_user)
    with service_errors():
        return await PaymentService.process_application_payment(application_id, payment_data or PaymentData())


@router.get("/{application_id}/transactions", response_model=List[PaymentTransaction])
async def application_transactions(
    application_id: str, current_user: dict = Depends(get_current_user)
) -> List[PaymentTransaction]:
    await _visible_application(application_id, current_user)
    return await PaymentService.get_payment_transactions_for_application(application_id)


@router.post("/{application_id}/deactivate", response_model=FranchiseApplication)
async def deactivate_partnership(
    application_id: str, data: DeactivationCreate, current_user: dict = Depends(business_only)
) -> FranchiseApplication:
    with service_errors():
        return await PartnershipService.deactivate_partnership(
            application_id, data.reason, data.notes, current_user
        )


@router.post("/{application_id}/reactivate", response_model=FranchiseApplication)
async def reactivate_partnership(
    application_id: str, current_user: dict = Depends(business_only)
) -> FranchiseApplication:
    with service_errors():
        return await PartnershipService.reactivate_partnership(application_id, current_user)


@router.get("/{application_id}/deactivations", response_model=List[PartnershipDeactivation])
async def application_deactivations(
    application_id: str, current_user: dict = Depends(get_current_user)
) -> List[PartnershipDeactivation]:
    await _visible_application(application_id, current_user)
    return await PartnershipService.get_deactivations_for_application(application_id)


@router.post(
    "/{application_id}/payment-requests",
    response_model=PaymentRequest,
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_request(
    application_id: str, data: PaymentRequestCreate, current_user: dict = Depends(business_only)
) -> PaymentRequest:
    with service_errors():
        return await PaymentService.create_payment_request(application_id, data, current_user)


@router.get("/{application_id}/payment-requests", response_model=List[PaymentRequest])
async def application_payment_requests(
    application_id: str, current_user: dict = Depends(get_current_user)
) -> List[PaymentRequest]:
    await _visible_application(application_id, current_user)
    return await PaymentService.get_payment_requests_for_application(application_id)


@router.get("/{application_id}/refunds", response_model=List[RefundRequest])
async def application_refunds(
    application_id: str, current_user: dict = Depends(get_current_user)
) -> List[RefundRequest]:
    await _visible_application(application_id, current_user)
    return await PaymentService.get_refund_requests_for_application(application_id)
