"""
Payment endpoints for API v1.

Transactions, payment requests and refunds.  Listings are scoped to the
caller: partners see what they paid or were asked to pay, business
owners see what relates to their franchises.  The payment gateway is
simulated, so every payment completes immediately.
"""

from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from franchise_hub_api.app.api.v1.errors import service_errors
from franchise_hub_api.app.core.security import get_current_user, require_roles
from franchise_hub_api.app.schemas.application import PaymentStatus
from franchise_hub_api.app.schemas.payment import (
    PaymentRequest,
    PaymentRequestStatus,
    PaymentRequestUpdate,
    PaymentTransaction,
    PaymentTransactionCreate,
    PaymentTransactionFilters,
    RefundRequest,
    RefundStatus,
    SettlementRequest,
)
from franchise_hub_api.app.schemas.user import UserRole
from franchise_hub_api.app.services.application_service import ApplicationService
from franchise_hub_api.app.services.payment_service import PaymentService


router = APIRouter()

business_only = require_roles(UserRole.BUSINESS)
partner_only = require_roles(UserRole.PARTNER)


def _is_business(current_user: dict) -> bool:
    return current_user["role"] == UserRole.BUSINESS.value


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def _owned_request(request_id: str, current_user: dict) -> PaymentRequest:
    with service_errors():
        request = await PaymentService.get_payment_request(request_id)
    if request.business_owner_id != current_user["user_id"]:
        raise _forbidden("Not the owner of this payment request")
    return request


@router.get("/transactions", response_model=List[PaymentTransaction])
async def list_transactions(
    application_id: str | None = None,
    franchise_id: str | None = None,
    status_param: PaymentStatus | None = Query(None, alias="status"),
    sort_by: Literal["created_at", "amount"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
) -> List[PaymentTransaction]:
    """List transactions visible to the caller.

    Supports filters ``application_id``, ``franchise_id`` and ``status``,
    sorting by ``created_at`` or ``amount`` and pagination.
    """
    filters = PaymentTransactionFilters(
        application_id=application_id,
        franchise_id=franchise_id,
        status=status_param,
        sort_by=sort_by,
        sort_direction=order,
        limit=limit,
        offset=offset,
    )
    if _is_business(current_user):
        filters.business_owner_id = current_user["user_id"]
    else:
        filters.partner_id = current_user["user_id"]
    return await PaymentService.list_payment_transactions(filters)


@router.post("/transactions", response_model=PaymentTransaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: PaymentTransactionCreate, current_user: dict = Depends(business_only)
) -> PaymentTransaction:
    """Record a transaction manually, e.g. an offline payment."""
    with service_errors():
        application = await ApplicationService.get_application(data.application_id)
    if application.business_owner_id != current_user["user_id"]:
        raise _forbidden("Not the owner of this application")
    with service_errors():
        return await PaymentService.create_payment_transaction(data)


@router.get("/transactions/recent", response_model=List[PaymentTransaction])
async def recent_transactions(
    limit: int = Query(3, ge=1, le=50), current_user: dict = Depends(get_current_user)
) -> List[PaymentTransaction]:
    if _is_business(current_user):
        return await PaymentService.get_recent_payment_transactions_for_business(current_user["user_id"], limit)
    return await PaymentService.get_recent_transactions_for_partner(current_user["user_id"], limit)


@router.get("/transactions/{transaction_id}", response_model=PaymentTransaction)
async def get_transaction(transaction_id: str, current_user: dict = Depends(get_current_user)) -> PaymentTransaction:
    with service_errors():
        transaction = await PaymentService.get_payment_transaction(transaction_id)
        application = await ApplicationService.get_application(transaction.application_id)
    if current_user["user_id"] not in (transaction.partner_id, application.business_owner_id):
        raise _forbidden("Not a party to this transaction")
    return transaction


@router.get("/requests", response_model=List[PaymentRequest])
async def list_payment_requests(
    status_param: PaymentRequestStatus | None = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
) -> List[PaymentRequest]:
    if _is_business(current_user):
        return await PaymentService.list_payment_requests(
            business_owner_id=current_user["user_id"], status=status_param
        )
    return await PaymentService.list_payment_requests(partner_id=current_user["user_id"], status=status_param)


@router.post("/requests/mark-overdue", response_model=List[PaymentRequest])
async def mark_overdue(current_user: dict = Depends(business_only)) -> List[PaymentRequest]:
    """Flag the caller's pending requests whose due date has passed."""
    return await PaymentService.mark_overdue_payment_requests(business_owner_id=current_user["user_id"])


@router.get("/requests/{request_id}", response_model=PaymentRequest)
async def get_payment_request(request_id: str, current_user: dict = Depends(get_current_user)) -> PaymentRequest:
    with service_errors():
        request = await PaymentService.get_payment_request(request_id)
    if current_user["user_id"] not in (request.partner_id, request.business_owner_id):
        raise _forbidden("Not a party to this payment request")
    return request


@router.patch("/requests/{request_id}", response_model=PaymentRequest)
async def update_payment_request(
    request_id: str, data: PaymentRequestUpdate, current_user: dict = Depends(business_only)
) -> PaymentRequest:
    await _owned_request(request_id, current_user)
    with service_errors():
        return await PaymentService.update_payment_request(request_id, data)


@router.post("/requests/{request_id}/cancel", response_model=PaymentRequest)
async def cancel_payment_request(request_id: str, current_user: dict = Depends(business_only)) -> PaymentRequest:
    await _owned_request(request_id, current_user)
    with service_errors():
        return await PaymentService.cancel_payment_request(request_id)


@router.post("/settlement", response_model=List[PaymentTransaction])
async def settle_payment_requests(
    data: SettlementRequest, current_user: dict = Depends(partner_only)
) -> List[PaymentTransaction]:
    """Pay several open payment requests at once."""
    with service_errors():
        return await PaymentService.process_payment_requests_settlement(
            data.payment_request_ids, data.payment_data, current_user
        )


@router.get("/refunds", response_model=List[RefundRequest])
async def list_refunds(
    status_param: RefundStatus | None = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
) -> List[RefundRequest]:
    if not _is_business(current_user):
        return await PaymentService.list_refund_requests(partner_id=current_user["user_id"], status=status_param)
    owned = {
        a.id for a in await ApplicationService.get_applications_for_business(current_user["user_id"])
    }
    refunds = await PaymentService.list_refund_requests(status=status_param)
    return [r for r in refunds if r.application_id in owned]


@router.post("/refunds/{refund_id}/process", response_model=RefundRequest)
async def process_refund(
    refund_id: str, notes: str | None = None, current_user: dict = Depends(business_only)
) -> RefundRequest:
    with service_errors():
        return await PaymentService.process_refund_request(refund_id, current_user, notes=notes)
