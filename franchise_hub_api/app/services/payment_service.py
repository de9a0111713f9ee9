"""
Business logic for payments.

This module covers three related flows:

* Application fees.  ``process_application_payment`` records a completed
  transaction for an application's fee and moves the application into
  review.
* Payment requests.  A business owner asks a partner for money with
  ``create_payment_request``; the partner settles one or more requests
  with ``process_payment_requests_settlement``.
* Refunds.  Rejecting a paid application opens a refund request, which
  the business owner completes with ``process_refund_request``.

The payment gateway is simulated: every payment succeeds immediately and
is given generated transaction and gateway references.
"""

import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.currency import format_currency
from franchise_hub_api.app.core.store import apply_update, ensure_aware, generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.application import (
    ApplicationStatus,
    FranchiseApplication,
    PaymentStatus,
)
from franchise_hub_api.app.schemas.notification import NotificationType
from franchise_hub_api.app.schemas.payment import (
    PaymentData,
    PaymentRequest,
    PaymentRequestCreate,
    PaymentRequestStatus,
    PaymentRequestUpdate,
    PaymentTransaction,
    PaymentTransactionCreate,
    PaymentTransactionFilters,
    RefundRequest,
    RefundStatus,
)
from franchise_hub_api.app.services.notification_service import NotificationService
from franchise_hub_api.app.services.timeline_service import TimelineService


logger = logging.getLogger(__name__)

OPEN_REQUEST_STATUSES = {PaymentRequestStatus.PENDING, PaymentRequestStatus.OVERDUE}
OPEN_REFUND_STATUSES = {RefundStatus.PENDING, RefundStatus.PROCESSING}


def _reference(prefix: str) -> str:
    suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(6))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def _newest_first(transactions: List[PaymentTransaction]) -> List[PaymentTransaction]:
    return sorted(transactions, key=lambda t: t.created_at, reverse=True)


class PaymentService:
    """Service for payment transactions, payment requests and refunds."""

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @classmethod
    def _completed_transaction(
        cls,
        application: FranchiseApplication,
        amount: float,
        description: str,
        payment_data: PaymentData,
        currency: Optional[str] = None,
    ) -> PaymentTransaction:
        now = utcnow()
        transaction_id = generate_unique_id()
        transaction = PaymentTransaction(
            id=transaction_id,
            application_id=application.id,
            partner_id=application.partner_id,
            partner_name=application.partner_name,
            franchise_id=application.franchise_id,
            franchise_name=application.franchise_name,
            amount=amount,
            currency=currency or settings.currency,
            status=PaymentStatus.COMPLETED,
            payment_method=payment_data.payment_method,
            transaction_reference=_reference("txn"),
            gateway_transaction_id=_reference("gateway"),
            card_last4=payment_data.card_last4,
            bank_name=payment_data.bank_name,
            upi_id=payment_data.upi_id,
            initiated_at=now,
            completed_at=now,
            description=description,
            receipt_url=f"/receipts/{transaction_id}.pdf",
            created_at=now,
            updated_at=now,
        )
        get_store().payment_transactions.append(transaction)
        return transaction

    @classmethod
    async def process_application_payment(
        cls, application_id: str, payment_data: PaymentData
    ) -> PaymentTransaction:
        """Pay the application fee and move the application into review."""
        from franchise_hub_api.app.services.application_service import ApplicationService

        application = await ApplicationService.get_application(application_id)
        if application.payment_status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED):
            raise ValueError(f"Application fee for {application_id} has already been paid")

        transaction = cls._completed_transaction(
            application,
            application.application_fee,
            f"Application fee for {application.franchise_name} franchise",
            payment_data,
        )
        now = transaction.completed_at
        application.payment_status = PaymentStatus.COMPLETED
        application.payment_transaction_id = transaction.id
        application.paid_at = now
        application.status = ApplicationStatus.UNDER_REVIEW
        application.updated_at = now
        TimelineService.add_entry(
            application.id,
            ApplicationStatus.UNDER_REVIEW,
            None,
            "Application moved to review after payment confirmation",
            is_system_generated=True,
        )
        logger.info(
            "Application fee %s paid for application %s",
            format_currency(transaction.amount, True),
            application.id,
        )
        get_store().notify_data_change()
        return transaction

    @classmethod
    async def create_payment_transaction(cls, data: PaymentTransactionCreate) -> PaymentTransaction:
        """Record a transaction for an application with an explicit status."""
        from franchise_hub_api.app.services.application_service import ApplicationService

        application = await ApplicationService.get_application(data.application_id)
        now = utcnow()
        transaction = PaymentTransaction(
            id=generate_unique_id(),
            application_id=application.id,
            partner_id=application.partner_id,
            partner_name=application.partner_name,
            franchise_id=application.franchise_id,
            franchise_name=application.franchise_name,
            amount=data.amount,
            currency=settings.currency,
            status=data.status,
            payment_method=data.payment_method,
            transaction_reference=_reference("txn"),
            card_last4=data.card_last4,
            bank_name=data.bank_name,
            upi_id=data.upi_id,
            initiated_at=now,
            completed_at=now if data.status == PaymentStatus.COMPLETED else None,
            failed_at=now if data.status == PaymentStatus.FAILED else None,
            description=data.description,
            created_at=now,
            updated_at=now,
        )
        store = get_store()
        store.payment_transactions.append(transaction)
        store.notify_data_change()
        return transaction

    @classmethod
    async def get_payment_transaction(cls, transaction_id: str) -> PaymentTransaction:
        transaction = get_store().find("payment_transactions", transaction_id)
        if transaction is None:
            raise LookupError(f"Payment transaction {transaction_id} not found")
        return transaction

    @classmethod
    async def list_payment_transactions(cls, filters: PaymentTransactionFilters) -> List[PaymentTransaction]:
        store = get_store()
        results = list(store.payment_transactions)
        if filters.business_owner_id:
            owned = {f.id for f in store.franchises if f.business_owner_id == filters.business_owner_id}
            results = [t for t in results if t.franchise_id in owned]
        if filters.application_id:
            results = [t for t in results if t.application_id == filters.application_id]
        if filters.partner_id:
            results = [t for t in results if t.partner_id == filters.partner_id]
        if filters.franchise_id:
            results = [t for t in results if t.franchise_id == filters.franchise_id]
        if filters.status:
            results = [t for t in results if t.status == filters.status]
        results.sort(
            key=lambda t: getattr(t, filters.sort_by),
            reverse=filters.sort_direction == "desc",
        )
        end = filters.offset + filters.limit if filters.limit else None
        return results[filters.offset:end]

    @classmethod
    async def get_payment_transactions_for_application(cls, application_id: str) -> List[PaymentTransaction]:
        return [t for t in get_store().payment_transactions if t.application_id == application_id]

    @classmethod
    async def get_recent_transactions_for_partner(cls, partner_id: str, limit: int = 3) -> List[PaymentTransaction]:
        transactions = [
            t for t in get_store().payment_transactions
            if t.partner_id == partner_id and t.status == PaymentStatus.COMPLETED
        ]
        return _newest_first(transactions)[:limit]

    @classmethod
    async def get_recent_payment_transactions_for_business(
        cls, business_owner_id: str, limit: int = 3
    ) -> List[PaymentTransaction]:
        store = get_store()
        owned = {f.id for f in store.franchises if f.business_owner_id == business_owner_id}
        transactions = [
            t for t in store.payment_transactions
            if t.franchise_id in owned and t.status == PaymentStatus.COMPLETED
        ]
        return _newest_first(transactions)[:limit]

    # ------------------------------------------------------------------
    # Payment requests
    # ------------------------------------------------------------------

    @classmethod
    async def create_payment_request(
        cls, application_id: str, data: PaymentRequestCreate, current_user: Dict[str, str]
    ) -> PaymentRequest:
        """Ask the partner of an application for a payment.

        The partner receives a ``PAYMENT_REQUEST`` notification linking to
        the partnership page.
        """
        from franchise_hub_api.app.services.application_service import ApplicationService

        if data.amount <= 0:
            raise ValueError("Payment request amount must be greater than zero")
        application = await ApplicationService.get_application(application_id)
        if application.business_owner_id != current_user["user_id"]:
            raise PermissionError("Only the franchise owner can request payments")

        now = utcnow()
        request = PaymentRequest(
            id=generate_unique_id(),
            application_id=application.id,
            franchise_id=application.franchise_id,
            franchise_name=application.franchise_name,
            business_owner_id=current_user["user_id"],
            business_owner_name=current_user.get("full_name") or application.business_owner_name,
            partner_id=application.partner_id,
            partner_name=application.partner_name,
            partner_email=application.partner_email,
            amount=data.amount,
            currency=settings.currency,
            purpose=data.purpose,
            description=data.description,
            status=PaymentRequestStatus.PENDING,
            requested_at=now,
            due_date=now + timedelta(days=settings.payment_request_due_days),
            created_at=now,
            updated_at=now,
            created_by=current_user["user_id"],
        )
        store = get_store()
        store.payment_requests.append(request)
        NotificationService.create_notification(
            application.partner_id,
            NotificationType.PAYMENT_REQUEST,
            "New Payment Request",
            f"You have received a payment request of {format_currency(data.amount, True)} "
            f"for {application.franchise_name}",
            application_id=application.id,
            franchise_id=application.franchise_id,
            payment_request_id=request.id,
            action_url=f"/partner/partnerships/{application.id}",
            action_text="Pay Now",
            persist=False,
        )
        store.notify_data_change()
        return request

    @classmethod
    async def get_payment_request(cls, request_id: str) -> PaymentRequest:
        request = get_store().find("payment_requests", request_id)
        if request is None:
            raise LookupError(f"Payment request {request_id} not found")
        return request

    @classmethod
    async def get_payment_requests_for_application(cls, application_id: str) -> List[PaymentRequest]:
        return [r for r in get_store().payment_requests if r.application_id == application_id]

    @classmethod
    async def get_payment_requests_for_partner(cls, partner_id: str) -> List[PaymentRequest]:
        return [r for r in get_store().payment_requests if r.partner_id == partner_id]

    @classmethod
    async def list_payment_requests(
        cls,
        business_owner_id: Optional[str] = None,
        partner_id: Optional[str] = None,
        status: Optional[PaymentRequestStatus] = None,
    ) -> List[PaymentRequest]:
        results = get_store().payment_requests
        if business_owner_id:
            results = [r for r in results if r.business_owner_id == business_owner_id]
        if partner_id:
            results = [r for r in results if r.partner_id == partner_id]
        if status:
            results = [r for r in results if r.status == status]
        return sorted(results, key=lambda r: r.requested_at, reverse=True)

    @classmethod
    async def update_payment_request(cls, request_id: str, data: PaymentRequestUpdate) -> PaymentRequest:
        request = await cls.get_payment_request(request_id)
        if request.status not in OPEN_REQUEST_STATUSES:
            raise ValueError(f"Payment request in status {request.status.value} cannot be changed")
        apply_update(request, data)
        request.updated_at = utcnow()
        get_store().notify_data_change()
        return request

    @classmethod
    async def cancel_payment_request(cls, request_id: str) -> PaymentRequest:
        request = await cls.get_payment_request(request_id)
        if request.status not in OPEN_REQUEST_STATUSES:
            raise ValueError(f"Payment request in status {request.status.value} cannot be cancelled")
        request.status = PaymentRequestStatus.CANCELLED
        request.updated_at = utcnow()
        get_store().notify_data_change()
        return request

    @classmethod
    async def mark_overdue_payment_requests(
        cls, now: Optional[datetime] = None, business_owner_id: Optional[str] = None
    ) -> List[PaymentRequest]:
        """Flag pending requests whose due date has passed as OVERDUE.

        With ``business_owner_id`` only that owner's requests are touched.
        """
        store = get_store()
        now = ensure_aware(now) if now else utcnow()
        overdue = [
            r for r in store.payment_requests
            if r.status == PaymentRequestStatus.PENDING
            and (business_owner_id is None or r.business_owner_id == business_owner_id)
            and r.due_date is not None
            and ensure_aware(r.due_date) < now
        ]
        for request in overdue:
            request.status = PaymentRequestStatus.OVERDUE
            request.updated_at = now
        if overdue:
            logger.info("Marked %s payment requests as overdue", len(overdue))
            store.notify_data_change()
        return overdue

    @classmethod
    async def process_payment_requests_settlement(
        cls,
        request_ids: List[str],
        payment_data: PaymentData,
        current_user: Optional[Dict[str, str]] = None,
    ) -> List[PaymentTransaction]:
        """Pay each open request in ``request_ids``.

        Unknown and already closed requests are skipped, as are requests
        whose application no longer exists.  When ``current_user`` is
        given, every known request must belong to that partner; otherwise
        nothing is paid.  All checks run before anything is changed.  The
        business owner is notified of each payment and the state is
        persisted once.
        """
        store = get_store()
        payable: List[Tuple[PaymentRequest, FranchiseApplication]] = []
        for request_id in request_ids:
            request = store.find("payment_requests", request_id)
            if request is None:
                logger.warning("Payment request %s not found; skipping", request_id)
                continue
            if current_user is not None and request.partner_id != current_user["user_id"]:
                raise PermissionError(f"Payment request {request_id} belongs to another partner")
            if request.status not in OPEN_REQUEST_STATUSES:
                logger.warning(
                    "Payment request %s is %s; skipping", request_id, request.status.value
                )
                continue
            application = store.find("applications", request.application_id)
            if application is None:
                logger.warning(
                    "Application %s of payment request %s not found; skipping",
                    request.application_id,
                    request_id,
                )
                continue
            payable.append((request, application))

        transactions = []
        total = 0.0
        for request, application in payable:
            transaction = cls._completed_transaction(
                application,
                request.amount,
                f"Payment settlement for {request.purpose} - {request.franchise_name}",
                payment_data,
                currency=request.currency,
            )
            request.status = PaymentRequestStatus.PAID
            request.paid_at = transaction.completed_at
            request.payment_transaction_id = transaction.id
            request.updated_at = transaction.completed_at
            NotificationService.create_notification(
                request.business_owner_id,
                NotificationType.PAYMENT_COMPLETED,
                "Payment Received",
                f"{request.partner_name or 'Your partner'} paid "
                f"{format_currency(request.amount, True)} for {request.purpose} "
                f"({request.franchise_name})",
                application_id=request.application_id,
                franchise_id=request.franchise_id,
                payment_request_id=request.id,
                action_url=f"/business/applications/{request.application_id}",
                action_text="View Details",
                persist=False,
            )
            transactions.append(transaction)
            total += request.amount

        store.notify_data_change()
        logger.info(
            "Settled %s payment requests for a total of %s",
            len(transactions),
            format_currency(total, True),
        )
        return transactions

    # ------------------------------------------------------------------
    # Refunds
    # ------------------------------------------------------------------

    @classmethod
    def create_refund_request(cls, application: FranchiseApplication, reason: str) -> Optional[RefundRequest]:
        """Open a refund of the application fee.  The caller persists.

        Returns None when the fee was never paid or a refund of the same
        payment is already open or completed.
        """
        if not application.payment_transaction_id:
            return None
        for existing in get_store().refund_requests:
            if (
                existing.original_transaction_id == application.payment_transaction_id
                and existing.status != RefundStatus.FAILED
            ):
                logger.info(
                    "Refund %s already covers payment %s; not opening another",
                    existing.id,
                    application.payment_transaction_id,
                )
                return None
        now = utcnow()
        refund = RefundRequest(
            id=generate_unique_id(),
            application_id=application.id,
            original_transaction_id=application.payment_transaction_id,
            partner_id=application.partner_id,
            partner_name=application.partner_name,
            amount=application.application_fee,
            reason=reason,
            status=RefundStatus.PENDING,
            requested_at=now,
            estimated_completion_date=now + timedelta(days=settings.refund_processing_days),
            created_at=now,
            updated_at=now,
        )
        get_store().refund_requests.append(refund)
        logger.info("Refund request %s opened for application %s", refund.id, application.id)
        return refund

    @classmethod
    async def get_refund_request(cls, refund_id: str) -> RefundRequest:
        refund = get_store().find("refund_requests", refund_id)
        if refund is None:
            raise LookupError(f"Refund request {refund_id} not found")
        return refund

    @classmethod
    async def get_refund_requests_for_application(cls, application_id: str) -> List[RefundRequest]:
        return [r for r in get_store().refund_requests if r.application_id == application_id]

    @classmethod
    async def list_refund_requests(
        cls,
        partner_id: Optional[str] = None,
        status: Optional[RefundStatus] = None,
    ) -> List[RefundRequest]:
        results = get_store().refund_requests
        if partner_id:
            results = [r for r in results if r.partner_id == partner_id]
        if status:
            results = [r for r in results if r.status == status]
        return sorted(results, key=lambda r: r.requested_at, reverse=True)

    @classmethod
    async def process_refund_request(
        cls, refund_id: str, current_user: Dict[str, str], notes: Optional[str] = None
    ) -> RefundRequest:
        """Complete a refund and mark the original payment as refunded."""
        from franchise_hub_api.app.services.application_service import ApplicationService

        refund = await cls.get_refund_request(refund_id)
        if refund.status not in OPEN_REFUND_STATUSES:
            raise ValueError(f"Refund request in status {refund.status.value} cannot be processed")
        application = await ApplicationService.get_application(refund.application_id)
        if application.business_owner_id != current_user["user_id"]:
            raise PermissionError("Only the franchise owner can process this refund")
        if application.payment_status == PaymentStatus.REFUNDED:
            raise ValueError(f"Application {application.id} has already been refunded")

        now = utcnow()
        reference = _reference("rfnd")
        refund.status = RefundStatus.COMPLETED
        refund.processed_by = current_user["user_id"]
        refund.processed_at = now
        refund.refund_reference = reference
        refund.refund_transaction_id = reference
        refund.updated_at = now
        if notes:
            refund.notes = notes

        original = get_store().find("payment_transactions", refund.original_transaction_id)
        if original is not None:
            original.status = PaymentStatus.REFUNDED
            original.refund_transaction_id = reference
            original.updated_at = now
        else:
            logger.warning(
                "Original transaction %s of refund %s not found",
                refund.original_transaction_id,
                refund.id,
            )
        application.payment_status = PaymentStatus.REFUNDED
        application.updated_at = now
        logger.info("Refund %s completed (%s)", refund.id, format_currency(refund.amount, True))
        get_store().notify_data_change()
        return refund
