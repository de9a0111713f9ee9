"""
Pydantic models for payments.

Three record types live here:

* ``PaymentTransaction``: money actually moved, e.g. an application fee.
* ``PaymentRequest``: a business owner asking a partner for money.
* ``RefundRequest``: a refund of an application fee after rejection.

Amounts are in the configured currency (INR by default).
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.dates import ensure_aware_optional
from .application import PaymentStatus


class PaymentMethod(str, Enum):
    CARD = "CARD"
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"
    WALLET = "WALLET"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentRequestStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class RefundStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PaymentTransaction(BaseModel):
    id: str
    application_id: str
    partner_id: str
    partner_name: str = ""
    franchise_id: str
    franchise_name: str = ""
    amount: float
    currency: str = "INR"
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CARD
    transaction_reference: str = ""
    gateway_transaction_id: Optional[str] = None
    card_last4: Optional[str] = None
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None
    initiated_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    description: str = ""
    receipt_url: Optional[str] = None
    failure_reason: Optional[str] = None
    refund_transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaymentData(BaseModel):
    """Payment details entered by the payer."""

    payment_method: PaymentMethod = Field(PaymentMethod.CARD, examples=["UPI"])
    card_last4: Optional[str] = Field(None, min_length=4, max_length=4, examples=["4242"])
    bank_name: Optional[str] = None
    upi_id: Optional[str] = Field(None, examples=["asha@okbank"])


class PaymentTransactionCreate(BaseModel):
    application_id: str
    amount: float = Field(..., gt=0)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CARD
    description: str = ""
    card_last4: Optional[str] = None
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None


class PaymentTransactionFilters(BaseModel):
    application_id: Optional[str] = None
    partner_id: Optional[str] = None
    franchise_id: Optional[str] = None
    # Restrict to transactions on franchises owned by this business user.
    business_owner_id: Optional[str] = None
    status: Optional[PaymentStatus] = None
    sort_by: Literal["created_at", "amount"] = "created_at"
    sort_direction: Literal["asc", "desc"] = "desc"
    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)


class PaymentRequest(BaseModel):
    id: str
    application_id: str
    franchise_id: str
    franchise_name: str = ""
    business_owner_id: str
    business_owner_name: str = ""
    partner_id: str
    partner_name: str = ""
    partner_email: str = ""
    amount: float
    currency: str = "INR"
    purpose: str
    description: str = ""
    status: PaymentRequestStatus = PaymentRequestStatus.PENDING
    requested_at: datetime
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    created_by: str

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware_optional(value)


class PaymentRequestCreate(BaseModel):
    amount: float = Field(..., examples=[25000])
    purpose: str = Field(..., min_length=1, examples=["Initial inventory"])
    description: str = ""


class PaymentRequestUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    purpose: Optional[str] = None
    description: Optional[str] = None
    # Naive values are read as UTC.
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware_optional(value)


class SettlementRequest(BaseModel):
    payment_request_ids: list[str] = Field(..., min_length=1)
    payment_data: PaymentData = Field(default_factory=PaymentData)


class RefundRequest(BaseModel):
    id: str
    application_id: str
    original_transaction_id: str
    partner_id: str
    partner_name: str = ""
    amount: float
    reason: str
    status: RefundStatus = RefundStatus.PENDING
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    refund_transaction_id: Optional[str] = None
    refund_reference: Optional[str] = None
    requested_at: datetime
    estimated_completion_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
