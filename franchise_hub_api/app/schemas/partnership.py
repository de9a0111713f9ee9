"""
Pydantic models for partnerships.

An approved application is a partnership.  Business owners may
deactivate it (and later reactivate it); each deactivation is recorded
as a ``PartnershipDeactivation``.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .application import FranchiseApplication
from .franchise import Franchise
from .payment import PaymentTransaction


class DeactivationReason(str, Enum):
    PERFORMANCE_ISSUES = "PERFORMANCE_ISSUES"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"
    MUTUAL_AGREEMENT = "MUTUAL_AGREEMENT"
    OTHER = "OTHER"


# Human readable reasons used in notification messages.
DEACTIVATION_REASON_LABELS = {
    DeactivationReason.PERFORMANCE_ISSUES: "Performance Issues",
    DeactivationReason.CONTRACT_VIOLATION: "Contract Violation",
    DeactivationReason.MUTUAL_AGREEMENT: "Mutual Agreement",
    DeactivationReason.OTHER: "Other",
}


class PartnershipDeactivation(BaseModel):
    id: str
    application_id: str
    franchise_id: str
    business_owner_id: str
    partner_id: str
    reason: DeactivationReason
    notes: str | None = None
    deactivated_at: datetime
    deactivated_by: str
    created_at: datetime
    updated_at: datetime


class DeactivationCreate(BaseModel):
    reason: DeactivationReason = Field(..., examples=["PERFORMANCE_ISSUES"])
    notes: str | None = None


class Partnership(BaseModel):
    """Read model joining an approved application with its franchise."""

    application: FranchiseApplication
    franchise: Franchise | None = None
    transactions: list[PaymentTransaction] = Field(default_factory=list)
    total_investment: float = 0
    status: Literal["Active", "Inactive"]
