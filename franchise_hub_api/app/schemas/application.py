"""
Pydantic models for franchise applications.

A partner applies to a franchise with personal, financial and business
details.  The business owner reviews the application; review results,
payments and partnership changes all move ``status`` along the
``ApplicationStatus`` lifecycle.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .franchise import FranchiseCategory


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    DEACTIVATED = "DEACTIVATED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class DocumentType(str, Enum):
    ID_PROOF = "ID_PROOF"
    FINANCIAL_STATEMENT = "FINANCIAL_STATEMENT"
    BUSINESS_PLAN = "BUSINESS_PLAN"
    BANK_STATEMENT = "BANK_STATEMENT"
    TAX_RETURN = "TAX_RETURN"
    RESUME = "RESUME"
    OTHER = "OTHER"


class PersonalInfo(BaseModel):
    first_name: str = Field(..., examples=["Asha"])
    last_name: str = Field(..., examples=["Verma"])
    email: str = Field(..., examples=["asha@example.com"])
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    date_of_birth: str | None = None
    ssn: str | None = None


class FinancialInfo(BaseModel):
    liquid_capital: float = 0
    net_worth: float = 0
    credit_score: int | None = None
    annual_income: float = 0
    source_of_funds: str = ""
    has_bankruptcy: bool = False
    bankruptcy_details: str | None = None


class BusinessInfo(BaseModel):
    has_franchise_experience: bool = False
    franchise_experience_details: str | None = None
    has_business_experience: bool = False
    business_experience_details: str | None = None
    current_occupation: str = ""
    management_experience: str = ""
    industry_experience: str = ""


class Reference(BaseModel):
    name: str
    relationship: str = ""
    phone: str = ""
    email: str = ""
    company: str | None = None


class ApplicationDocument(BaseModel):
    id: str
    name: str
    type: DocumentType = DocumentType.OTHER
    url: str
    uploaded_at: datetime
    size: int = 0
    is_required: bool = False
    is_verified: bool = False
    verified_by: str | None = None
    verified_at: datetime | None = None


class FranchiseApplication(BaseModel):
    """Stored application record."""

    id: str
    franchise_id: str
    franchise_name: str
    franchise_category: FranchiseCategory = FranchiseCategory.OTHER
    business_owner_id: str
    business_owner_name: str = ""
    partner_id: str
    partner_name: str = ""
    partner_email: str = ""
    status: ApplicationStatus = ApplicationStatus.SUBMITTED

    personal_info: PersonalInfo
    financial_info: FinancialInfo = Field(default_factory=FinancialInfo)
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    motivation: str = ""
    questions: str = ""
    references: list[Reference] = Field(default_factory=list)
    documents: list[ApplicationDocument] = Field(default_factory=list)

    application_fee: float = 0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_transaction_id: str | None = None
    paid_at: datetime | None = None

    review_notes: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    submitted_at: datetime
    updated_at: datetime
    is_active: bool = True


class ApplicationCreate(BaseModel):
    """Application form submitted by a partner."""

    franchise_id: str = Field(..., examples=["1718000000000-abc123xyz"])
    personal_info: PersonalInfo
    financial_info: FinancialInfo = Field(default_factory=FinancialInfo)
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    motivation: str = ""
    questions: str = ""
    references: list[Reference] = Field(default_factory=list)


class ApplicationUpdate(BaseModel):
    """Partner edits to an application that has not been reviewed yet."""

    personal_info: PersonalInfo | None = None
    financial_info: FinancialInfo | None = None
    business_info: BusinessInfo | None = None
    motivation: str | None = None
    questions: str | None = None
    references: list[Reference] | None = None


class ApplicationReview(BaseModel):
    status: ApplicationStatus = Field(..., examples=["APPROVED"])
    review_notes: str | None = None
    rejection_reason: str | None = None


class ApplicationDecision(BaseModel):
    """Body of the dashboard approve/reject shortcuts."""

    notes: str | None = None
    reason: str | None = None


class DocumentUpload(BaseModel):
    name: str = Field(..., min_length=1, examples=["pan-card.pdf"])
    type: DocumentType = DocumentType.OTHER
    url: str = Field(..., examples=["/uploads/pan-card.pdf"])
    size: int = Field(0, ge=0)
    is_required: bool = False


class ApplicationSearchFilters(BaseModel):
    business_owner_id: str | None = None
    partner_id: str | None = None
    status: ApplicationStatus | None = None
    franchise_id: str | None = None
    search_term: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class ApplicationStatistics(BaseModel):
    total: int
    submitted: int
    under_review: int
    approved: int
    rejected: int
    withdrawn: int
    deactivated: int
    total_fees_collected: float
    average_processing_days: float
