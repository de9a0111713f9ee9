"""
Pydantic models for franchise listings.

``Franchise`` is the stored record.  ``FranchiseCreate`` mirrors the
listing form a business owner fills in; the service expands it into a
full record with sensible defaults.  ``FranchiseUpdate`` carries partial
edits and ``FranchiseSearchFilters`` the management search options.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class FranchiseCategory(str, Enum):
    FOOD_BEVERAGE = "FOOD_BEVERAGE"
    RETAIL = "RETAIL"
    SERVICES = "SERVICES"
    HEALTH_FITNESS = "HEALTH_FITNESS"
    EDUCATION = "EDUCATION"
    AUTOMOTIVE = "AUTOMOTIVE"
    REAL_ESTATE = "REAL_ESTATE"
    TECHNOLOGY = "TECHNOLOGY"
    CLEANING = "CLEANING"
    OTHER = "OTHER"


class FranchiseStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"
    SUSPENDED = "SUSPENDED"


class InvestmentRange(BaseModel):
    min: float = Field(..., ge=0, examples=[500000])
    max: float = Field(..., ge=0, examples=[1500000])


class FranchiseRequirements(BaseModel):
    experience: str = ""
    education: str = "High school diploma or equivalent"
    credit_score: int = 650
    background: list[str] = Field(default_factory=lambda: ["Business experience preferred"])


class FranchiseSupport(BaseModel):
    training: str = ""
    marketing: str = ""
    operations: str = ""
    technology: str = "Technology support included"


class ContactInfo(BaseModel):
    phone: str = "(555) 123-4567"
    email: str = "contact@franchise.com"
    website: str = "https://franchise.com"
    address: str = "123 Business St, City, State 12345"


class Franchise(BaseModel):
    """Stored franchise listing."""

    id: str
    name: str
    description: str = ""
    category: FranchiseCategory = FranchiseCategory.OTHER
    status: FranchiseStatus = FranchiseStatus.ACTIVE
    business_owner_id: str
    business_owner_name: str = ""
    logo: str = ""
    images: list[str] = Field(default_factory=list)

    franchise_fee: float = 0
    royalty_fee: float = Field(0, description="Percentage of gross sales")
    marketing_fee: float = Field(0, description="Percentage of gross sales")
    initial_investment: InvestmentRange
    liquid_capital_required: float = 0
    net_worth_required: float = 0

    year_established: int | None = None
    total_units: int = 1
    franchised_units: int = 0
    company_owned_units: int = 1

    requirements: FranchiseRequirements = Field(default_factory=FranchiseRequirements)
    support: FranchiseSupport = Field(default_factory=FranchiseSupport)

    territories: list[str] = Field(default_factory=lambda: ["Available nationwide"])
    available_states: list[str] = Field(default_factory=lambda: ["All states"])
    international_opportunities: bool = False
    contact_info: ContactInfo = Field(default_factory=ContactInfo)

    created_at: datetime
    updated_at: datetime
    is_active: bool = True
    is_featured: bool = False
    view_count: int = 0
    application_count: int = 0
    rating: float = 0
    review_count: int = 0


class FormRequirements(BaseModel):
    experience: str = Field("", examples=["2+ years in food service"])
    time_commitment: str | None = Field(None, examples=["Full time"])
    location: str | None = Field(None, examples=["High street, 800 sq ft"])


class FormSupport(BaseModel):
    training: str = ""
    marketing: str = ""
    operations: str = ""


class FranchiseCreate(BaseModel):
    """Listing form submitted by a business owner."""

    name: str = Field(..., min_length=1, examples=["Chai Point"])
    description: str = Field("", examples=["Tea and snacks kiosk"])
    category: FranchiseCategory = Field(..., examples=["FOOD_BEVERAGE"])
    franchise_fee: float = Field(..., ge=0, examples=[1000000])
    royalty_fee: float = Field(0, ge=0, examples=[6])
    marketing_fee: float = Field(0, ge=0, examples=[2])
    initial_investment: InvestmentRange
    liquid_capital_required: float = Field(0, ge=0)
    net_worth_required: float = Field(0, ge=0)
    year_established: int | None = Field(None, examples=[2010])
    requirements: FormRequirements = Field(default_factory=FormRequirements)
    support: FormSupport = Field(default_factory=FormSupport)
    # Optional overrides for fields the form normally leaves at defaults.
    territories: list[str] | None = None
    available_states: list[str] | None = None
    contact_info: ContactInfo | None = None


class FranchiseUpdate(BaseModel):
    """Partial update; only provided fields are changed."""

    name: str | None = None
    description: str | None = None
    category: FranchiseCategory | None = None
    status: FranchiseStatus | None = None
    logo: str | None = None
    images: list[str] | None = None
    franchise_fee: float | None = Field(None, ge=0)
    royalty_fee: float | None = Field(None, ge=0)
    marketing_fee: float | None = Field(None, ge=0)
    initial_investment: InvestmentRange | None = None
    liquid_capital_required: float | None = Field(None, ge=0)
    net_worth_required: float | None = Field(None, ge=0)
    year_established: int | None = None
    total_units: int | None = Field(None, ge=0)
    franchised_units: int | None = Field(None, ge=0)
    company_owned_units: int | None = Field(None, ge=0)
    requirements: FranchiseRequirements | None = None
    support: FranchiseSupport | None = None
    territories: list[str] | None = None
    available_states: list[str] | None = None
    international_opportunities: bool | None = None
    contact_info: ContactInfo | None = None
    is_featured: bool | None = None


class FranchiseStatusUpdate(BaseModel):
    is_active: bool


class FranchiseBulkStatusUpdate(BaseModel):
    franchise_ids: list[str] = Field(..., min_length=1)
    is_active: bool


class FranchiseSearchFilters(BaseModel):
    query: str | None = None
    category: FranchiseCategory | None = None
    status: bool | None = Field(None, description="Filter on is_active")
    min_investment: float | None = None
    max_investment: float | None = None
    sort_by: Literal["name", "category", "created_at"] | None = None
    sort_direction: Literal["asc", "desc"] = "asc"


class FranchisePerformanceMetrics(BaseModel):
    total_applications: int
    approved_applications: int
    conversion_rate: float
    total_revenue: float
    average_time_to_partnership: int
    monthly_growth: float
    active_partnerships: int
