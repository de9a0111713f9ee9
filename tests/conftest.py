"""
Pytest configuration and fixtures for the Franchise Hub API.

Every test runs against its own SQLite file under ``tmp_path`` with a
fresh data store and the two demo accounts seeded.  Services are async
and are driven with ``asyncio.run``.
"""

import asyncio
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.db import init_db
from franchise_hub_api.app.core.security import create_access_token
from franchise_hub_api.app.core.store import get_store, reset_store
from franchise_hub_api.app.schemas.application import ApplicationCreate, PersonalInfo
from franchise_hub_api.app.schemas.franchise import FranchiseCategory, FranchiseCreate, InvestmentRange
from franchise_hub_api.app.services.application_service import ApplicationService
from franchise_hub_api.app.services.franchise_service import FranchiseService
from franchise_hub_api.app.services.user_service import UserService


BUSINESS_EMAIL = "business@demo.com"
PARTNER_EMAIL = "partner@demo.com"


@pytest.fixture(autouse=True)
def isolated_store(tmp_path, monkeypatch):
    """Point storage at a temporary database and seed the demo users."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "seed_demo_users", True)
    monkeypatch.setattr(settings, "debug", False)
    init_db()
    reset_store()
    asyncio.run(UserService.seed_demo_users())
    yield
    reset_store()


@pytest.fixture
def store():
    return get_store()


@pytest.fixture
def business() -> Dict[str, str]:
    return {
        "sub": BUSINESS_EMAIL,
        "user_id": "demo-business-user",
        "role": "BUSINESS",
        "full_name": "Demo Business",
    }


@pytest.fixture
def partner() -> Dict[str, str]:
    return {
        "sub": PARTNER_EMAIL,
        "user_id": "demo-partner-user",
        "role": "PARTNER",
        "full_name": "Demo Partner",
    }


@pytest.fixture
def other_business() -> Dict[str, str]:
    return {
        "sub": "rival@example.com",
        "user_id": "rival-business-user",
        "role": "BUSINESS",
        "full_name": "Rival Owner",
    }


def franchise_form(**overrides) -> FranchiseCreate:
    data = {
        "name": "Chai Point",
        "description": "Tea and snacks kiosk",
        "category": FranchiseCategory.FOOD_BEVERAGE,
        "franchise_fee": 1_000_000,
        "royalty_fee": 6,
        "marketing_fee": 2,
        "initial_investment": InvestmentRange(min=500_000, max=1_500_000),
    }
    data.update(overrides)
    return FranchiseCreate(**data)


def application_form(franchise_id: str, **overrides) -> ApplicationCreate:
    data = {
        "franchise_id": franchise_id,
        "personal_info": PersonalInfo(first_name="Asha", last_name="Verma", email="asha@example.com"),
        "motivation": "I love tea",
    }
    data.update(overrides)
    return ApplicationCreate(**data)


@pytest.fixture
def franchise(business):
    return asyncio.run(FranchiseService.create_franchise(franchise_form(), business))


@pytest.fixture
def application(franchise, partner):
    return asyncio.run(ApplicationService.create_application(application_form(franchise.id), partner))


@pytest.fixture
def client():
    from franchise_hub_api.app.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def auth_headers(email: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


@pytest.fixture
def business_headers() -> Dict[str, str]:
    return auth_headers(BUSINESS_EMAIL)


@pytest.fixture
def partner_headers() -> Dict[str, str]:
    return auth_headers(PARTNER_EMAIL)
