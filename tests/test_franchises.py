"""Tests for FranchiseService."""

import asyncio
from datetime import datetime, timezone

import pytest

from franchise_hub_api.app.schemas.application import ApplicationStatus
from franchise_hub_api.app.schemas.franchise import (
    ContactInfo,
    FranchiseCategory,
    FranchiseSearchFilters,
    FranchiseStatus,
    FranchiseUpdate,
)
from franchise_hub_api.app.services.application_service import ApplicationService
from franchise_hub_api.app.services.franchise_service import FranchiseService

from conftest import application_form, franchise_form


def _create(business, **overrides):
    return asyncio.run(FranchiseService.create_franchise(franchise_form(**overrides), business))


class TestCreateFranchise:
    def test_defaults_are_filled_in(self, business):
        franchise = _create(business)

        assert franchise.business_owner_id == "demo-business-user"
        assert franchise.business_owner_name == "Demo Business"
        assert franchise.status == FranchiseStatus.ACTIVE
        assert franchise.is_active
        assert franchise.total_units == 1
        assert franchise.company_owned_units == 1
        assert franchise.requirements.credit_score == 650
        assert franchise.territories == ["Available nationwide"]
        assert franchise.available_states == ["All states"]
        assert franchise.contact_info.phone == "(555) 123-4567"
        assert franchise.application_count == 0

    def test_overrides_replace_defaults(self, business):
        franchise = _create(
            business,
            territories=["Karnataka"],
            contact_info=ContactInfo(phone="080-1234", email="hi@chai.in"),
        )

        assert franchise.territories == ["Karnataka"]
        assert franchise.contact_info.email == "hi@chai.in"

    def test_is_persisted(self, business, store):
        franchise = _create(business)

        assert '"Chai Point"' in store.storage.get_item("franchise_hub_franchises")
        assert store.find("franchises", franchise.id) is franchise


def test_get_missing_franchise_raises_lookup_error():
    with pytest.raises(LookupError):
        asyncio.run(FranchiseService.get_franchise("nope"))


def test_featured_returns_newest_first(business):
    first = _create(business, name="First")
    second = _create(business, name="Second")
    third = _create(business, name="Third")
    first.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    second.created_at = datetime(2024, 2, 1, tzinfo=timezone.utc)
    third.created_at = datetime(2024, 3, 1, tzinfo=timezone.utc)

    featured = asyncio.run(FranchiseService.get_featured_franchises(limit=2))

    assert [f.name for f in featured] == ["Third", "Second"]


def test_franchises_by_owner(business, other_business):
    mine = _create(business)
    _create(other_business, name="Elsewhere")

    owned = asyncio.run(FranchiseService.get_franchises_by_owner(business["user_id"]))

    assert [f.id for f in owned] == [mine.id]


class TestUpdateFranchise:
    def test_only_set_fields_change(self, business):
        franchise = _create(business)

        updated = asyncio.run(
            FranchiseService.update_franchise(franchise.id, FranchiseUpdate(description="New"))
        )

        assert updated.description == "New"
        assert updated.name == "Chai Point"

    def test_status_change_syncs_is_active(self, business):
        franchise = _create(business)

        asyncio.run(
            FranchiseService.update_franchise(franchise.id, FranchiseUpdate(status=FranchiseStatus.SUSPENDED))
        )

        assert not franchise.is_active

    def test_set_active_flag_syncs_status(self, business):
        franchise = _create(business)

        asyncio.run(FranchiseService.update_franchise_status(franchise.id, False))
        assert franchise.status == FranchiseStatus.INACTIVE

        asyncio.run(FranchiseService.update_franchise_status(franchise.id, True))
        assert franchise.status == FranchiseStatus.ACTIVE
        assert franchise.is_active

    def test_explicit_null_for_required_field_is_rejected(self, business, store):
        franchise = _create(business)

        with pytest.raises(ValueError):
            asyncio.run(FranchiseService.update_franchise(franchise.id, FranchiseUpdate(name=None)))

        assert franchise.name == "Chai Point"
        assert "Chai Point" in store.storage.get_item("franchise_hub_franchises")


def test_bulk_status_skips_unknown_ids(business):
    first = _create(business, name="One")
    second = _create(business, name="Two")

    updated = asyncio.run(
        FranchiseService.bulk_update_franchise_status([first.id, "missing", second.id], False)
    )

    assert [f.id for f in updated] == [first.id, second.id]
    assert not first.is_active and not second.is_active


def test_delete_franchise(business, store):
    franchise = _create(business)

    assert asyncio.run(FranchiseService.delete_franchise(franchise.id)) is True
    assert asyncio.run(FranchiseService.delete_franchise(franchise.id)) is False
    assert store.franchises == []


class TestSearch:
    @pytest.fixture
    def catalogue(self, business):
        return [
            _create(business, name="Burger Barn", category=FranchiseCategory.FOOD_BEVERAGE),
            _create(
                business,
                name="Auto Care",
                description="Car wash and burger stand",
                category=FranchiseCategory.AUTOMOTIVE,
                initial_investment={"min": 2_000_000, "max": 4_000_000},
            ),
            _create(business, name="Fit Club", category=FranchiseCategory.HEALTH_FITNESS),
        ]

    def _search(self, **filters):
        return asyncio.run(FranchiseService.search_franchises(FranchiseSearchFilters(**filters)))

    def test_query_matches_name_or_description(self, catalogue):
        names = {f.name for f in self._search(query="BURGER")}
        assert names == {"Burger Barn", "Auto Care"}

    def test_category_and_active_filters(self, catalogue):
        asyncio.run(FranchiseService.update_franchise_status(catalogue[2].id, False))

        assert [f.name for f in self._search(category=FranchiseCategory.AUTOMOTIVE)] == ["Auto Care"]
        assert [f.name for f in self._search(status=False)] == ["Fit Club"]

    def test_investment_bounds(self, catalogue):
        assert [f.name for f in self._search(min_investment=1_000_000)] == ["Auto Care"]
        assert len(self._search(max_investment=1_500_000)) == 2

    def test_sorting(self, catalogue):
        names = [f.name for f in self._search(sort_by="name", sort_direction="desc")]
        assert names == ["Fit Club", "Burger Barn", "Auto Care"]


def test_performance_metrics(business, partner, store):
    franchise = _create(business)
    now = datetime(2024, 5, 20, tzinfo=timezone.utc)
    first = asyncio.run(ApplicationService.create_application(application_form(franchise.id), partner))
    second = asyncio.run(ApplicationService.create_application(application_form(franchise.id), partner))
    first.submitted_at = datetime(2024, 4, 10, tzinfo=timezone.utc)
    second.submitted_at = datetime(2024, 5, 2, tzinfo=timezone.utc)
    first.status = ApplicationStatus.APPROVED
    first.reviewed_at = datetime(2024, 4, 14, tzinfo=timezone.utc)

    metrics = asyncio.run(FranchiseService.get_franchise_performance_metrics(franchise.id, now=now))

    assert metrics.total_applications == 2
    assert metrics.approved_applications == 1
    assert metrics.conversion_rate == 50
    assert metrics.average_time_to_partnership == 4
    assert metrics.monthly_growth == 0.0
    assert metrics.active_partnerships == 1
    assert metrics.total_revenue == 0
