"""Tests for TimelineService."""

import asyncio
from datetime import timedelta

from franchise_hub_api.app.schemas.application import ApplicationStatus
from franchise_hub_api.app.services.timeline_service import SYSTEM_ACTOR, TimelineService


def test_missing_actor_is_recorded_as_system():
    entry = TimelineService.add_entry("app-1", ApplicationStatus.UNDER_REVIEW, None, "Paid")

    assert entry.performed_by == SYSTEM_ACTOR


def test_timeline_is_oldest_first():
    late = TimelineService.add_entry("app-1", ApplicationStatus.APPROVED, "owner")
    early = TimelineService.add_entry("app-1", ApplicationStatus.SUBMITTED, "partner")
    TimelineService.add_entry("app-2", ApplicationStatus.SUBMITTED, "partner")
    early.timestamp = late.timestamp - timedelta(hours=1)

    timeline = asyncio.run(TimelineService.get_timeline("app-1"))

    assert timeline == [early, late]


def test_list_entries_filters_and_pages():
    for index in range(5):
        entry = TimelineService.add_entry("app-1", ApplicationStatus.SUBMITTED, "partner", f"note {index}")
        entry.timestamp += timedelta(minutes=index)
    TimelineService.add_entry("app-1", ApplicationStatus.APPROVED, "owner")

    submitted = asyncio.run(TimelineService.list_entries(status=ApplicationStatus.SUBMITTED, limit=2, offset=1))
    by_owner = asyncio.run(TimelineService.list_entries(performed_by="owner"))

    assert [e.notes for e in submitted] == ["note 3", "note 2"]
    assert len(by_owner) == 1
