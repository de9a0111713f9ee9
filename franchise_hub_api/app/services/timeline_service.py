"""
Timeline service for recording application status changes.

Every status change of an application is recorded here as an
``ApplicationTimelineEntry``, in the manner of an audit log.  ``add_entry``
only appends to the in-memory collection; the calling service persists
once its whole mutation is complete.
"""

from __future__ import annotations

from typing import List, Optional

from franchise_hub_api.app.core.store import generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.application import ApplicationStatus
from franchise_hub_api.app.schemas.timeline import ApplicationTimelineEntry


SYSTEM_ACTOR = "system"


class TimelineService:
    """Service class for writing and querying application timelines."""

    @classmethod
    def add_entry(
        cls,
        application_id: str,
        status: ApplicationStatus,
        performed_by: Optional[str],
        notes: Optional[str] = None,
        is_system_generated: bool = False,
    ) -> ApplicationTimelineEntry:
        """Append a timeline entry.

        Parameters
        ----------
        application_id : str
            Application whose status changed.
        status : ApplicationStatus
            The new status.
        performed_by : Optional[str]
            Id of the acting user.  ``None`` records the change as
            performed by ``"system"``.
        notes : Optional[str]
            Free-text explanation shown in the timeline.
        is_system_generated : bool
            True for entries the system writes on its own (submission,
            payment confirmation).
        """
        entry = ApplicationTimelineEntry(
            id=generate_unique_id(),
            application_id=application_id,
            status=status,
            timestamp=utcnow(),
            performed_by=performed_by or SYSTEM_ACTOR,
            notes=notes,
            is_system_generated=is_system_generated,
        )
        get_store().application_timelines.append(entry)
        return entry

    @classmethod
    async def get_timeline(cls, application_id: str) -> List[ApplicationTimelineEntry]:
        """Return the entries of one application, oldest first."""
        entries = [e for e in get_store().application_timelines if e.application_id == application_id]
        return sorted(entries, key=lambda e: e.timestamp)

    @classmethod
    async def list_entries(
        cls,
        application_id: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
        performed_by: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ApplicationTimelineEntry]:
        """Retrieve entries with optional filters and pagination, newest first."""
        entries = get_store().application_timelines
        if application_id:
            entries = [e for e in entries if e.application_id == application_id]
        if status:
            entries = [e for e in entries if e.status == status]
        if performed_by:
            entries = [e for e in entries if e.performed_by == performed_by]
        entries = sorted(entries, key=lambda e: e.timestamp, reverse=True)
        return entries[offset:offset + limit]
