"""
Pydantic models for application timeline entries.

Each entry records one status change of an application together with
who performed it.  System generated entries (submission, payment
confirmation) are flagged so the UI can style them differently.
"""

from datetime import datetime

from pydantic import BaseModel

from .application import ApplicationStatus


class ApplicationTimelineEntry(BaseModel):
    id: str
    application_id: str
    status: ApplicationStatus
    timestamp: datetime
    performed_by: str
    notes: str | None = None
    is_system_generated: bool = False
