"""
Timestamp helpers.

All stored timestamps are timezone-aware UTC.  Values that arrive
without a timezone (request bodies, query parameters) are taken to be
UTC so they compare with stored ones.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def ensure_aware_optional(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else ensure_aware(value)
