"""
Pydantic models for in-app notifications.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    PAYMENT_REQUEST = "PAYMENT_REQUEST"
    PAYMENT_COMPLETED = "PAYMENT_COMPLETED"
    PARTNERSHIP_DEACTIVATED = "PARTNERSHIP_DEACTIVATED"
    PARTNERSHIP_REACTIVATED = "PARTNERSHIP_REACTIVATED"
    APPLICATION_STATUS_CHANGE = "APPLICATION_STATUS_CHANGE"


class NotificationStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    DISMISSED = "DISMISSED"


class Notification(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    application_id: str | None = None
    franchise_id: str | None = None
    payment_request_id: str | None = None
    action_url: str | None = None
    action_text: str | None = None
    status: NotificationStatus = NotificationStatus.UNREAD
    created_at: datetime
    read_at: datetime | None = None
    expires_at: datetime | None = None


class NotificationIds(BaseModel):
    notification_ids: list[str] = Field(..., min_length=1)


class UnreadCount(BaseModel):
    count: int
