"""
Business logic for in-app notifications.

Notifications are created by other services (payment requests,
partnership changes, review outcomes) and read by the recipient.  A
notification expires ``settings.notification_ttl_days`` after creation;
``purge_expired_notifications`` removes expired ones.

``create_notification`` takes a ``persist`` flag.  Services that create a
notification as part of a larger mutation pass ``persist=False`` and
call ``notify_data_change`` once at the end.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.store import generate_unique_id, get_store, utcnow
from franchise_hub_api.app.schemas.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)


logger = logging.getLogger(__name__)


class NotificationService:
    """Service for creating and managing user notifications."""

    @classmethod
    def create_notification(
        cls,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        application_id: Optional[str] = None,
        franchise_id: Optional[str] = None,
        payment_request_id: Optional[str] = None,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
        persist: bool = True,
    ) -> Notification:
        now = utcnow()
        notification = Notification(
            id=generate_unique_id(),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            application_id=application_id,
            franchise_id=franchise_id,
            payment_request_id=payment_request_id,
            action_url=action_url,
            action_text=action_text,
            status=NotificationStatus.UNREAD,
            created_at=now,
            expires_at=now + timedelta(days=settings.notification_ttl_days),
        )
        store = get_store()
        store.notifications.append(notification)
        logger.info("Notification %s (%s) created for user %s", notification.id, type.value, user_id)
        if persist:
            store.notify_data_change()
        return notification

    @classmethod
    async def get_notifications_for_user(
        cls, user_id: str, status: Optional[NotificationStatus] = None
    ) -> List[Notification]:
        notifications = [n for n in get_store().notifications if n.user_id == user_id]
        if status:
            notifications = [n for n in notifications if n.status == status]
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    @classmethod
    async def get_notification(cls, notification_id: str) -> Notification:
        notification = get_store().find("notifications", notification_id)
        if notification is None:
            raise LookupError(f"Notification {notification_id} not found")
        return notification

    @classmethod
    def _mark_read(cls, notification: Notification, now: datetime) -> bool:
        if notification.status != NotificationStatus.UNREAD:
            return False
        notification.status = NotificationStatus.READ
        notification.read_at = now
        return True

    @classmethod
    async def mark_as_read(cls, notification_id: str) -> Notification:
        notification = await cls.get_notification(notification_id)
        if cls._mark_read(notification, utcnow()):
            get_store().notify_data_change()
        return notification

    @classmethod
    async def mark_multiple_as_read(cls, notification_ids: List[str]) -> int:
        """Mark the given notifications as read.  Unknown ids are ignored.

        Returns the number of notifications that changed.
        """
        store = get_store()
        now = utcnow()
        wanted = set(notification_ids)
        changed = sum(
            1 for n in store.notifications if n.id in wanted and cls._mark_read(n, now)
        )
        if changed:
            store.notify_data_change()
        return changed

    @classmethod
    async def mark_all_as_read(cls, user_id: str) -> int:
        store = get_store()
        now = utcnow()
        changed = sum(
            1 for n in store.notifications if n.user_id == user_id and cls._mark_read(n, now)
        )
        if changed:
            store.notify_data_change()
        return changed

    @classmethod
    async def dismiss_notification(cls, notification_id: str) -> Notification:
        notification = await cls.get_notification(notification_id)
        notification.status = NotificationStatus.DISMISSED
        get_store().notify_data_change()
        return notification

    @classmethod
    async def delete_notification(cls, notification_id: str) -> None:
        notification = await cls.get_notification(notification_id)
        store = get_store()
        store.notifications.remove(notification)
        store.notify_data_change()

    @classmethod
    async def delete_multiple_notifications(cls, notification_ids: List[str]) -> int:
        store = get_store()
        wanted = set(notification_ids)
        before = len(store.notifications)
        store.notifications[:] = [n for n in store.notifications if n.id not in wanted]
        deleted = before - len(store.notifications)
        if deleted:
            store.notify_data_change()
        return deleted

    @classmethod
    async def get_unread_count(cls, user_id: str) -> int:
        return sum(
            1
            for n in get_store().notifications
            if n.user_id == user_id and n.status == NotificationStatus.UNREAD
        )

    @classmethod
    async def purge_expired_notifications(cls, now: Optional[datetime] = None) -> int:
        """Delete notifications whose ``expires_at`` has passed."""
        store = get_store()
        now = now or utcnow()
        before = len(store.notifications)
        store.notifications[:] = [
            n for n in store.notifications if n.expires_at is None or n.expires_at > now
        ]
        purged = before - len(store.notifications)
        if purged:
            logger.info("Purged %s expired notifications", purged)
            store.notify_data_change()
        return purged
