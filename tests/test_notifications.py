"""Tests for NotificationService."""

import asyncio
from datetime import timedelta

import pytest

from franchise_hub_api.app.core.store import utcnow
from franchise_hub_api.app.schemas.notification import NotificationStatus, NotificationType
from franchise_hub_api.app.services.notification_service import NotificationService


def _notify(user_id="demo-partner-user", title="Hello", persist=True):
    return NotificationService.create_notification(
        user_id,
        NotificationType.PAYMENT_REQUEST,
        title,
        "You have a new payment request",
        action_url="/partner/partnerships/1",
        persist=persist,
    )


def test_create_sets_unread_and_expiry(store):
    notification = _notify()

    assert notification.status == NotificationStatus.UNREAD
    assert notification.expires_at - notification.created_at == timedelta(days=30)
    assert notification.id in store.storage.get_item("franchise_hub_notifications")


def test_create_without_persist_only_touches_memory(store):
    notification = _notify(persist=False)

    assert notification in store.notifications
    assert notification.id not in store.storage.get_item("franchise_hub_notifications")


def test_listing_is_per_user_and_newest_first():
    first = _notify(title="first")
    second = _notify(title="second")
    _notify(user_id="demo-business-user")
    first.created_at = second.created_at - timedelta(minutes=5)

    listed = asyncio.run(NotificationService.get_notifications_for_user("demo-partner-user"))

    assert [n.title for n in listed] == ["second", "first"]


def test_mark_as_read_and_unread_count():
    notification = _notify()
    _notify()
    assert asyncio.run(NotificationService.get_unread_count("demo-partner-user")) == 2

    asyncio.run(NotificationService.mark_as_read(notification.id))

    assert notification.status == NotificationStatus.READ
    assert notification.read_at is not None
    assert asyncio.run(NotificationService.get_unread_count("demo-partner-user")) == 1
    read = asyncio.run(
        NotificationService.get_notifications_for_user("demo-partner-user", NotificationStatus.READ)
    )
    assert read == [notification]


def test_mark_multiple_and_all_count_changes():
    first, second, third = _notify(), _notify(), _notify()

    assert asyncio.run(NotificationService.mark_multiple_as_read([first.id, "missing"])) == 1
    assert asyncio.run(NotificationService.mark_all_as_read("demo-partner-user")) == 2
    assert asyncio.run(NotificationService.mark_all_as_read("demo-partner-user")) == 0
    assert second.status == third.status == NotificationStatus.READ


def test_dismiss_and_delete(store):
    first, second, third = _notify(), _notify(), _notify()

    asyncio.run(NotificationService.dismiss_notification(first.id))
    assert first.status == NotificationStatus.DISMISSED

    asyncio.run(NotificationService.delete_notification(first.id))
    assert asyncio.run(NotificationService.delete_multiple_notifications([second.id, "missing"])) == 1
    assert store.notifications == [third]

    with pytest.raises(LookupError):
        asyncio.run(NotificationService.delete_notification(first.id))


def test_purge_expired():
    stale = _notify()
    fresh = _notify()
    stale.expires_at = utcnow() - timedelta(seconds=1)

    assert asyncio.run(NotificationService.purge_expired_notifications()) == 1
    remaining = asyncio.run(NotificationService.get_notifications_for_user("demo-partner-user"))
    assert remaining == [fresh]
