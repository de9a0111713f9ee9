"""
Notification endpoints for API v1.

Users only ever see and change their own notifications.  Bulk
operations silently ignore ids belonging to other users.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from franchise_hub_api.app.api.v1.errors import service_errors
from franchise_hub_api.app.core.security import get_current_user
from franchise_hub_api.app.schemas.notification import (
    Notification,
    NotificationIds,
    NotificationStatus,
    UnreadCount,
)
from franchise_hub_api.app.services.notification_service import NotificationService


router = APIRouter()


async def _own_notification(notification_id: str, current_user: dict) -> Notification:
    with service_errors():
        notification = await NotificationService.get_notification(notification_id)
    if notification.user_id != current_user["user_id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your notification")
    return notification


async def _own_ids(ids: List[str], current_user: dict) -> List[str]:
    mine = {n.id for n in await NotificationService.get_notifications_for_user(current_user["user_id"])}
    return [i for i in ids if i in mine]


@router.get("/", response_model=List[Notification])
async def list_notifications(
    status_param: NotificationStatus | None = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
) -> List[Notification]:
    return await NotificationService.get_notifications_for_user(current_user["user_id"], status_param)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(current_user: dict = Depends(get_current_user)) -> UnreadCount:
    return UnreadCount(count=await NotificationService.get_unread_count(current_user["user_id"]))


@router.post("/read-all", response_model=UnreadCount)
async def read_all(current_user: dict = Depends(get_current_user)) -> UnreadCount:
    """Mark every notification of the caller as read.  Returns how many changed."""
    return UnreadCount(count=await NotificationService.mark_all_as_read(current_user["user_id"]))


@router.post("/read", response_model=UnreadCount)
async def read_many(data: NotificationIds, current_user: dict = Depends(get_current_user)) -> UnreadCount:
    ids = await _own_ids(data.notification_ids, current_user)
    return UnreadCount(count=await NotificationService.mark_multiple_as_read(ids))


@router.post("/delete", response_model=UnreadCount)
async def delete_many(data: NotificationIds, current_user: dict = Depends(get_current_user)) -> UnreadCount:
    ids = await _own_ids(data.notification_ids, current_user)
    return UnreadCount(count=await NotificationService.delete_multiple_notifications(ids))


@router.post("/purge-expired", response_model=UnreadCount)
async def purge_expired(current_user: dict = Depends(get_current_user)) -> UnreadCount:
    return UnreadCount(count=await NotificationService.purge_expired_notifications())


@router.post("/{notification_id}/read", response_model=Notification)
async def read_notification(notification_id: str, current_user: dict = Depends(get_current_user)) -> Notification:
    await _own_notification(notification_id, current_user)
    with service_errors():
        return await NotificationService.mark_as_read(notification_id)


@router.post("/{notification_id}/dismiss", response_model=Notification)
async def dismiss_notification(
    notification_id: str, current_user: dict = Depends(get_current_user)
) -> Notification:
    await _own_notification(notification_id, current_user)
    with service_errors():
        return await NotificationService.dismiss_notification(notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(notification_id: str, current_user: dict = Depends(get_current_user)) -> None:
    await _own_notification(notification_id, current_user)
    with service_errors():
        await NotificationService.delete_notification(notification_id)
