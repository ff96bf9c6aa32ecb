"""
In-App Notification Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
import logging

from app.utils.database import get_db
from app.routers.auth import get_current_user
from app.models import User
from app.schemas.notification import NotificationListResponse, NotificationResponse
from app.services.tracking_store import TrackingStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Latest 50 notifications, newest first
    """
    store = TrackingStore(db)
    notifications = await store.list_notifications(current_user.id, limit=50)
    unread = await store.unread_counts(current_user.id)

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=len(notifications),
        unread=sum(unread.values()),
    )


@router.put("/read-all")
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await TrackingStore(db).mark_all_read(current_user.id)
    await db.commit()
    return {"message": "All notifications marked as read", "updated": updated}


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await TrackingStore(db).mark_read(notification_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    await db.commit()
    return {"message": "Notification marked as read"}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await TrackingStore(db).delete_notification(notification_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    await db.commit()
    return {"message": "Notification deleted"}
