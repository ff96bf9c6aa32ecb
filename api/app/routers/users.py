"""
User Preferences Endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.utils.database import get_db
from app.routers.auth import get_current_user
from app.models import User
from app.schemas.user import PreferencesResponse, PreferencesUpdate
from app.services.tracking_store import TrackingStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/me/preferences", response_model=PreferencesResponse)
async def get_preferences(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Notification preferences, created with defaults on first read
    """
    preferences = await TrackingStore(db).get_or_create_preferences(current_user.id)
    await db.commit()
    await db.refresh(preferences)
    return preferences


@router.put("/me/preferences", response_model=PreferencesResponse)
async def update_preferences(
    updates: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update notification channels, display currency and the user's name
    """
    preferences = await TrackingStore(db).get_or_create_preferences(current_user.id)

    update_data = updates.model_dump(exclude_unset=True, exclude_none=True)
    name = update_data.pop("name", None)
    if name is not None:
        current_user.name = name
    if "currency" in update_data:
        update_data["currency"] = update_data["currency"].upper()

    for field, value in update_data.items():
        setattr(preferences, field, value)

    await db.commit()
    await db.refresh(preferences)

    logger.info(f"Preferences updated for user {current_user.id}")

    return preferences
