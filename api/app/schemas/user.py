"""
User Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class PreferencesUpdate(BaseModel):
    """Partial update of notification channels and display currency"""
    name: Optional[str] = Field(None, max_length=255)
    email_notifications: Optional[bool] = None
    in_app_notifications: Optional[bool] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class PreferencesResponse(BaseModel):
    user_id: UUID
    email_notifications: bool
    in_app_notifications: bool
    currency: str
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
