"""
Notification Schemas
"""
from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, Dict, Any, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class NotificationFlight(BaseModel):
    id: UUID
    origin: str
    destination: str
    target_price: Decimal

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: UUID
    tracked_flight_id: UUID
    message: str
    type: str
    is_read: bool
    sent_via_email: bool
    sent_via_in_app: bool
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias=AliasChoices("payload", "metadata"))
    created_at: datetime
    tracked_flight: Optional[NotificationFlight] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread: int
