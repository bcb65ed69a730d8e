"""
Notifications Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from admissions.modules.notifications.models import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    related_entity_id: int | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    unread: int


class UnreadCountResponse(BaseModel):
    count: int


class NotificationActionResponse(BaseModel):
    success: bool = True
