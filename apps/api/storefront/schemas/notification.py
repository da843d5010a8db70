import uuid
from datetime import datetime

from storefront.models.notification import NotificationType
from storefront.schemas.common import ResponseModel


class NotificationResponse(ResponseModel):
    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    reference_id: str | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(ResponseModel):
    items: list[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(ResponseModel):
    updated: int
