"""
In-app notification schemas.
"""

from typing import Optional

from hallbook.models.enums import NotificationType
from hallbook.schemas.base import BaseResponseSchema


class NotificationResponse(BaseResponseSchema):
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    related_booking_id: Optional[str] = None
