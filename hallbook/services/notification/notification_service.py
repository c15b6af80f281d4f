"""
In-app notifications.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from hallbook.models.enums import NotificationType
from hallbook.models.notification import Notification
from hallbook.repositories.notification_repository import NotificationRepository
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult


class NotificationService(BaseService[NotificationRepository]):
    """
    Creates, lists and acknowledges in-app notifications.

    `notify` joins the caller's transaction; the listing and read operations
    manage their own.
    """

    def __init__(self, db_session: Session):
        super().__init__(NotificationRepository(db_session), db_session)

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        booking_id: Optional[str] = None,
    ) -> Notification:
        return self.repository.create(
            Notification(
                user_id=user_id,
                title=title,
                message=message,
                type=type,
                related_booking_id=booking_id,
            )
        )

    def list_for_user(self, user_id: str, unread_only: bool = False) -> ServiceResult[List[Notification]]:
        try:
            items = self.repository.for_user(user_id, unread_only=unread_only)
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, "list notifications", user_id)

    def mark_read(self, notification_id: str, user_id: str) -> ServiceResult[bool]:
        try:
            with self.transaction():
                changed = self.repository.mark_read(notification_id, user_id)
            if not changed:
                return ServiceResult.not_found("Notification", notification_id)
            return ServiceResult.success(True, message="Notification marked as read")
        except Exception as e:
            return self._handle_exception(e, "mark notification read", notification_id)
