"""
In-app notification repository.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from hallbook.models.notification import Notification
from hallbook.repositories.base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, db: Session):
        super().__init__(Notification, db)

    def for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars())

    def mark_read(self, notification_id: str, user_id: str) -> bool:
        """Mark one of the user's notifications as read."""
        changed = self.conditional_update(
            {"id": notification_id, "user_id": user_id},
            {"read": True},
        )
        return changed == 1
