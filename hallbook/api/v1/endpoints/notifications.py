"""
In-app notifications of the calling profile.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from hallbook.api import deps
from hallbook.models.department import Profile
from hallbook.schemas.notification import NotificationResponse
from hallbook.services.notification.notification_service import NotificationService

router = APIRouter(prefix="/notifications")


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(False),
    profile: Profile = Depends(deps.get_current_profile),
    service: NotificationService = Depends(deps.get_notification_service),
):
    return service.list_for_user(profile.id, unread_only).unwrap()


@router.post("/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    profile: Profile = Depends(deps.get_current_profile),
    service: NotificationService = Depends(deps.get_notification_service),
):
    service.mark_read(notification_id, profile.id).unwrap()
    return {"success": True}
