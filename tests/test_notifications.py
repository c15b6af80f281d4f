"""In-app notifications of the calling profile."""

import pytest

from hallbook.models.enums import NotificationType
from hallbook.services.notification.notification_service import NotificationService


@pytest.fixture
def notes(db, teacher, hod):
    service = NotificationService(db)
    first = service.notify(teacher.id, "Booking Approved", "Approved", NotificationType.BOOKING_APPROVED)
    second = service.notify(teacher.id, "Booking Rejected", "Exams", NotificationType.BOOKING_REJECTED)
    other = service.notify(hod.id, "New Booking Request", "Pending", NotificationType.BOOKING_PENDING)
    db.commit()
    return first, second, other


def test_unread_filter_and_mark_read(db, teacher, notes):
    first, second, _ = notes
    service = NotificationService(db)

    assert service.list_for_user(teacher.id).metadata == {"count": 2}
    assert service.mark_read(first.id, teacher.id).is_success

    unread = service.list_for_user(teacher.id, unread_only=True).data
    assert [n.id for n in unread] == [second.id]


def test_cannot_mark_someone_elses_notification(db, teacher, notes):
    _, _, other = notes
    result = NotificationService(db).mark_read(other.id, teacher.id)
    assert not result.is_success
    assert result.error.details["resource_id"] == other.id


def test_notification_endpoints(client, teacher, notes):
    first, second, other = notes
    headers = {"X-Profile-Id": teacher.id}

    response = client.get("/api/v1/notifications", headers=headers)
    assert response.status_code == 200
    assert {n["id"] for n in response.json()} == {first.id, second.id}

    response = client.post(f"/api/v1/notifications/{first.id}/read", headers=headers)
    assert response.json() == {"success": True}

    response = client.get("/api/v1/notifications", params={"unread_only": True}, headers=headers)
    assert [n["id"] for n in response.json()] == [second.id]

    assert client.post(f"/api/v1/notifications/{other.id}/read", headers=headers).status_code == 404
    assert client.get("/api/v1/notifications").status_code == 401
