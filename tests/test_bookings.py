"""Booking request workflow: create, approve, reject, cancel, complete."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from hallbook.core.exceptions import ErrorCode
from hallbook.models.booking import Booking, BookingLog
from hallbook.models.department import Department
from hallbook.models.enums import BookingStatus, NotificationType, UserRole
from hallbook.models.notification import Notification
from hallbook.schemas.booking import BookingCreate
from hallbook.services.booking.booking_service import BookingFilters, BookingService


@pytest.fixture
def service(db, sink, notifier):
    return BookingService(db, sink, notifier)


@pytest.fixture
def request_data(hall, now):
    def _data(start=None, hours=2, **overrides):
        start = start or now + timedelta(days=1)
        values = dict(
            hall_id=hall.id,
            booking_date=start.date(),
            start_time=start,
            end_time=start + timedelta(hours=hours),
            purpose="Guest lecture on compilers",
            expected_participants=120,
        )
        values.update(overrides)
        return BookingCreate(**values)
    return _data


def _logs(db, booking_id):
    return db.execute(
        select(BookingLog).where(BookingLog.booking_id == booking_id).order_by(BookingLog.created_at)
    ).scalars().all()


def test_create_booking_is_pending_and_notifies_hod(service, db, log_db, email_sender, teacher, hod, request_data):
    result = service.create_booking(teacher, request_data())

    assert result.is_success
    booking = result.data
    assert booking.status == BookingStatus.PENDING
    assert [(log.action, log.new_status) for log in _logs(db, booking.id)] == [
        ("Booking Requested", BookingStatus.PENDING)
    ]

    note = db.execute(select(Notification).where(Notification.user_id == hod.id)).scalar_one()
    assert note.type == NotificationType.BOOKING_PENDING
    assert note.related_booking_id == booking.id

    assert [m.to for m in email_sender.messages] == [["hod@college.edu"]]
    assert log_db["logs_user_actions"].find_one({"action": "booking_requested"})["actorId"] == teacher.id


def test_create_refuses_overlap_with_approved(service, make_booking, teacher, request_data, now):
    start = now + timedelta(days=1)
    make_booking(start, hours=2, status=BookingStatus.APPROVED)

    result = service.create_booking(teacher, request_data(start + timedelta(hours=1)))

    assert not result.is_success
    assert result.error.code == ErrorCode.BOOKING_CONFLICT


def test_back_to_back_and_pending_do_not_conflict(service, make_booking, teacher, request_data, now):
    start = now + timedelta(days=1)
    make_booking(start, hours=2, status=BookingStatus.APPROVED)
    make_booking(start + timedelta(hours=2), hours=2, status=BookingStatus.PENDING)

    assert service.create_booking(teacher, request_data(start + timedelta(hours=2))).is_success


def test_unknown_hall(service, teacher, request_data):
    result = service.create_booking(teacher, request_data(hall_id="missing"))
    assert result.error.code == ErrorCode.RESOURCE_NOT_FOUND


def test_approve_pending_booking(service, db, log_db, email_sender, make_booking, hod, teacher, now):
    booking = make_booking(now + timedelta(days=1))

    result = service.approve_booking(booking.id, hod)

    assert result.is_success
    db.expire_all()
    stored = db.get(Booking, booking.id)
    assert stored.status == BookingStatus.APPROVED
    assert stored.hod_id == hod.id
    assert stored.approved_at is not None
    assert [log.action for log in _logs(db, booking.id)] == ["Booking Approved"]
    assert email_sender.messages[-1].subject == "Your booking has been approved"
    assert log_db["logs_notifications"].count_documents({"event": "booking_approved", "status": "sent"}) == 1


def test_approve_refuses_overlap(service, make_booking, hod, now):
    start = now + timedelta(days=1)
    make_booking(start, status=BookingStatus.APPROVED)
    clash = make_booking(start + timedelta(minutes=30))

    result = service.approve_booking(clash.id, hod)

    assert result.error.code == ErrorCode.BOOKING_CONFLICT


def test_only_pending_can_be_reviewed(service, make_booking, hod, now):
    booking = make_booking(now + timedelta(days=1), status=BookingStatus.CANCELLED)

    assert service.approve_booking(booking.id, hod).error.code == ErrorCode.INVALID_STATE_TRANSITION
    assert service.reject_booking(booking.id, hod, "No").error.code == ErrorCode.INVALID_STATE_TRANSITION


def test_hod_of_other_department_cannot_review(service, db, new_profile, make_booking, now):
    physics = Department(name="Physics")
    db.add(physics)
    db.commit()
    other_hod = new_profile("Dr. Sen", "sen@college.edu", [UserRole.HOD], physics)
    booking = make_booking(now + timedelta(days=1))

    result = service.approve_booking(booking.id, other_hod)

    assert result.error.code == ErrorCode.INSUFFICIENT_PERMISSIONS


def test_reject_requires_reason_and_records_it(service, db, email_sender, make_booking, hod, now):
    booking = make_booking(now + timedelta(days=1))

    assert service.reject_booking(booking.id, hod, "   ").error.code == ErrorCode.VALIDATION_ERROR

    result = service.reject_booking(booking.id, hod, "Hall reserved for exams")
    assert result.is_success
    db.expire_all()
    stored = db.get(Booking, booking.id)
    assert stored.status == BookingStatus.REJECTED
    assert stored.rejection_reason == "Hall reserved for exams"
    assert _logs(db, booking.id)[0].notes == "Hall reserved for exams"
    assert "Hall reserved for exams" in email_sender.messages[-1].body_html


def test_cancel_rules(service, db, make_booking, teacher, tech_staff, now):
    pending = make_booking(now + timedelta(days=1))
    approved = make_booking(now + timedelta(days=2), status=BookingStatus.APPROVED)
    rejected = make_booking(now + timedelta(days=3), status=BookingStatus.REJECTED)

    assert service.cancel_booking(pending.id, tech_staff).error.code == ErrorCode.INSUFFICIENT_PERMISSIONS
    assert service.cancel_booking(pending.id, teacher).is_success
    assert service.cancel_booking(approved.id, teacher).is_success
    assert service.cancel_booking(rejected.id, teacher).error.code == ErrorCode.INVALID_STATE_TRANSITION

    db.expire_all()
    assert db.get(Booking, approved.id).status == BookingStatus.CANCELLED
    assert _logs(db, approved.id)[0].previous_status == BookingStatus.APPROVED


def test_complete_only_from_approved(service, db, make_booking, teacher, now):
    approved = make_booking(now - timedelta(hours=3), status=BookingStatus.APPROVED)
    pending = make_booking(now - timedelta(hours=3), status=BookingStatus.PENDING)

    result = service.complete_booking(approved.id, teacher, "Went well, 110 attendees")
    assert result.is_success
    db.expire_all()
    assert db.get(Booking, approved.id).session_summary == "Went well, 110 attendees"
    assert db.get(Booking, approved.id).status == BookingStatus.COMPLETED

    assert service.complete_booking(pending.id, teacher, "n/a").error.code == ErrorCode.INVALID_STATE_TRANSITION


def test_list_bookings_filters(service, make_booking, second_hall, now):
    first = make_booking(now + timedelta(days=1))
    make_booking(now + timedelta(days=1), hall_id=second_hall.id, status=BookingStatus.APPROVED)

    result = service.list_bookings(BookingFilters(statuses=[BookingStatus.PENDING]))

    assert [b.id for b in result.data] == [first.id]
    assert result.metadata == {"count": 1}
    assert len(service.list_bookings(BookingFilters(hall_id=second_hall.id)).data) == 1


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def _payload(hall, start):
    return {
        "hall_id": hall.id,
        "booking_date": start.date().isoformat(),
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=2)).isoformat(),
        "purpose": "Workshop",
    }


def test_booking_endpoints_flow(client, hall, teacher, hod, now):
    start = now + timedelta(days=5)

    response = client.post("/api/v1/bookings", json=_payload(hall, start), headers={"X-Profile-Id": teacher.id})
    assert response.status_code == 201
    booking_id = response.json()["id"]
    assert response.json()["status"] == "pending"

    response = client.post(f"/api/v1/bookings/{booking_id}/approve", headers={"X-Profile-Id": hod.id})
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = client.post(f"/api/v1/bookings/{booking_id}/approve", headers={"X-Profile-Id": hod.id})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE_TRANSITION"

    response = client.get(f"/api/v1/bookings/{booking_id}", headers={"X-Profile-Id": teacher.id})
    assert [log["action"] for log in response.json()["logs"]] == ["Booking Requested", "Booking Approved"]

    response = client.get("/api/v1/bookings", params={"status": "approved"}, headers={"X-Profile-Id": hod.id})
    assert [b["id"] for b in response.json()] == [booking_id]


def test_booking_endpoints_require_identity_and_role(client, hall, teacher, hod, now):
    payload = _payload(hall, now + timedelta(days=5))

    assert client.post("/api/v1/bookings", json=payload).status_code == 401
    assert client.post("/api/v1/bookings", json=payload, headers={"X-Profile-Id": "ghost"}).status_code == 401

    response = client.post("/api/v1/bookings", json=payload, headers={"X-Profile-Id": hod.id})
    assert response.status_code == 403
    assert response.json()["error"]["type"] == "AuthorizationError"


def test_invalid_window_is_rejected(client, hall, teacher, now):
    start = now + timedelta(days=5)
    payload = _payload(hall, start)
    payload["end_time"] = start.isoformat()

    response = client.post("/api/v1/bookings", json=payload, headers={"X-Profile-Id": teacher.id})
    assert response.status_code == 422
