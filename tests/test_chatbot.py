"""Chatbot intents, entity extraction and the replies each role gets."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from hallbook.models.enums import (
    BookingStatus,
    ComponentType,
    EquipmentType,
    MaintenancePriority,
    MaintenanceRequestType,
    UserRole,
)
from hallbook.models.hall import Equipment
from hallbook.models.maintenance import MaintenanceRequest
from hallbook.services.chatbot import (
    ChatContext,
    ChatbotService,
    Intent,
    detect_intent,
    extract_entities,
    extract_time_window,
)
from hallbook.services.chatbot.chatbot_service import (
    FALLBACK_REPLY,
    HELP_REPLY,
    MAINTENANCE_NOT_ALLOWED_REPLY,
    MY_BOOKINGS_NOT_ALLOWED_REPLY,
    NO_BOOKINGS_REPLY,
    NO_PENDING_REPLY,
    NO_PERMISSION_REPLY,
    PENDING_NOT_ALLOWED_REPLY,
    UNKNOWN_HALL_REPLY,
)
from hallbook.services.chatbot.resolvers import match_hall


@pytest.fixture
def chatbot(db, sink):
    return ChatbotService(db, sink)


@pytest.fixture
def ask(chatbot, now):
    def _ask(profile, message):
        return chatbot.route_chatbot_message(chatbot.context_for(profile.id, message, now))
    return _ask


@pytest.mark.parametrize(
    "message, intent",
    [
        ("Show my bookings", Intent.MY_BOOKINGS),
        ("any pending approvals?", Intent.HOD_PENDING_BOOKINGS),
        ("Is the auditorium free?", Intent.AVAILABILITY),
        ("Check availability of Seminar Room 2", Intent.AVAILABILITY),
        ("The projector is not working", Intent.MAINTENANCE),
        ("Please install a speaker", Intent.MAINTENANCE),
        ("I want to book a hall", Intent.BOOKING),
        ("what is the status", Intent.STATUS),
        ("hello there", Intent.UNKNOWN),
        ("", Intent.UNKNOWN),
    ],
)
def test_detect_intent(message, intent):
    assert detect_intent(message) == intent


def test_extract_entities_reads_keywords():
    entities = extract_entities("The projector and the AC need repair urgently, urgent!")
    assert entities.equipment_type == EquipmentType.PROJECTOR
    assert entities.component_type == ComponentType.AC
    assert entities.request_type == MaintenanceRequestType.REPAIR
    assert entities.priority == MaintenancePriority.CRITICAL

    entities = extract_entities("Please replace the mics soon")
    assert entities.equipment_type == EquipmentType.MICROPHONE
    assert entities.request_type == MaintenanceRequestType.REPLACEMENT
    assert entities.priority == MaintenancePriority.HIGH

    # "ac" inside another word is not the air conditioner
    entities = extract_entities("The place has an issue")
    assert entities.component_type is None
    assert entities.priority == MaintenancePriority.MEDIUM


def test_time_window_defaults_and_tomorrow(now):
    assert extract_time_window("is it free?", now) == (now, now + timedelta(hours=2))
    assert extract_time_window("free tomorrow?", now) == (
        datetime(2025, 3, 11, 9, 0),
        datetime(2025, 3, 11, 11, 0),
    )


def test_match_hall_prefers_full_name(hall, second_hall):
    halls = [hall, second_hall]
    assert match_hall("is seminar room 2 free", halls) is second_hall
    assert match_hall("is the auditorium free", halls) is hall
    assert match_hall("is the lab free", halls) is None


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------

def test_teacher_gets_create_booking_marker(ask, teacher, hall):
    reply = ask(teacher, "Is the Auditorium free?")

    assert reply.intent == Intent.AVAILABILITY
    assert reply.hall_id == hall.id
    assert reply.reply == (
        "Auditorium Hall is available during the requested time.\n"
        f"[CREATE_BOOKING:{hall.id}|2025-03-10T10:00:00Z|2025-03-10T12:00:00Z]"
    )


def test_unknown_message_gets_help(ask, teacher, hall):
    reply = ask(teacher, "xyz123")
    assert reply.reply == HELP_REPLY
    assert reply.hall_id is None


def test_unknown_hall(ask, teacher, hall):
    assert ask(teacher, "Is the library free?").reply == UNKNOWN_HALL_REPLY


def test_fully_booked_window(ask, make_booking, teacher, hall, now):
    booked = make_booking(now - timedelta(hours=1), hours=4, status=BookingStatus.APPROVED)

    reply = ask(teacher, "Is the Auditorium free?").reply

    assert "not available during the requested time" in reply
    assert "Booked from 09:00 to 13:00" in reply
    assert reply.endswith(f"[OPEN_BOOKING:{booked.id}]")


def test_partially_booked_window_offers_the_gap(ask, make_booking, teacher, hall, now):
    make_booking(now + timedelta(hours=1), hours=1, status=BookingStatus.APPROVED)

    reply = ask(teacher, "Is the Auditorium free?").reply

    assert reply.startswith("Auditorium Hall is available until 11:00.")
    assert "Booked by Ms. Iyer from 11:00 to 12:00." in reply
    assert f"[CREATE_BOOKING:{hall.id}|2025-03-10T10:00:00Z|2025-03-10T11:00:00Z]" in reply


def test_pending_bookings_do_not_block_availability(ask, make_booking, teacher, hall, now):
    make_booking(now, hours=2, status=BookingStatus.PENDING)
    assert "is available during the requested time" in ask(teacher, "Is the Auditorium free?").reply


def test_role_specific_availability(ask, make_booking, tech_staff, hod, hall, now):
    assert ask(tech_staff, "Is the Auditorium free?").reply == "Auditorium Hall is currently free and accessible."
    assert ask(hod, "Is the Auditorium free?").reply == "Auditorium Hall is available."

    booked = make_booking(now, hours=1, status=BookingStatus.APPROVED)
    assert "you may still access it for maintenance" in ask(tech_staff, "Is the Auditorium free?").reply
    assert ask(hod, "Is the Auditorium free?").reply.endswith(f"[OPEN_BOOKING:{booked.id}]")


def test_profile_without_roles_is_refused(ask, new_profile, hall):
    visitor = new_profile("Guest", "guest@college.edu", [])
    assert ask(visitor, "Is the Auditorium free?").reply == NO_PERMISSION_REPLY


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

def test_my_bookings_lists_upcoming(ask, make_booking, teacher, now):
    booking = make_booking(now + timedelta(days=1))

    reply = ask(teacher, "show my bookings")

    assert reply.intent == Intent.MY_BOOKINGS
    assert reply.reply == (
        "DATE:2025-03-11\n"
        "BOOKING:\n"
        "HALL=Auditorium Hall\n"
        "TIME=10:00-12:00\n"
        "STATUS=pending\n"
        f"ID={booking.id}\n"
    )


def test_my_bookings_falls_back_to_history(ask, make_booking, teacher, now):
    past = make_booking(now - timedelta(days=2), status=BookingStatus.COMPLETED)
    # pending in the past is neither upcoming nor history
    make_booking(now - timedelta(days=1), status=BookingStatus.PENDING)

    reply = ask(teacher, "my bookings").reply

    assert reply.startswith("PAST_BOOKINGS\nDATE:2025-03-08\n")
    assert f"ID={past.id}" in reply
    assert reply.count("BOOKING:") == 1


def test_my_bookings_empty_and_refused(ask, teacher, tech_staff):
    assert ask(teacher, "my bookings").reply == NO_BOOKINGS_REPLY
    assert ask(tech_staff, "my bookings").reply == MY_BOOKINGS_NOT_ALLOWED_REPLY


def test_hod_sees_pending_of_own_department(ask, make_booking, hod, teacher, now):
    assert ask(hod, "any pending approvals?").reply == NO_PENDING_REPLY

    booking = make_booking(now + timedelta(days=1))
    reply = ask(hod, "any pending approvals?").reply

    assert "REQUESTED_BY=Ms. Iyer" in reply
    assert "DATE=2025-03-11" in reply
    assert f"ID={booking.id}" in reply
    assert ask(teacher, "pending approvals").reply == PENDING_NOT_ALLOWED_REPLY


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

def test_tech_staff_reports_broken_equipment(ask, db, tech_staff, hall):
    projector = Equipment(hall_id=hall.id, name="Epson EB-X51", type=EquipmentType.PROJECTOR)
    db.add(projector)
    db.commit()

    reply = ask(tech_staff, "The projector in the Auditorium is not working, urgent")

    assert reply.reply == "Maintenance request has been logged and sent for approval."
    assert reply.equipment_id == projector.id
    request = db.execute(select(MaintenanceRequest)).scalar_one()
    assert request.request_type == MaintenanceRequestType.REPAIR
    assert request.priority == MaintenancePriority.CRITICAL
    assert request.equipment_id == projector.id
    assert request.tech_staff_id == tech_staff.id


def test_unmatched_asset_becomes_general_issue(ask, db, tech_staff, hall):
    reply = ask(tech_staff, "The Auditorium speaker is broken")

    assert reply.equipment_id is None
    request = db.execute(select(MaintenanceRequest)).scalar_one()
    assert request.request_type == MaintenanceRequestType.GENERAL_ISSUE


def test_only_tech_staff_report_maintenance(ask, db, teacher, tech_staff, hall):
    assert ask(teacher, "The Auditorium projector is broken").reply == MAINTENANCE_NOT_ALLOWED_REPLY
    assert "identify the hall" in ask(tech_staff, "Something is broken").reply
    assert db.execute(select(MaintenanceRequest)).first() is None


# ---------------------------------------------------------------------------
# Failures and HTTP
# ---------------------------------------------------------------------------

def test_handler_failure_is_logged_and_answered(chatbot, log_db, teacher, hall, now):
    def explode(*args, **kwargs):
        raise RuntimeError("database went away")

    chatbot.repository.overlapping_approved = explode
    ctx = ChatContext("Is the Auditorium free?", teacher.id, [UserRole.TEACHER], now)

    reply = chatbot.route_chatbot_message(ctx)

    assert reply.reply == FALLBACK_REPLY
    entry = log_db["logs_system"].find_one({"source": "chatbot"})
    assert entry["severity"] == "error"
    assert entry["context"]["profileId"] == teacher.id
    assert "database went away" in entry["stack"]


def test_chatbot_endpoint(client, teacher, hall):
    response = client.post(
        "/api/v1/chatbot",
        json={"message": "Is the Auditorium free?", "profile_id": teacher.id},
    )

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"reply"}
    assert body["reply"].startswith("Auditorium Hall is available")


def test_chatbot_endpoint_rejects_empty_message(client, teacher):
    response = client.post("/api/v1/chatbot", json={"message": "", "profile_id": teacher.id})
    assert response.status_code == 422
