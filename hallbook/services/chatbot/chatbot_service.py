"""
Chatbot message routing.

A message is classified by keyword intent and handed to a handler that
answers in plain text. Replies may carry action markers that the dashboard
turns into buttons:

    [CREATE_BOOKING:<hall id>|<start>|<end>]
    [OPEN_BOOKING:<booking id>]

Booking listings use a line based block format (DATE:, BOOKING:, KEY=value).
"""

from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from hallbook.models.booking import Booking
from hallbook.models.enums import MaintenanceRequestType, UserRole
from hallbook.repositories.booking_repository import BookingRepository
from hallbook.repositories.department_repository import DepartmentRepository, ProfileRepository
from hallbook.schemas.maintenance import MaintenanceCreate
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.chatbot.entities import extract_entities, extract_time_window
from hallbook.services.chatbot.intent import detect_intent
from hallbook.services.chatbot.resolvers import EntityResolver
from hallbook.services.chatbot.types import ChatContext, ChatReply, Intent
from hallbook.services.maintenance.maintenance_service import MaintenanceService
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.utils.datetime_utils import format_time, to_iso_z, utcnow

HELP_REPLY = "I can help with hall availability, your bookings, or pending approvals."
FALLBACK_REPLY = "Sorry, I couldn't process that request right now. Please try again later."
NO_PERMISSION_REPLY = "You do not have permission to view this information."
UNKNOWN_HALL_REPLY = "I couldn’t identify the seminar hall you are referring to."
UNKNOWN_MAINTENANCE_HALL_REPLY = "I couldn’t identify the hall for this maintenance request."
MAINTENANCE_NOT_ALLOWED_REPLY = "Only tech staff can report maintenance issues."
MY_BOOKINGS_NOT_ALLOWED_REPLY = "You are not authorized to view personal bookings."
NO_BOOKINGS_REPLY = "No upcoming bookings and no booking history found."
PENDING_NOT_ALLOWED_REPLY = "You are not authorized to view pending approvals."
NO_PENDING_REPLY = "There are no pending booking approvals."

CHATBOT_SOURCE = "chatbot"
BOOKING_LIST_LIMIT = 5


def group_by_date(bookings: List[Booking]) -> "OrderedDict[str, List[Booking]]":
    grouped: "OrderedDict[str, List[Booking]]" = OrderedDict()
    for booking in bookings:
        grouped.setdefault(booking.booking_date.isoformat(), []).append(booking)
    return grouped


def format_booking_block(booking: Booking, include_requester: bool = False) -> str:
    lines = ["BOOKING:", f"HALL={booking.hall.name}"]
    if include_requester:
        lines.append(f"REQUESTED_BY={booking.teacher.name}")
        lines.append(f"DATE={booking.booking_date.isoformat()}")
    lines += [
        f"TIME={format_time(booking.start_time)}-{format_time(booking.end_time)}",
        f"STATUS={booking.status.value}",
        f"ID={booking.id}",
    ]
    return "\n".join(lines) + "\n"


def format_grouped(bookings: List[Booking], include_requester: bool = False) -> str:
    return "\n".join(
        f"DATE:{day}\n" + "\n".join(format_booking_block(b, include_requester) for b in items)
        for day, items in group_by_date(bookings).items()
    )


class ChatbotService(BaseService[BookingRepository]):
    """
    Routes chatbot messages to intent handlers.

    `route_chatbot_message` never raises: unexpected failures inside a
    handler are recorded in the system log and answered with a fallback.
    """

    def __init__(
        self,
        db_session: Session,
        sink: AuditLogSink,
        notifier: Optional[EmailNotifier] = None,
    ):
        super().__init__(BookingRepository(db_session), db_session)
        self.resolver = EntityResolver(db_session)
        self.profiles = ProfileRepository(db_session)
        self.departments = DepartmentRepository(db_session)
        self.maintenance = MaintenanceService(db_session, sink, notifier)
        self.sink = sink
        self._handlers: Dict[Intent, Callable[[ChatContext], ChatReply]] = {
            Intent.AVAILABILITY: self._handle_availability,
            Intent.MAINTENANCE: self._handle_maintenance,
            Intent.MY_BOOKINGS: self._handle_my_bookings,
            Intent.HOD_PENDING_BOOKINGS: self._handle_hod_pending_bookings,
        }

    def context_for(self, profile_id: str, message: str, now: Optional[datetime] = None) -> ChatContext:
        """Build a context with the sender's roles; unknown profiles get none."""
        return ChatContext(
            message=message,
            profile_id=profile_id,
            roles=self.profiles.roles_for(profile_id),
            now=now or utcnow(),
        )

    def route_chatbot_message(self, ctx: ChatContext) -> ChatReply:
        intent = detect_intent(ctx.message)
        if ctx.now is None:
            ctx.now = utcnow()

        handler = self._handlers.get(intent)
        if handler is None:
            return ChatReply(HELP_REPLY, intent)

        try:
            return handler(ctx)
        except Exception as e:
            # a failed handler rolls back whatever it had started
            self.db.rollback()
            self._logger.error(
                f"Chatbot handler failed for intent {intent.value}: {e}",
                extra={'profile_id': ctx.profile_id, 'intent': intent.value},
                exc_info=True,
            )
            self.sink.log_system(
                CHATBOT_SOURCE,
                f"Chatbot handler failed for intent {intent.value}",
                exc=e,
                context={"profileId": ctx.profile_id, "message": ctx.message},
            )
            return ChatReply(FALLBACK_REPLY, intent)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_availability(self, ctx: ChatContext) -> ChatReply:
        hall = self.resolver.resolve_hall(ctx.message)
        if hall is None:
            return ChatReply(UNKNOWN_HALL_REPLY, Intent.AVAILABILITY)

        start, end = extract_time_window(ctx.message, ctx.now)
        conflicts = self.repository.overlapping_approved(hall.id, start, end)

        if ctx.has_role(UserRole.TEACHER):
            reply = self._teacher_availability(hall.id, hall.name, start, end, conflicts)
        elif ctx.has_role(UserRole.TECH_STAFF):
            reply = (
                f"{hall.name} is booked, but you may still access it for maintenance."
                if conflicts else f"{hall.name} is currently free and accessible."
            )
        elif ctx.has_role(UserRole.HOD):
            reply = (
                f"{hall.name} is booked. You may review or override the booking if necessary.\n"
                f"[OPEN_BOOKING:{conflicts[0].id}]"
                if conflicts else f"{hall.name} is available."
            )
        else:
            reply = NO_PERMISSION_REPLY
        return ChatReply(reply, Intent.AVAILABILITY, hall_id=hall.id)

    @staticmethod
    def _teacher_availability(
        hall_id: str,
        hall_name: str,
        start: datetime,
        end: datetime,
        conflicts: List[Booking],
    ) -> str:
        if not conflicts:
            return (
                f"{hall_name} is available during the requested time.\n"
                f"[CREATE_BOOKING:{hall_id}|{to_iso_z(start)}|{to_iso_z(end)}]"
            )

        first, last = conflicts[0], conflicts[-1]
        if first.start_time > start:
            return (
                f"{hall_name} is available until {format_time(first.start_time)}.\n"
                f"Booked by {first.teacher.name if first.teacher else 'another user'} "
                f"from {format_time(first.start_time)} to {format_time(first.end_time)}.\n"
                f"[CREATE_BOOKING:{hall_id}|{to_iso_z(start)}|{to_iso_z(first.start_time)}]"
            )
        if last.end_time < end:
            return (
                f"{hall_name} is booked until {format_time(last.end_time)}.\n"
                f"Booked by {last.teacher.name if last.teacher else 'another user'} "
                f"from {format_time(last.start_time)} to {format_time(last.end_time)}.\n"
                f"[CREATE_BOOKING:{hall_id}|{to_iso_z(last.end_time)}|{to_iso_z(end)}]"
            )
        return (
            f"{hall_name} is not available during the requested time.\n"
            f"Booked from {format_time(first.start_time)} to {format_time(last.end_time)}.\n"
            f"[OPEN_BOOKING:{first.id}]"
        )

    def _handle_maintenance(self, ctx: ChatContext) -> ChatReply:
        if not ctx.has_role(UserRole.TECH_STAFF):
            return ChatReply(MAINTENANCE_NOT_ALLOWED_REPLY, Intent.MAINTENANCE)

        hall = self.resolver.resolve_hall(ctx.message)
        if hall is None:
            return ChatReply(UNKNOWN_MAINTENANCE_HALL_REPLY, Intent.MAINTENANCE)

        entities = extract_entities(ctx.message)
        request_type = entities.request_type
        equipment = component = None
        if request_type != MaintenanceRequestType.NEW_INSTALLATION:
            equipment = self.resolver.resolve_equipment(hall.id, entities.equipment_type)
            if equipment is None:
                component = self.resolver.resolve_component(hall.id, entities.component_type)
            if equipment is None and component is None:
                request_type = MaintenanceRequestType.GENERAL_ISSUE

        tech = self.profiles.get_by_id(ctx.profile_id)
        result = self.maintenance.create_request(
            tech,
            MaintenanceCreate(
                hall_id=hall.id,
                request_type=request_type,
                priority=entities.priority,
                title="Reported via chatbot",
                description=ctx.message,
                equipment_id=equipment.id if equipment else None,
                component_id=component.id if component else None,
            ),
        )
        reply = f"{result.message}." if result.is_success else FALLBACK_REPLY
        return ChatReply(
            reply,
            Intent.MAINTENANCE,
            hall_id=hall.id,
            equipment_id=equipment.id if equipment else None,
            component_id=component.id if component else None,
        )

    def _handle_my_bookings(self, ctx: ChatContext) -> ChatReply:
        if not ctx.has_role(UserRole.TEACHER):
            return ChatReply(MY_BOOKINGS_NOT_ALLOWED_REPLY, Intent.MY_BOOKINGS)

        upcoming = self.repository.upcoming_for_teacher(ctx.profile_id, ctx.now, BOOKING_LIST_LIMIT)
        if upcoming:
            return ChatReply(format_grouped(upcoming), Intent.MY_BOOKINGS)

        history = self.repository.past_for_teacher(ctx.profile_id, ctx.now, BOOKING_LIST_LIMIT)
        if not history:
            return ChatReply(NO_BOOKINGS_REPLY, Intent.MY_BOOKINGS)
        return ChatReply("PAST_BOOKINGS\n" + format_grouped(history), Intent.MY_BOOKINGS)

    def _handle_hod_pending_bookings(self, ctx: ChatContext) -> ChatReply:
        if not ctx.has_role(UserRole.HOD):
            return ChatReply(PENDING_NOT_ALLOWED_REPLY, Intent.HOD_PENDING_BOOKINGS)

        department = self.departments.find_one_by_criteria({"hod_id": ctx.profile_id})
        bookings = self.repository.pending_for_department(department.id) if department else []
        if not bookings:
            return ChatReply(NO_PENDING_REPLY, Intent.HOD_PENDING_BOOKINGS)
        return ChatReply(format_grouped(bookings, include_requester=True), Intent.HOD_PENDING_BOOKINGS)
