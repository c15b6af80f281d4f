"""
Booking workflows: request, approve, reject, cancel and complete.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from hallbook.core.exceptions import ConflictError, ErrorCode
from hallbook.models.booking import Booking, can_transition
from hallbook.models.department import Profile
from hallbook.models.enums import BookingStatus, NotificationType, UserRole
from hallbook.repositories.booking_repository import BookingRepository
from hallbook.repositories.department_repository import ProfileRepository
from hallbook.repositories.hall_repository import HallRepository
from hallbook.schemas.booking import BookingCreate
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.services.notification.notification_service import NotificationService
from hallbook.utils.datetime_utils import format_date, format_time, to_naive_utc, utcnow


@dataclass
class BookingFilters:
    hall_id: Optional[str] = None
    statuses: Optional[Iterable[BookingStatus]] = None
    teacher_id: Optional[str] = None
    hod_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: Optional[int] = None


class BookingService(BaseService[BookingRepository]):
    """
    Booking request workflow.

    Every status change is a conditional update from the expected status, so
    a booking moved concurrently by another request (or by the lifecycle
    scheduler) is reported as a conflict instead of being overwritten.
    """

    def __init__(
        self,
        db_session: Session,
        sink: AuditLogSink,
        notifier: Optional[EmailNotifier] = None,
    ):
        super().__init__(BookingRepository(db_session), db_session)
        self.halls = HallRepository(db_session)
        self.profiles = ProfileRepository(db_session)
        self.notifications = NotificationService(db_session)
        self.sink = sink
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_bookings(self, filters: BookingFilters) -> ServiceResult[List[Booking]]:
        try:
            items = self.repository.search(
                hall_id=filters.hall_id,
                statuses=filters.statuses,
                teacher_id=filters.teacher_id,
                hod_id=filters.hod_id,
                date_from=filters.date_from,
                date_to=filters.date_to,
                limit=filters.limit,
            )
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, "list bookings")

    def get_booking(self, booking_id: str) -> ServiceResult[Booking]:
        booking = self.repository.find_with_relations(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        return ServiceResult.success(booking)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_booking(self, teacher: Profile, data: BookingCreate) -> ServiceResult[Booking]:
        start = to_naive_utc(data.start_time)
        end = to_naive_utc(data.end_time)
        if end <= start:
            return ServiceResult.validation_failure("end_time must be after start_time", field="end_time")

        hall = self.halls.find_by_id(data.hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", data.hall_id)

        try:
            with self.transaction():
                if self.repository.overlapping_approved(hall.id, start, end):
                    raise ConflictError(
                        "The hall is already booked for the selected time",
                        ErrorCode.BOOKING_CONFLICT,
                        {"hall_id": hall.id},
                    )
                booking = self.repository.create(
                    Booking(
                        hall_id=hall.id,
                        teacher_id=teacher.id,
                        booking_date=data.booking_date,
                        start_time=start,
                        end_time=end,
                        purpose=data.purpose,
                        permission_letter_url=data.permission_letter_url,
                        expected_participants=data.expected_participants,
                        special_requirements=data.special_requirements,
                        status=BookingStatus.PENDING,
                    )
                )
                self.repository.add_log(
                    booking.id, "Booking Requested", None, BookingStatus.PENDING, teacher.id
                )
                hod = self.profiles.find_hod_for_department(hall.department_id)
                if hod is not None:
                    self.notifications.notify(
                        hod.id,
                        "New Booking Request",
                        "A new booking request is awaiting approval.",
                        NotificationType.BOOKING_PENDING,
                        booking.id,
                    )
        except Exception as e:
            return self._handle_exception(e, "create booking", data.hall_id)

        self._logger.info(f"Booking {booking.id} requested for hall {hall.name}")
        self.sink.log_user_action(
            teacher.id, UserRole.TEACHER.value, "booking_requested", "booking", booking.id,
            {"hallId": hall.id},
        )
        if hod is not None:
            self._email(
                "booking_pending",
                hod.email,
                booking,
                hod_name=hod.name,
                teacher_name=teacher.name,
            )
        return ServiceResult.success(booking, message="Booking requested")

    def approve_booking(self, booking_id: str, hod: Profile) -> ServiceResult[Booking]:
        booking = self.repository.find_with_relations(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        if booking.hall.department.hod_id != hod.id:
            return ServiceResult.forbidden("Only the HOD of the hall's department can review this booking")

        try:
            with self.transaction():
                if self.repository.overlapping_approved(
                    booking.hall_id, booking.start_time, booking.end_time, exclude_id=booking.id
                ):
                    raise ConflictError(
                        "Another approved booking overlaps this time slot",
                        ErrorCode.BOOKING_CONFLICT,
                        {"booking_id": booking.id},
                    )
                self._transition(
                    booking, BookingStatus.PENDING, BookingStatus.APPROVED,
                    "Booking Approved", hod.id,
                    hod_id=hod.id, approved_at=utcnow(),
                )
                self.notifications.notify(
                    booking.teacher_id,
                    "Booking Approved",
                    f"Your booking for {booking.purpose} has been approved.",
                    NotificationType.BOOKING_APPROVED,
                    booking.id,
                )
        except Exception as e:
            return self._handle_exception(e, "approve booking", booking_id)

        self.sink.log_user_action(hod.id, UserRole.HOD.value, "booking_approved", "booking", booking.id)
        self._email(
            "booking_approved",
            booking.teacher.email,
            booking,
            teacher_name=booking.teacher.name,
            purpose=booking.purpose,
            approved_by=hod.name,
        )
        return ServiceResult.success(booking, message="Booking approved")

    def reject_booking(self, booking_id: str, hod: Profile, reason: str) -> ServiceResult[Booking]:
        if not reason or not reason.strip():
            return ServiceResult.validation_failure("A rejection reason is required", field="reason")
        booking = self.repository.find_with_relations(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        if booking.hall.department.hod_id != hod.id:
            return ServiceResult.forbidden("Only the HOD of the hall's department can review this booking")

        try:
            with self.transaction():
                self._transition(
                    booking, BookingStatus.PENDING, BookingStatus.REJECTED,
                    "Booking Rejected", hod.id, notes=reason,
                    hod_id=hod.id, rejection_reason=reason,
                )
                self.notifications.notify(
                    booking.teacher_id,
                    "Booking Rejected",
                    reason,
                    NotificationType.BOOKING_REJECTED,
                    booking.id,
                )
        except Exception as e:
            return self._handle_exception(e, "reject booking", booking_id)

        self.sink.log_user_action(
            hod.id, UserRole.HOD.value, "booking_rejected", "booking", booking.id, {"reason": reason}
        )
        self._email(
            "booking_rejected",
            booking.teacher.email,
            booking,
            teacher_name=booking.teacher.name,
            reason=reason,
            rejected_by=hod.name,
        )
        return ServiceResult.success(booking, message="Booking rejected")

    def cancel_booking(self, booking_id: str, requester: Profile) -> ServiceResult[Booking]:
        booking = self.repository.find_by_id(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        if booking.teacher_id != requester.id:
            return ServiceResult.forbidden("Only the requester can cancel a booking")
        current = booking.status
        if not can_transition(current, BookingStatus.CANCELLED):
            return ServiceResult.conflict(
                f"A {current.value} booking cannot be cancelled",
                code=ErrorCode.INVALID_STATE_TRANSITION,
            )

        try:
            with self.transaction():
                self._transition(
                    booking, current, BookingStatus.CANCELLED, "Booking Cancelled", requester.id
                )
        except Exception as e:
            return self._handle_exception(e, "cancel booking", booking_id)

        self.sink.log_user_action(
            requester.id, UserRole.TEACHER.value, "booking_cancelled", "booking", booking.id
        )
        return ServiceResult.success(booking, message="Booking cancelled")

    def complete_booking(self, booking_id: str, requester: Profile, summary: str) -> ServiceResult[Booking]:
        booking = self.repository.find_by_id(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        if booking.teacher_id != requester.id:
            return ServiceResult.forbidden("Only the requester can complete a booking")

        try:
            with self.transaction():
                self._transition(
                    booking, BookingStatus.APPROVED, BookingStatus.COMPLETED,
                    "Booking Completed", requester.id, notes="Session summary added",
                    session_summary=summary,
                )
        except Exception as e:
            return self._handle_exception(e, "complete booking", booking_id)

        self.sink.log_user_action(
            requester.id, UserRole.TEACHER.value, "booking_completed", "booking", booking.id
        )
        return ServiceResult.success(booking, message="Booking completed")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(
        self,
        booking: Booking,
        expected: BookingStatus,
        target: BookingStatus,
        action: str,
        performed_by: str,
        notes: Optional[str] = None,
        **values,
    ) -> None:
        if not self.repository.transition_status(booking.id, expected, target, **values):
            raise ConflictError(
                f"Booking is no longer {expected.value}",
                ErrorCode.INVALID_STATE_TRANSITION,
                {"booking_id": booking.id, "expected_status": expected.value},
            )
        self.repository.add_log(booking.id, action, expected, target, performed_by, notes)

    def _email(self, event: str, to: str, booking: Booking, **context) -> None:
        if self.notifier is None:
            return
        self.notifier.send(
            event,
            to,
            {
                "hall_name": booking.hall.name,
                "booking_date": format_date(booking.start_time),
                "start_time": format_time(booking.start_time),
                "end_time": format_time(booking.end_time),
                **context,
            },
            booking_id=booking.id,
        )
