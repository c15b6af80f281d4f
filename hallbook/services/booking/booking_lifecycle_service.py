"""
Time-driven booking transitions run by the lifecycle scheduler and the
cron endpoints.

* pending bookings whose session started without approval become auto_rejected
* approved bookings whose session ended become auto_completed
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from hallbook.core.logging import get_logger
from hallbook.models.booking import Booking
from hallbook.models.enums import BookingStatus, NotificationType
from hallbook.repositories.booking_repository import BookingRepository
from hallbook.services.audit.audit_log_sink import SYSTEM_ACTOR, AuditLogSink
from hallbook.services.base.base_service import BaseService
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.services.notification.notification_service import NotificationService
from hallbook.utils.datetime_utils import format_date, format_time, utcnow

logger = get_logger(__name__)

AUTO_REJECT_REASON = "Automatically rejected because approval was not given before session start time"
AUTO_REJECT_JOB = "auto_reject_stale_pending"
AUTO_COMPLETE_JOB = "auto_complete_past_approved"


@dataclass
class LifecycleRunReport:
    job: str
    run_at: datetime
    booking_ids: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.booking_ids)


class BookingLifecycleService(BaseService[BookingRepository]):
    """
    Applies the scheduler-driven transitions.

    Each booking is moved in its own transaction by a conditional update. A
    booking already moved by a concurrent writer matches no row and is
    skipped without logs. Any other failure propagates to the caller.
    """

    def __init__(
        self,
        db_session: Session,
        sink: AuditLogSink,
        notifier: Optional[EmailNotifier] = None,
        grace_minutes: int = 0,
    ):
        super().__init__(BookingRepository(db_session), db_session)
        self.notifications = NotificationService(db_session)
        self.sink = sink
        self.notifier = notifier
        self.grace = timedelta(minutes=max(0, grace_minutes))

    def auto_reject_stale_pending(self, now: Optional[datetime] = None) -> LifecycleRunReport:
        now = now or utcnow()
        report = LifecycleRunReport(AUTO_REJECT_JOB, now)

        for booking in self.repository.stale_pending(now - self.grace):
            with self.transaction():
                moved = self.repository.transition_status(
                    booking.id,
                    BookingStatus.PENDING,
                    BookingStatus.AUTO_REJECTED,
                    rejection_reason=AUTO_REJECT_REASON,
                )
                if not moved:
                    continue
                self.repository.add_log(
                    booking.id,
                    "Auto Rejected",
                    BookingStatus.PENDING,
                    BookingStatus.AUTO_REJECTED,
                    booking.teacher_id,
                    "Auto-rejected by system scheduler",
                )
                self.notifications.notify(
                    booking.teacher_id,
                    "Booking Auto Rejected",
                    AUTO_REJECT_REASON,
                    NotificationType.BOOKING_AUTO_REJECTED,
                    booking.id,
                )
            report.booking_ids.append(booking.id)
            self._after_auto_reject(booking)

        if report.count:
            logger.info(f"Auto-rejected {report.count} booking(s)")
        else:
            logger.debug("No expired pending bookings found")
        return report

    def auto_complete_past_approved(self, now: Optional[datetime] = None) -> LifecycleRunReport:
        now = now or utcnow()
        report = LifecycleRunReport(AUTO_COMPLETE_JOB, now)

        for booking in self.repository.past_approved(now):
            with self.transaction():
                moved = self.repository.transition_status(
                    booking.id, BookingStatus.APPROVED, BookingStatus.AUTO_COMPLETED
                )
                if not moved:
                    continue
                self.repository.add_log(
                    booking.id,
                    "Auto Completed",
                    BookingStatus.APPROVED,
                    BookingStatus.AUTO_COMPLETED,
                    booking.teacher_id,
                    "Auto-completed after session end time",
                )
                self.notifications.notify(
                    booking.teacher_id,
                    "Booking Completed",
                    f"Your session '{booking.purpose}' has ended. You can now add a session summary.",
                    NotificationType.BOOKING_COMPLETED,
                    booking.id,
                )
            report.booking_ids.append(booking.id)
            self.sink.log_user_action(
                SYSTEM_ACTOR, SYSTEM_ACTOR, "booking_auto_completed", "booking", booking.id,
                {"previousStatus": BookingStatus.APPROVED.value},
            )

        if report.count:
            logger.info(f"Auto-completed {report.count} booking(s)")
        else:
            logger.debug("No bookings to auto-complete")
        return report

    def _after_auto_reject(self, booking: Booking) -> None:
        self.sink.log_user_action(
            SYSTEM_ACTOR, SYSTEM_ACTOR, "booking_auto_rejected", "booking", booking.id,
            {"reason": AUTO_REJECT_REASON},
        )
        teacher = booking.teacher
        context = {
            "teacher_name": teacher.name,
            "hall_name": booking.hall.name,
            "booking_date": format_date(booking.start_time),
            "start_time": format_time(booking.start_time),
            "end_time": format_time(booking.end_time),
            "reason": AUTO_REJECT_REASON,
        }
        if self.notifier is not None:
            self.notifier.send("booking_auto_rejected", teacher.email, context, booking_id=booking.id)
        else:
            # No mail channel: the in-app notification is the delivery of record
            self.sink.log_notification(
                event="booking_auto_rejected",
                to=teacher.email,
                status="sent",
                channel="in_app",
                booking_id=booking.id,
            )
