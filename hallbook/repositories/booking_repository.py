"""
Booking repository.

Status changes go through `transition_status`, a conditional UPDATE that
only matches while the row still holds the expected status.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from hallbook.core.exceptions import InvalidStateTransitionError
from hallbook.models.booking import TERMINAL_BOOKING_STATUSES, Booking, BookingLog, can_transition
from hallbook.models.enums import BookingStatus
from hallbook.models.hall import SeminarHall
from hallbook.repositories.base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    def _with_relations(self):
        return select(Booking).options(
            joinedload(Booking.hall),
            joinedload(Booking.teacher),
        )

    def find_with_relations(self, booking_id: str) -> Optional[Booking]:
        return self.db.execute(
            self._with_relations().where(Booking.id == booking_id)
        ).scalar_one_or_none()

    def search(
        self,
        hall_id: Optional[str] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
        teacher_id: Optional[str] = None,
        hod_id: Optional[str] = None,
        department_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> List[Booking]:
        """Filtered booking listing; every filter is optional."""
        stmt = self._with_relations()
        if hall_id:
            stmt = stmt.where(Booking.hall_id == hall_id)
        if statuses:
            stmt = stmt.where(Booking.status.in_(list(statuses)))
        if teacher_id:
            stmt = stmt.where(Booking.teacher_id == teacher_id)
        if hod_id:
            stmt = stmt.where(Booking.hod_id == hod_id)
        if department_id:
            stmt = stmt.join(SeminarHall, SeminarHall.id == Booking.hall_id).where(
                SeminarHall.department_id == department_id
            )
        if date_from:
            stmt = stmt.where(Booking.booking_date >= date_from)
        if date_to:
            stmt = stmt.where(Booking.booking_date <= date_to)
        if newest_first:
            stmt = stmt.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        else:
            stmt = stmt.order_by(Booking.booking_date, Booking.start_time)
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().unique())

    def upcoming_for_teacher(self, teacher_id: str, now: datetime, limit: int = 5) -> List[Booking]:
        stmt = (
            self._with_relations()
            .where(
                Booking.teacher_id == teacher_id,
                Booking.status.in_([BookingStatus.APPROVED, BookingStatus.PENDING]),
                Booking.start_time > now,
            )
            .order_by(Booking.start_time)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().unique())

    def past_for_teacher(self, teacher_id: str, now: datetime, limit: int = 5) -> List[Booking]:
        """Finished bookings (any terminal status) that ended before `now`."""
        stmt = (
            self._with_relations()
            .where(
                Booking.teacher_id == teacher_id,
                Booking.status.in_(list(TERMINAL_BOOKING_STATUSES)),
                Booking.end_time < now,
            )
            .order_by(Booking.end_time.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().unique())

    def pending_for_department(self, department_id: str) -> List[Booking]:
        return self.search(department_id=department_id, statuses=[BookingStatus.PENDING])

    def overlapping_approved(
        self,
        hall_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[Booking]:
        """Approved bookings of a hall whose window intersects [start, end)."""
        stmt = (
            self._with_relations()
            .where(
                Booking.hall_id == hall_id,
                Booking.status == BookingStatus.APPROVED,
                Booking.start_time < window_end,
                Booking.end_time > window_start,
            )
            .order_by(Booking.start_time)
        )
        if exclude_id:
            stmt = stmt.where(Booking.id != exclude_id)
        return list(self.db.execute(stmt).scalars().unique())

    def stale_pending(self, cutoff: datetime) -> List[Booking]:
        """Pending bookings whose session started before the cutoff."""
        return list(self.db.execute(
            self._with_relations()
            .where(Booking.status == BookingStatus.PENDING, Booking.start_time < cutoff)
            .order_by(Booking.start_time)
        ).scalars().unique())

    def past_approved(self, now: datetime) -> List[Booking]:
        return list(self.db.execute(
            self._with_relations()
            .where(Booking.status == BookingStatus.APPROVED, Booking.end_time < now)
            .order_by(Booking.end_time)
        ).scalars().unique())

    def transition_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        target: BookingStatus,
        **values: Any,
    ) -> bool:
        """
        Move a booking from `expected` to `target`.

        Returns False when the row no longer holds `expected`, i.e. another
        writer moved it first.

        Raises:
            InvalidStateTransitionError: If `expected -> target` is not allowed
        """
        if not can_transition(expected, target):
            raise InvalidStateTransitionError("Booking", expected.value, target.value)
        fields: Dict[str, Any] = dict(values)
        fields["status"] = target
        return self.conditional_update({"id": booking_id, "status": expected}, fields) == 1

    def add_log(
        self,
        booking_id: str,
        action: str,
        previous_status: Optional[BookingStatus],
        new_status: BookingStatus,
        performed_by: str,
        notes: Optional[str] = None,
    ) -> BookingLog:
        log = BookingLog(
            booking_id=booking_id,
            action=action,
            previous_status=previous_status,
            new_status=new_status,
            performed_by=performed_by,
            notes=notes,
        )
        self.db.add(log)
        self.db.flush()
        return log

    def logs_for(self, booking_id: str) -> List[BookingLog]:
        return list(self.db.execute(
            select(BookingLog)
            .where(BookingLog.booking_id == booking_id)
            .order_by(BookingLog.created_at)
        ).scalars())
