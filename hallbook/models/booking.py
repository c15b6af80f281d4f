"""
Booking models for seminar hall reservations.

This module defines the booking entity, its allowed status transitions,
and the per-booking transition log.
"""

from datetime import date as Date, datetime
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import CheckConstraint, Date as SQLDate, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hallbook.models.base import TimestampModel
from hallbook.models.department import Profile
from hallbook.models.enums import BookingStatus
from hallbook.models.hall import SeminarHall

__all__ = [
    "Booking",
    "BookingLog",
    "ALLOWED_BOOKING_TRANSITIONS",
    "TERMINAL_BOOKING_STATUSES",
    "can_transition",
]


ALLOWED_BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.APPROVED,
        BookingStatus.REJECTED,
        BookingStatus.AUTO_REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.APPROVED: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.AUTO_COMPLETED,
        BookingStatus.CANCELLED,
    }),
}

TERMINAL_BOOKING_STATUSES: FrozenSet[BookingStatus] = frozenset({
    BookingStatus.REJECTED,
    BookingStatus.AUTO_REJECTED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
    BookingStatus.AUTO_COMPLETED,
})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Whether `current -> target` is an allowed booking status change."""
    return target in ALLOWED_BOOKING_TRANSITIONS.get(current, frozenset())


class Booking(TimestampModel):
    """
    Seminar hall booking.

    Attributes:
        hall_id: Hall being booked
        teacher_id: Requesting teacher
        hod_id: HOD who approved or rejected the booking
        booking_date: Day of the session
        start_time: Session start (naive UTC)
        end_time: Session end (naive UTC)
        status: Current lifecycle status
        rejection_reason: Reason given on (auto-)rejection
        session_summary: Summary written after completion
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_window"),
        Index("ix_bookings_status_start", "status", "start_time"),
        Index("ix_bookings_status_end", "status", "end_time"),
    )

    hall_id: Mapped[str] = mapped_column(
        ForeignKey("seminar_halls.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    teacher_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    hod_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    booking_date: Mapped[Date] = mapped_column(SQLDate, nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    purpose: Mapped[str] = mapped_column(String(500), nullable=False)
    expected_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    special_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    permission_letter_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING, index=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    session_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    hall: Mapped[SeminarHall] = relationship(SeminarHall, back_populates="bookings")
    teacher: Mapped[Profile] = relationship(Profile, foreign_keys=[teacher_id])
    hod: Mapped[Optional[Profile]] = relationship(Profile, foreign_keys=[hod_id])
    logs: Mapped[List["BookingLog"]] = relationship(
        "BookingLog", back_populates="booking", cascade="all, delete-orphan",
        order_by="BookingLog.created_at",
    )


class BookingLog(TimestampModel):
    """Record of one booking status transition"""

    __tablename__ = "booking_logs"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    previous_status: Mapped[Optional[BookingStatus]] = mapped_column(Enum(BookingStatus), nullable=True)
    new_status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus), nullable=False)
    performed_by: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    booking: Mapped[Booking] = relationship(Booking, back_populates="logs")
