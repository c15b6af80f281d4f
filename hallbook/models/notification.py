"""In-app notification model."""

from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hallbook.models.base import TimestampModel
from hallbook.models.booking import Booking
from hallbook.models.enums import NotificationType


class Notification(TimestampModel):
    """Notification shown to a user in the dashboard bell"""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    related_booking_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True
    )

    related_booking: Mapped[Optional[Booking]] = relationship(Booking)
