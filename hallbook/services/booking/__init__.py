"""
Booking workflows and time-driven lifecycle transitions.
"""

from hallbook.services.booking.booking_lifecycle_service import (
    AUTO_REJECT_REASON,
    BookingLifecycleService,
    LifecycleRunReport,
)
from hallbook.services.booking.booking_service import BookingFilters, BookingService

__all__ = [
    "AUTO_REJECT_REASON",
    "BookingFilters",
    "BookingLifecycleService",
    "BookingService",
    "LifecycleRunReport",
]
