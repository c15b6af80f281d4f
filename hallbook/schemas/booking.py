"""
Booking request and response schemas.
"""

from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from hallbook.models.enums import BookingStatus
from hallbook.schemas.base import BaseResponseSchema, BaseSchema

__all__ = [
    "BookingCreate",
    "BookingRejectRequest",
    "BookingCompleteRequest",
    "BookingLogResponse",
    "BookingResponse",
    "BookingDetail",
    "LifecycleRunResponse",
]


class BookingCreate(BaseSchema):
    """Booking request submitted by a teacher."""

    hall_id: str
    booking_date: Date
    start_time: datetime
    end_time: datetime
    purpose: str = Field(..., min_length=1, max_length=500)
    permission_letter_url: Optional[str] = Field(None, max_length=500)
    expected_participants: Optional[int] = Field(None, ge=1)
    special_requirements: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self) -> "BookingCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingRejectRequest(BaseSchema):
    reason: str = Field(..., min_length=1, max_length=1000)


class BookingCompleteRequest(BaseSchema):
    summary: str = Field(..., min_length=1)


class BookingLogResponse(BaseResponseSchema):
    action: str
    previous_status: Optional[BookingStatus] = None
    new_status: BookingStatus
    performed_by: str
    notes: Optional[str] = None


class BookingResponse(BaseResponseSchema):
    hall_id: str
    teacher_id: str
    hod_id: Optional[str] = None
    booking_date: Date
    start_time: datetime
    end_time: datetime
    purpose: str
    expected_participants: Optional[int] = None
    special_requirements: Optional[str] = None
    status: BookingStatus
    rejection_reason: Optional[str] = None
    session_summary: Optional[str] = None
    approved_at: Optional[datetime] = None


class BookingDetail(BookingResponse):
    logs: List[BookingLogResponse] = Field(default_factory=list)


class LifecycleRunResponse(BaseSchema):
    success: bool = True
    rejected: Optional[int] = None
    completed: Optional[int] = None
