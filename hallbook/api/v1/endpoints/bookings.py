"""
Booking workflow endpoints and the booking summary report.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from hallbook.api import deps
from hallbook.models.department import Profile
from hallbook.models.enums import BookingStatus, UserRole
from hallbook.schemas.booking import (
    BookingCompleteRequest,
    BookingCreate,
    BookingDetail,
    BookingRejectRequest,
    BookingResponse,
)
from hallbook.services.booking.booking_service import BookingFilters, BookingService
from hallbook.services.report.report_service import ReportService

router = APIRouter(prefix="/bookings")


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    hall_id: Optional[str] = Query(None),
    status_filter: Optional[List[BookingStatus]] = Query(None, alias="status"),
    teacher_id: Optional[str] = Query(None),
    hod_id: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    _: Profile = Depends(deps.get_current_profile),
    service: BookingService = Depends(deps.get_booking_service),
):
    filters = BookingFilters(
        hall_id=hall_id,
        statuses=status_filter,
        teacher_id=teacher_id,
        hod_id=hod_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
    )
    return service.list_bookings(filters).unwrap()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    teacher: Profile = Depends(deps.require_role(UserRole.TEACHER)),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.create_booking(teacher, payload).unwrap()


@router.get("/{booking_id}", response_model=BookingDetail)
def get_booking(
    booking_id: str,
    _: Profile = Depends(deps.get_current_profile),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.get_booking(booking_id).unwrap()


@router.post("/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    hod: Profile = Depends(deps.require_role(UserRole.HOD)),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.approve_booking(booking_id, hod).unwrap()


@router.post("/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(
    booking_id: str,
    payload: BookingRejectRequest,
    hod: Profile = Depends(deps.require_role(UserRole.HOD)),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.reject_booking(booking_id, hod, payload.reason).unwrap()


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    requester: Profile = Depends(deps.get_current_profile),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.cancel_booking(booking_id, requester).unwrap()


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    payload: BookingCompleteRequest,
    requester: Profile = Depends(deps.get_current_profile),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.complete_booking(booking_id, requester, payload.summary).unwrap()


@router.get("/{booking_id}/report")
def booking_report(
    booking_id: str,
    _: Profile = Depends(deps.get_current_profile),
    reports: ReportService = Depends(deps.get_report_service),
):
    report = reports.booking_report(booking_id).unwrap()
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )
