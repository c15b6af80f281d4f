"""
Hall and booking reports (PDF) and the hall booking history export (CSV).
"""

import csv
import io
from dataclasses import dataclass
from typing import List, Optional

from reportlab.lib.units import cm
from sqlalchemy.orm import Session

from hallbook.core.exceptions import ErrorCode
from hallbook.models.booking import Booking
from hallbook.models.enums import BookingStatus
from hallbook.repositories.booking_repository import BookingRepository
from hallbook.repositories.hall_repository import HallRepository
from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import ServiceResult
from hallbook.utils.datetime_utils import format_date, format_time, utcnow
from hallbook.utils.pdf_utils import PDFGenerator

REPORTABLE_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.AUTO_COMPLETED})

CSV_HEADERS = ["date", "start_time", "end_time", "teacher", "email", "status", "purpose", "participants"]


@dataclass
class ReportFile:
    filename: str
    content: bytes
    media_type: str


class ReportService(BaseService[BookingRepository]):

    def __init__(self, db_session: Session, pdf: Optional[PDFGenerator] = None):
        super().__init__(BookingRepository(db_session), db_session)
        self.halls = HallRepository(db_session)
        self.pdf = pdf or PDFGenerator()

    def hall_report(self, hall_id: str) -> ServiceResult[ReportFile]:
        """Bookings of one hall, newest first."""
        hall = self.halls.find_detail(hall_id)
        if hall is None:
            return ServiceResult.not_found("SeminarHall", hall_id)

        try:
            bookings = self.repository.search(hall_id=hall_id, newest_first=True)
            rows = [
                [
                    format_date(b.start_time),
                    f"{format_time(b.start_time)} - {format_time(b.end_time)}",
                    b.teacher.name,
                    b.teacher.email,
                    b.status.value,
                    b.purpose,
                ]
                for b in bookings
            ]
            content = self.pdf.generate_report(
                f"Hall Booking Report: {hall.name}",
                [
                    {'type': 'heading', 'text': f"Bookings ({len(rows)})"},
                    {
                        'type': 'table',
                        'headers': ["Date", "Time", "Teacher", "Email", "Status", "Purpose"],
                        'data': rows,
                        'col_widths': [2.2*cm, 2.6*cm, 3*cm, 4*cm, 2.4*cm, 3.8*cm],
                    },
                ],
                header_info={
                    "Department": hall.department.name,
                    "Location": hall.location or "-",
                    "Capacity": str(hall.seating_capacity),
                    "Generated": utcnow().strftime("%Y-%m-%d %H:%M UTC"),
                },
            )
        except Exception as e:
            return self._handle_exception(e, "generate hall report", hall_id)

        return ServiceResult.success(
            ReportFile(f"hall-report-{hall.id}.pdf", content, "application/pdf")
        )

    def booking_report(self, booking_id: str) -> ServiceResult[ReportFile]:
        """Session summary of a completed booking."""
        booking = self.repository.find_with_relations(booking_id)
        if booking is None:
            return ServiceResult.not_found("Booking", booking_id)
        if booking.status not in REPORTABLE_STATUSES:
            return ServiceResult.conflict(
                "Report allowed only for completed bookings",
                details={"booking_id": booking_id, "status": booking.status.value},
                code=ErrorCode.INVALID_STATE_TRANSITION,
            )

        try:
            content = self.pdf.generate_report(
                "Seminar Session Report",
                self._booking_sections(booking),
                header_info={
                    "Hall": booking.hall.name,
                    "Teacher": f"{booking.teacher.name} ({booking.teacher.email})",
                    "Date": format_date(booking.start_time),
                    "Time": f"{format_time(booking.start_time)} - {format_time(booking.end_time)}",
                    "Status": booking.status.value,
                    "Participants": str(booking.expected_participants or "-"),
                },
            )
        except Exception as e:
            return self._handle_exception(e, "generate booking report", booking_id)

        return ServiceResult.success(
            ReportFile(f"booking-report-{booking.id}.pdf", content, "application/pdf")
        )

    def hall_history_csv(self, hall_id: str) -> ServiceResult[ReportFile]:
        if self.halls.find_by_id(hall_id) is None:
            return ServiceResult.not_found("SeminarHall", hall_id)

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for b in self.repository.search(hall_id=hall_id, newest_first=True):
            writer.writerow({
                "date": b.booking_date.isoformat(),
                "start_time": b.start_time.isoformat(),
                "end_time": b.end_time.isoformat(),
                "teacher": b.teacher.name,
                "email": b.teacher.email,
                "status": b.status.value,
                "purpose": b.purpose,
                "participants": b.expected_participants if b.expected_participants is not None else "-",
            })
        csv_data = output.getvalue()
        output.close()

        return ServiceResult.success(
            ReportFile("hall-booking-history.csv", csv_data.encode("utf-8"), "text/csv")
        )

    def _booking_sections(self, booking: Booking) -> List[dict]:
        sections = [
            {'type': 'heading', 'text': "Purpose"},
            {'type': 'paragraph', 'text': booking.purpose},
        ]
        if booking.special_requirements:
            sections += [
                {'type': 'heading', 'text': "Special Requirements"},
                {'type': 'paragraph', 'text': booking.special_requirements},
            ]
        sections += [
            {'type': 'heading', 'text': "Session Summary"},
            {'type': 'paragraph', 'text': booking.session_summary or "No summary was recorded."},
            {'type': 'heading', 'text': "Timeline"},
            {
                'type': 'table',
                'headers': ["When", "Action", "From", "To", "Notes"],
                'data': [
                    [
                        log.created_at.strftime("%Y-%m-%d %H:%M"),
                        log.action,
                        log.previous_status.value if log.previous_status else "-",
                        log.new_status.value,
                        log.notes or "",
                    ]
                    for log in self.repository.logs_for(booking.id)
                ],
            },
        ]
        return sections
