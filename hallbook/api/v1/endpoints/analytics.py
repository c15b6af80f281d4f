"""
Hall analytics export.
"""

from fastapi import APIRouter, Depends, Response

from hallbook.api import deps
from hallbook.models.department import Profile
from hallbook.services.report.report_service import ReportService

router = APIRouter(prefix="/analytics")


@router.get("/{hall_id}")
def hall_booking_history(
    hall_id: str,
    _: Profile = Depends(deps.get_current_profile),
    reports: ReportService = Depends(deps.get_report_service),
):
    report = reports.hall_history_csv(hall_id).unwrap()
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )
