"""
Authenticated triggers for the booking lifecycle jobs, for external cron.
"""

from fastapi import APIRouter, Depends

from hallbook.api import deps
from hallbook.schemas.booking import LifecycleRunResponse
from hallbook.services.booking.booking_lifecycle_service import BookingLifecycleService

router = APIRouter(prefix="/cron", dependencies=[Depends(deps.verify_cron_secret)])


@router.post("/auto-reject", response_model=LifecycleRunResponse, response_model_exclude_none=True)
def auto_reject(service: BookingLifecycleService = Depends(deps.get_lifecycle_service)):
    report = service.auto_reject_stale_pending()
    return LifecycleRunResponse(rejected=report.count)


@router.post("/auto-complete", response_model=LifecycleRunResponse, response_model_exclude_none=True)
def auto_complete(service: BookingLifecycleService = Depends(deps.get_lifecycle_service)):
    report = service.auto_complete_past_approved()
    return LifecycleRunResponse(completed=report.count)
