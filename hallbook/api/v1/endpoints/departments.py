"""
Department HOD check and assignment.
"""

from fastapi import APIRouter, Depends

from hallbook.api import deps
from hallbook.core.exceptions import AuthorizationError
from hallbook.models.department import Profile
from hallbook.schemas.department import HodAssignRequest, HodCheckResponse
from hallbook.services.department.hod_guard_service import HodGuardService

router = APIRouter(prefix="/departments")


@router.get("/{department_name}/hod-check", response_model=HodCheckResponse)
def check_department_hod(
    department_name: str,
    service: HodGuardService = Depends(deps.get_hod_guard_service),
):
    """Advisory: whether the department can still take a HOD."""
    return service.check_department_hod(department_name).to_dict()


@router.post("/{department_id}/hod", response_model=HodCheckResponse)
def assign_hod(
    department_id: str,
    payload: HodAssignRequest,
    actor: Profile = Depends(deps.get_current_profile),
    service: HodGuardService = Depends(deps.get_hod_guard_service),
):
    # HODs onboard themselves; nobody appoints another profile
    if payload.profile_id != actor.id:
        raise AuthorizationError("A profile can only be assigned as HOD by itself")
    # a second HOD for the department surfaces as 409 with ok=false in details
    return service.assign_hod(department_id, payload.profile_id, actor_id=actor.id).unwrap().to_dict()
