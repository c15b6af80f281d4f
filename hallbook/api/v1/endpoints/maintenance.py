"""
Maintenance request endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hallbook.api import deps
from hallbook.models.department import Profile
from hallbook.models.enums import MaintenanceRequestStatus, UserRole
from hallbook.schemas.maintenance import (
    MaintenanceCloseRequest,
    MaintenanceCreate,
    MaintenanceRejectRequest,
    MaintenanceResponse,
)
from hallbook.services.maintenance.maintenance_service import MaintenanceService

router = APIRouter(prefix="/maintenance")

tech_only = deps.require_role(UserRole.TECH_STAFF)
hod_only = deps.require_role(UserRole.HOD)


@router.get("", response_model=List[MaintenanceResponse])
def list_requests(
    hall_id: Optional[str] = Query(None),
    status_filter: Optional[MaintenanceRequestStatus] = Query(None, alias="status"),
    profile: Profile = Depends(deps.get_current_profile),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return service.list_requests(profile, hall_id, status_filter).unwrap()


@router.post("", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: MaintenanceCreate,
    tech: Profile = Depends(tech_only),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return service.create_request(tech, payload).unwrap()


@router.post("/{request_id}/approve", response_model=MaintenanceResponse)
def approve_request(
    request_id: str,
    hod: Profile = Depends(hod_only),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return service.approve_request(request_id, hod).unwrap()


@router.post("/{request_id}/reject", response_model=MaintenanceResponse)
def reject_request(
    request_id: str,
    payload: MaintenanceRejectRequest,
    hod: Profile = Depends(hod_only),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return service.reject_request(request_id, hod, payload.reason).unwrap()


@router.post("/{request_id}/close", response_model=MaintenanceResponse)
def close_request(
    request_id: str,
    payload: MaintenanceCloseRequest,
    tech: Profile = Depends(tech_only),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return service.close_request(request_id, tech, payload.final_status, payload.notes).unwrap()
