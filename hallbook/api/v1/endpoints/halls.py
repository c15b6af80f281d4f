"""
Hall, equipment and component endpoints, plus the hall booking report.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from hallbook.api import deps
from hallbook.models.department import Profile
from hallbook.models.enums import UserRole
from hallbook.schemas.hall import (
    ComponentCreate,
    ComponentResponse,
    ComponentStatusUpdate,
    EquipmentConditionUpdate,
    EquipmentCreate,
    EquipmentResponse,
    HallCreate,
    HallDetail,
    HallResponse,
    HallStatusUpdate,
    HallUpdate,
    TechStaffAssignmentRequest,
)
from hallbook.services.hall.hall_service import HallService
from hallbook.services.report.report_service import ReportService

router = APIRouter()

hod_only = deps.require_role(UserRole.HOD)
asset_managers = deps.require_role(UserRole.HOD, UserRole.TECH_STAFF)


@router.get("/halls", response_model=List[HallResponse])
def list_halls(
    department_id: Optional[str] = Query(None),
    tech_staff_id: Optional[str] = Query(None),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.list_halls(department_id, tech_staff_id).unwrap()


@router.get("/halls/{hall_id}", response_model=HallDetail)
def get_hall(hall_id: str, service: HallService = Depends(deps.get_hall_service)):
    return service.get_hall(hall_id).unwrap()


@router.post("/halls", response_model=HallResponse, status_code=status.HTTP_201_CREATED)
def create_hall(
    payload: HallCreate,
    actor: Profile = Depends(hod_only),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.create_hall(actor, payload).unwrap()


@router.patch("/halls/{hall_id}", response_model=HallResponse)
def update_hall(
    hall_id: str,
    payload: HallUpdate,
    actor: Profile = Depends(hod_only),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.update_hall(actor, hall_id, payload).unwrap()


@router.patch("/halls/{hall_id}/status", response_model=HallResponse)
def update_hall_status(
    hall_id: str,
    payload: HallStatusUpdate,
    actor: Profile = Depends(asset_managers),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.update_status(actor, hall_id, payload).unwrap()


@router.delete("/halls/{hall_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_hall(
    hall_id: str,
    actor: Profile = Depends(hod_only),
    service: HallService = Depends(deps.get_hall_service),
):
    service.delete_hall(actor, hall_id).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/halls/{hall_id}/tech-staff", response_model=HallDetail)
def assign_tech_staff(
    hall_id: str,
    payload: TechStaffAssignmentRequest,
    actor: Profile = Depends(hod_only),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.assign_tech_staff(actor, hall_id, payload.tech_staff_id).unwrap()


@router.get("/halls/{hall_id}/report")
def hall_report(
    hall_id: str,
    _: Profile = Depends(deps.get_current_profile),
    reports: ReportService = Depends(deps.get_report_service),
):
    report = reports.hall_report(hall_id).unwrap()
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


# --- Equipment ---------------------------------------------------------------

@router.get("/halls/{hall_id}/equipment", response_model=List[EquipmentResponse])
def list_equipment(hall_id: str, service: HallService = Depends(deps.get_hall_service)):
    return service.list_equipment(hall_id).unwrap()


@router.post(
    "/halls/{hall_id}/equipment",
    response_model=EquipmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_equipment(
    hall_id: str,
    payload: EquipmentCreate,
    actor: Profile = Depends(asset_managers),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.add_equipment(actor, hall_id, payload).unwrap()


@router.patch("/equipment/{equipment_id}/condition", response_model=EquipmentResponse)
def update_equipment_condition(
    equipment_id: str,
    payload: EquipmentConditionUpdate,
    actor: Profile = Depends(asset_managers),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.update_equipment_condition(actor, equipment_id, payload).unwrap()


# --- Components --------------------------------------------------------------

@router.get("/halls/{hall_id}/components", response_model=List[ComponentResponse])
def list_components(hall_id: str, service: HallService = Depends(deps.get_hall_service)):
    return service.list_components(hall_id).unwrap()


@router.post(
    "/halls/{hall_id}/components",
    response_model=ComponentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_component(
    hall_id: str,
    payload: ComponentCreate,
    actor: Profile = Depends(asset_managers),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.add_component(actor, hall_id, payload).unwrap()


@router.patch("/components/{component_id}/status", response_model=ComponentResponse)
def update_component_status(
    component_id: str,
    payload: ComponentStatusUpdate,
    actor: Profile = Depends(asset_managers),
    service: HallService = Depends(deps.get_hall_service),
):
    return service.update_component_status(actor, component_id, payload).unwrap()
