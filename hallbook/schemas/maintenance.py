"""
Maintenance request schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from hallbook.models.enums import (
    MaintenancePriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
)
from hallbook.schemas.base import BaseResponseSchema, BaseSchema


class MaintenanceCreate(BaseSchema):
    hall_id: str
    request_type: MaintenanceRequestType
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    equipment_id: Optional[str] = None
    component_id: Optional[str] = None


class MaintenanceRejectRequest(BaseSchema):
    reason: str = Field(..., min_length=1)


class MaintenanceCloseRequest(BaseSchema):
    final_status: Literal["completed", "stopped"]
    notes: Optional[str] = None


class MaintenanceResponse(BaseResponseSchema):
    hall_id: str
    tech_staff_id: str
    hod_id: Optional[str] = None
    equipment_id: Optional[str] = None
    component_id: Optional[str] = None
    request_type: MaintenanceRequestType
    priority: MaintenancePriority
    title: str
    description: Optional[str] = None
    status: MaintenanceRequestStatus
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
