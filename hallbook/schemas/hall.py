"""
Hall, equipment and component schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hallbook.models.enums import (
    ComponentStatus,
    ComponentType,
    EquipmentCondition,
    EquipmentType,
    HallStatus,
)
from hallbook.schemas.base import BaseResponseSchema, BaseSchema

__all__ = [
    "HallCreate",
    "HallUpdate",
    "HallStatusUpdate",
    "HallResponse",
    "HallDetail",
    "TechStaffAssignmentRequest",
    "EquipmentCreate",
    "EquipmentConditionUpdate",
    "EquipmentResponse",
    "ComponentCreate",
    "ComponentStatusUpdate",
    "ComponentResponse",
]


class HallCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=150)
    department_id: str = Field(..., description="Owning department")
    location: Optional[str] = Field(None, max_length=255)
    seating_capacity: int = Field(0, ge=0)
    description: Optional[str] = None


class HallUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    location: Optional[str] = Field(None, max_length=255)
    seating_capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


class HallStatusUpdate(BaseSchema):
    status: HallStatus


class HallResponse(BaseResponseSchema):
    name: str
    location: Optional[str] = None
    seating_capacity: int
    description: Optional[str] = None
    status: HallStatus
    department_id: str


class EquipmentResponse(BaseResponseSchema):
    hall_id: str
    name: str
    type: EquipmentType
    serial_number: Optional[str] = None
    condition: EquipmentCondition
    last_updated_at: Optional[datetime] = None


class ComponentResponse(BaseResponseSchema):
    hall_id: str
    name: str
    type: ComponentType
    status: ComponentStatus
    last_maintenance: Optional[datetime] = None


class HallDetail(HallResponse):
    """Hall with its assets and assigned tech staff ids."""

    equipment: List[EquipmentResponse] = Field(default_factory=list)
    components: List[ComponentResponse] = Field(default_factory=list)
    tech_staff_ids: List[str] = Field(default_factory=list)


class TechStaffAssignmentRequest(BaseSchema):
    tech_staff_id: str


class EquipmentCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=150)
    type: EquipmentType
    serial_number: Optional[str] = Field(None, max_length=100)
    condition: EquipmentCondition = EquipmentCondition.ACTIVE


class EquipmentConditionUpdate(BaseSchema):
    condition: EquipmentCondition
    notes: Optional[str] = None


class ComponentCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=150)
    type: ComponentType
    status: ComponentStatus = ComponentStatus.OPERATIONAL


class ComponentStatusUpdate(BaseSchema):
    status: ComponentStatus
    notes: Optional[str] = None
