"""
Maintenance request model.

Tech staff raise requests against a hall (optionally a specific piece of
equipment or component); the department HOD approves or rejects them and
the requester closes approved requests.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hallbook.models.base import TimestampModel
from hallbook.models.department import Profile
from hallbook.models.enums import (
    MaintenancePriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
)
from hallbook.models.hall import Equipment, HallComponent, SeminarHall

ALLOWED_MAINTENANCE_TRANSITIONS: Dict[MaintenanceRequestStatus, FrozenSet[MaintenanceRequestStatus]] = {
    MaintenanceRequestStatus.PENDING: frozenset({
        MaintenanceRequestStatus.APPROVED,
        MaintenanceRequestStatus.REJECTED,
    }),
    MaintenanceRequestStatus.APPROVED: frozenset({
        MaintenanceRequestStatus.COMPLETED,
        MaintenanceRequestStatus.REJECTED,
    }),
}


class MaintenanceRequest(TimestampModel):
    """Maintenance request for a hall, its equipment or a component"""

    __tablename__ = "maintenance_requests"

    hall_id: Mapped[str] = mapped_column(
        ForeignKey("seminar_halls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tech_staff_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    hod_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    equipment_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("equipment.id", ondelete="SET NULL"), nullable=True
    )
    component_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("hall_components.id", ondelete="SET NULL"), nullable=True
    )

    request_type: Mapped[MaintenanceRequestType] = mapped_column(
        Enum(MaintenanceRequestType), nullable=False, default=MaintenanceRequestType.REPAIR
    )
    priority: Mapped[MaintenancePriority] = mapped_column(
        Enum(MaintenancePriority), nullable=False, default=MaintenancePriority.MEDIUM
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[MaintenanceRequestStatus] = mapped_column(
        Enum(MaintenanceRequestStatus), nullable=False,
        default=MaintenanceRequestStatus.PENDING, index=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    hall: Mapped[SeminarHall] = relationship(SeminarHall, back_populates="maintenance_requests")
    tech_staff: Mapped[Profile] = relationship(Profile, foreign_keys=[tech_staff_id])
    hod: Mapped[Optional[Profile]] = relationship(Profile, foreign_keys=[hod_id])
    equipment: Mapped[Optional[Equipment]] = relationship(Equipment)
    component: Mapped[Optional[HallComponent]] = relationship(HallComponent)
