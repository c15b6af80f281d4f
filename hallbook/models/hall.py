"""
Seminar hall models: halls, their equipment and fixed components,
tech staff assignments, and the condition/maintenance logs of each asset.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hallbook.models.base import TimestampModel
from hallbook.models.department import Department, Profile
from hallbook.models.enums import (
    ComponentStatus,
    ComponentType,
    EquipmentCondition,
    EquipmentType,
    HallStatus,
)

if TYPE_CHECKING:
    from hallbook.models.booking import Booking
    from hallbook.models.maintenance import MaintenanceRequest


class SeminarHall(TimestampModel):
    """
    Bookable seminar hall owned by a department.

    Attributes:
        name: Unique hall name, used by the chatbot for lookups
        location: Building / floor description
        seating_capacity: Number of seats
        status: Current availability status
        department_id: Owning department
    """

    __tablename__ = "seminar_halls"

    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False, index=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    seating_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[HallStatus] = mapped_column(
        Enum(HallStatus), nullable=False, default=HallStatus.AVAILABLE, index=True
    )
    department_id: Mapped[str] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    department: Mapped[Department] = relationship(Department, back_populates="halls")
    equipment: Mapped[List["Equipment"]] = relationship(
        "Equipment", back_populates="hall", cascade="all, delete-orphan"
    )
    components: Mapped[List["HallComponent"]] = relationship(
        "HallComponent", back_populates="hall", cascade="all, delete-orphan"
    )
    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="hall")
    tech_staff_assignments: Mapped[List["HallTechStaff"]] = relationship(
        "HallTechStaff", back_populates="hall", cascade="all, delete-orphan"
    )
    maintenance_requests: Mapped[List["MaintenanceRequest"]] = relationship(
        "MaintenanceRequest", back_populates="hall"
    )

    @property
    def tech_staff(self) -> List[Profile]:
        return [assignment.tech_staff for assignment in self.tech_staff_assignments]

    @property
    def tech_staff_ids(self) -> List[str]:
        return [assignment.tech_staff_id for assignment in self.tech_staff_assignments]


class HallTechStaff(TimestampModel):
    """Tech staff member assigned to look after a hall"""

    __tablename__ = "hall_tech_staff"
    __table_args__ = (UniqueConstraint("hall_id", "tech_staff_id", name="uq_hall_tech_staff"),)

    hall_id: Mapped[str] = mapped_column(
        ForeignKey("seminar_halls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tech_staff_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    hall: Mapped[SeminarHall] = relationship(SeminarHall, back_populates="tech_staff_assignments")
    tech_staff: Mapped[Profile] = relationship(Profile)


class Equipment(TimestampModel):
    """Movable equipment kept in a hall"""

    __tablename__ = "equipment"

    hall_id: Mapped[str] = mapped_column(
        ForeignKey("seminar_halls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    type: Mapped[EquipmentType] = mapped_column(Enum(EquipmentType), nullable=False, index=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, unique=True)
    condition: Mapped[EquipmentCondition] = mapped_column(
        Enum(EquipmentCondition), nullable=False, default=EquipmentCondition.ACTIVE
    )
    last_updated_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    last_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    hall: Mapped[SeminarHall] = relationship(SeminarHall, back_populates="equipment")
    logs: Mapped[List["EquipmentLog"]] = relationship(
        "EquipmentLog", back_populates="equipment", cascade="all, delete-orphan",
        order_by="EquipmentLog.created_at",
    )


class EquipmentLog(TimestampModel):
    """Condition change of a piece of equipment"""

    __tablename__ = "equipment_logs"

    equipment_id: Mapped[str] = mapped_column(
        ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    condition_before: Mapped[Optional[EquipmentCondition]] = mapped_column(
        Enum(EquipmentCondition), nullable=True
    )
    condition_after: Mapped[EquipmentCondition] = mapped_column(Enum(EquipmentCondition), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    equipment: Mapped[Equipment] = relationship(Equipment, back_populates="logs")


class HallComponent(TimestampModel):
    """Fixed installation of a hall (screen, AC, lighting...)"""

    __tablename__ = "hall_components"

    hall_id: Mapped[str] = mapped_column(
        ForeignKey("seminar_halls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    type: Mapped[ComponentType] = mapped_column(Enum(ComponentType), nullable=False, index=True)
    status: Mapped[ComponentStatus] = mapped_column(
        Enum(ComponentStatus), nullable=False, default=ComponentStatus.OPERATIONAL
    )
    last_maintenance: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    hall: Mapped[SeminarHall] = relationship(SeminarHall, back_populates="components")
    logs: Mapped[List["ComponentMaintenanceLog"]] = relationship(
        "ComponentMaintenanceLog", back_populates="component", cascade="all, delete-orphan",
        order_by="ComponentMaintenanceLog.created_at",
    )


class ComponentMaintenanceLog(TimestampModel):
    """Status change of a hall component"""

    __tablename__ = "component_maintenance_logs"

    component_id: Mapped[str] = mapped_column(
        ForeignKey("hall_components.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    status_before: Mapped[Optional[ComponentStatus]] = mapped_column(Enum(ComponentStatus), nullable=True)
    status_after: Mapped[ComponentStatus] = mapped_column(Enum(ComponentStatus), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    performed_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    component: Mapped[HallComponent] = relationship(HallComponent, back_populates="logs")
