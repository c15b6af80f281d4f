"""
SQLAlchemy models for the seminar hall booking service.

Importing this package registers every table on `Base.metadata`.
"""

from hallbook.models.base import Base, BaseModel, TimestampModel
from hallbook.models.booking import (
    ALLOWED_BOOKING_TRANSITIONS,
    TERMINAL_BOOKING_STATUSES,
    Booking,
    BookingLog,
    can_transition,
)
from hallbook.models.department import Department, Profile, UserRoleAssignment
from hallbook.models.enums import (
    BookingStatus,
    ComponentStatus,
    ComponentType,
    EquipmentCondition,
    EquipmentType,
    HallStatus,
    MaintenancePriority,
    MaintenanceRequestStatus,
    MaintenanceRequestType,
    NotificationType,
    UserRole,
)
from hallbook.models.hall import (
    ComponentMaintenanceLog,
    Equipment,
    EquipmentLog,
    HallComponent,
    HallTechStaff,
    SeminarHall,
)
from hallbook.models.maintenance import ALLOWED_MAINTENANCE_TRANSITIONS, MaintenanceRequest
from hallbook.models.notification import Notification

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "Department",
    "Profile",
    "UserRoleAssignment",
    "SeminarHall",
    "HallTechStaff",
    "Equipment",
    "EquipmentLog",
    "HallComponent",
    "ComponentMaintenanceLog",
    "Booking",
    "BookingLog",
    "MaintenanceRequest",
    "Notification",
    "ALLOWED_BOOKING_TRANSITIONS",
    "ALLOWED_MAINTENANCE_TRANSITIONS",
    "TERMINAL_BOOKING_STATUSES",
    "can_transition",
    "BookingStatus",
    "ComponentStatus",
    "ComponentType",
    "EquipmentCondition",
    "EquipmentType",
    "HallStatus",
    "MaintenancePriority",
    "MaintenanceRequestStatus",
    "MaintenanceRequestType",
    "NotificationType",
    "UserRole",
]
