"""
Enumerations shared by models and schemas.
"""

import enum


class UserRole(str, enum.Enum):
    """Roles a profile can hold"""
    TEACHER = "teacher"
    HOD = "hod"
    TECH_STAFF = "tech_staff"


class HallStatus(str, enum.Enum):
    """Seminar hall availability status"""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MAINTENANCE = "maintenance"
    BOOKED = "booked"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    AUTO_REJECTED = "auto_rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    AUTO_COMPLETED = "auto_completed"


class EquipmentType(str, enum.Enum):
    PROJECTOR = "projector"
    MICROPHONE = "microphone"
    SPEAKER = "speaker"
    CAMERA = "camera"
    LAPTOP = "laptop"
    OTHER = "other"


class EquipmentCondition(str, enum.Enum):
    ACTIVE = "active"
    FAULTY = "faulty"
    UNDER_MAINTENANCE = "under_maintenance"
    RETIRED = "retired"


class ComponentType(str, enum.Enum):
    SCREEN = "screen"
    SMARTBOARD = "smartboard"
    AC = "ac"
    LIGHTING = "lighting"
    OTHER = "other"


class ComponentStatus(str, enum.Enum):
    OPERATIONAL = "operational"
    FAULTY = "faulty"
    UNDER_MAINTENANCE = "under_maintenance"


class MaintenanceRequestType(str, enum.Enum):
    REPAIR = "repair"
    REPLACEMENT = "replacement"
    INSPECTION = "inspection"
    NEW_INSTALLATION = "new_installation"
    GENERAL_ISSUE = "general_issue"


class MaintenancePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MaintenanceRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class NotificationType(str, enum.Enum):
    BOOKING_PENDING = "booking_pending"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_AUTO_REJECTED = "booking_auto_rejected"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"
    MAINTENANCE_REQUEST_CREATED = "maintenance_request_created"
    MAINTENANCE_REQUEST_APPROVED = "maintenance_request_approved"
    MAINTENANCE_REQUEST_REJECTED = "maintenance_request_rejected"
