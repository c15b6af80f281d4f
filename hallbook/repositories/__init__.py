"""
Repository layer.
"""

from hallbook.repositories.asset_repository import ComponentRepository, EquipmentRepository
from hallbook.repositories.base_repository import BaseRepository
from hallbook.repositories.booking_repository import BookingRepository
from hallbook.repositories.department_repository import DepartmentRepository, ProfileRepository
from hallbook.repositories.hall_repository import HallRepository
from hallbook.repositories.maintenance_repository import MaintenanceRepository
from hallbook.repositories.notification_repository import NotificationRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "ComponentRepository",
    "DepartmentRepository",
    "EquipmentRepository",
    "HallRepository",
    "MaintenanceRepository",
    "NotificationRepository",
    "ProfileRepository",
]
