"""
Maintenance request workflow.
"""

from hallbook.services.maintenance.maintenance_service import MaintenanceService

__all__ = ["MaintenanceService"]
