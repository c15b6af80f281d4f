"""
Department head assignment.
"""

from hallbook.services.department.hod_guard_service import HodCheck, HodGuardService

__all__ = ["HodCheck", "HodGuardService"]
