"""
Hall administration.
"""

from hallbook.services.hall.hall_service import HallService

__all__ = ["HallService"]
