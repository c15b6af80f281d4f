"""
Service layer base classes.
"""

from hallbook.services.base.base_service import BaseService
from hallbook.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

__all__ = ["BaseService", "ErrorSeverity", "ServiceError", "ServiceResult"]
