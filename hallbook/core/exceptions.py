"""
Custom Exceptions for the Seminar Hall Booking Service

This module defines custom exception classes used throughout the application
for better error handling and debugging.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Business logic errors
    CONFLICT = "CONFLICT"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    HOD_ALREADY_ASSIGNED = "HOD_ALREADY_ASSIGNED"

    # Infrastructure errors
    DATABASE_ERROR = "DATABASE_ERROR"
    LOGGING_FAILURE = "LOGGING_FAILURE"
    SCHEDULER_RUN_FAILURE = "SCHEDULER_RUN_FAILURE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class ConfigurationError(BaseAppException):
    """Exception raised when required configuration is missing or invalid"""

    def __init__(self, message: str = "Invalid configuration", setting: Optional[str] = None):
        details = {"setting": setting} if setting else {}
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details, 500)


class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class ConflictError(BaseAppException):
    """Exception raised when an operation conflicts with the current state"""

    def __init__(
        self,
        message: str = "Operation conflicts with current state",
        error_code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details, 409)


class InvalidStateTransitionError(ConflictError):
    """Exception raised when a status change is not allowed from the current status"""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{target}'",
            ErrorCode.INVALID_STATE_TRANSITION,
            {"entity": entity, "current_status": current, "target_status": target},
        )


class AuthenticationError(BaseAppException):
    """Exception raised when the caller cannot be identified"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, {}, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the caller lacks the required role"""

    def __init__(self, message: str = "Insufficient permissions", required_roles: Optional[List[str]] = None):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(message, ErrorCode.INSUFFICIENT_PERMISSIONS, details, 403)


class RepositoryError(BaseAppException):
    """Exception raised when a database operation fails"""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, ErrorCode.DATABASE_ERROR, {}, 500)


class LoggingFailure(BaseAppException):
    """Exception raised when an audit log write could not be completed"""

    def __init__(self, collection: str, attempts: int, message: Optional[str] = None):
        super().__init__(
            message or f"Audit write to '{collection}' failed after {attempts} attempt(s)",
            ErrorCode.LOGGING_FAILURE,
            {"collection": collection, "attempts": attempts},
            500,
        )


class SchedulerRunFailure(BaseAppException):
    """Exception raised when a single run of a periodic job fails"""

    def __init__(self, job_name: str, cause: Exception):
        self.cause = cause
        super().__init__(
            f"Scheduled job '{job_name}' failed: {cause}",
            ErrorCode.SCHEDULER_RUN_FAILURE,
            {"job": job_name, "exception_type": type(cause).__name__},
            500,
        )


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ConfigurationError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConflictError",
    "InvalidStateTransitionError",
    "AuthenticationError",
    "AuthorizationError",
    "RepositoryError",
    "LoggingFailure",
    "SchedulerRunFailure",
]
