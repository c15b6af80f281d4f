"""
Service result patterns for standardized response handling.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from hallbook.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BaseAppException,
    ConflictError,
    ErrorCode,
    ResourceNotFoundError,
    ValidationError,
)
from hallbook.utils.datetime_utils import utcnow


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ServiceError:
    """Represents a service operation error with context."""

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details,
            "field": self.field,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def to_exception(self) -> BaseAppException:
        """Map the error onto the exception the HTTP layer renders."""
        details = self.details or {}
        if self.code == ErrorCode.RESOURCE_NOT_FOUND:
            return ResourceNotFoundError(
                details.get("resource_type", "Resource"),
                details.get("resource_id"),
                message=self.message,
            )
        if self.code == ErrorCode.VALIDATION_ERROR:
            field_errors = {self.field: [self.message]} if self.field else None
            return ValidationError(self.message, field_errors)
        if self.code == ErrorCode.AUTHENTICATION_FAILED:
            return AuthenticationError(self.message)
        if self.code == ErrorCode.INSUFFICIENT_PERMISSIONS:
            return AuthorizationError(self.message, details.get("required_roles"))
        if self.code in (
            ErrorCode.CONFLICT,
            ErrorCode.BOOKING_CONFLICT,
            ErrorCode.INVALID_STATE_TRANSITION,
            ErrorCode.HOD_ALREADY_ASSIGNED,
        ):
            return ConflictError(self.message, self.code, details)
        return BaseAppException(self.message, self.code, details)


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Standardized service operation result with success/failure pattern.

    Attributes:
        is_success: Operation success indicator
        data: Result data (if successful)
        error: Error information (if failed)
        message: Human-readable status message
        metadata: Additional context information
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=metadata or {})

    @classmethod
    def failure(
        cls,
        error: ServiceError,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message, metadata=metadata or {})

    @classmethod
    def from_exception(cls, exception: Exception, operation: str) -> "ServiceResult[TData]":
        """Create a failed result from an exception."""
        if isinstance(exception, BaseAppException):
            return cls.failure(
                ServiceError(
                    code=exception.error_code,
                    message=exception.message,
                    details=exception.details,
                )
            )
        return cls.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=f"Failed to {operation}: {exception}",
                details={"exception_type": type(exception).__name__},
            )
        )

    @classmethod
    def validation_failure(
        cls,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(code=ErrorCode.VALIDATION_ERROR, message=message, field=field, details=details)
        )

    @classmethod
    def not_found(cls, resource_type: str, resource_id: Optional[str] = None) -> "ServiceResult[TData]":
        message = f"{resource_type} not found"
        if resource_id:
            message += f" (ID: {resource_id})"
        return cls.failure(
            ServiceError(
                code=ErrorCode.RESOURCE_NOT_FOUND,
                message=message,
                severity=ErrorSeverity.WARNING,
                details={"resource_type": resource_type, "resource_id": resource_id},
            )
        )

    @classmethod
    def forbidden(cls, message: str, required_roles: Optional[list] = None) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(
                code=ErrorCode.INSUFFICIENT_PERMISSIONS,
                message=message,
                details={"required_roles": required_roles} if required_roles else None,
            )
        )

    @classmethod
    def conflict(
        cls,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.CONFLICT,
    ) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(code=code, message=message, severity=ErrorSeverity.WARNING, details=details)
        )

    def unwrap(self) -> TData:
        """
        Unwrap the result data or raise the mapped application exception.

        Raises:
            BaseAppException: If the result is not successful
        """
        if not self.is_success:
            if self.error is None:
                raise BaseAppException(self.message or "Unknown error")
            raise self.error.to_exception()
        return self.data

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "is_success": self.is_success,
            "message": self.message,
            "metadata": self.metadata,
        }
        if self.is_success:
            result["data"] = self.data
        else:
            result["error"] = self.error.to_dict() if self.error else None
        return result

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        status = "Success" if self.is_success else "Failure"
        if self.message:
            return f"ServiceResult({status}: {self.message})"
        return f"ServiceResult({status})"


__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
