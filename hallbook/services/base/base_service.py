"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hallbook.core.exceptions import BaseAppException, ErrorCode
from hallbook.core.logging import get_logger
from hallbook.repositories.base_repository import BaseRepository
from hallbook.services.base.service_result import ErrorSeverity, ServiceError, ServiceResult

TRepo = TypeVar("TRepo", bound=BaseRepository)


class BaseService(Generic[TRepo]):
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management
    """

    def __init__(self, repository: TRepo, db_session: Session):
        """
        Initialize base service.

        Args:
            repository: Repository instance for data access
            db_session: SQLAlchemy database session
        """
        self.repository: TRepo = repository
        self.db: Session = db_session
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert an exception to a ServiceResult failure.

        Application exceptions keep their code and message; anything else is
        logged with a traceback and reported as an internal error.
        """
        if isinstance(exception, BaseAppException):
            self._logger.warning(
                f"{operation} refused: {exception.message}",
                extra={"operation": operation, "entity_ref": str(entity_ref) if entity_ref else None},
            )
            return ServiceResult.from_exception(exception, operation)

        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)

        code = ErrorCode.DATABASE_ERROR if isinstance(exception, SQLAlchemyError) else ErrorCode.INTERNAL_ERROR
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation}",
                details={"error": str(exception), "entity_ref": context["entity_ref"]},
                severity=ErrorSeverity.CRITICAL,
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.repository.create(entity)
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception as e:
            self._rollback()
            self._logger.debug(f"Transaction rolled back: {e}")
            raise

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            # A failed rollback must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")
