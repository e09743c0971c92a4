"""
Base service class providing common functionality for all services.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from hostel_complaints.core.exceptions import BaseAppException, ErrorCode
from hostel_complaints.core.logging import get_logger
from hostel_complaints.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

TRepo = TypeVar("TRepo")


class BaseService(ABC, Generic[TRepo]):
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management with post-commit callbacks
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
        self._post_commit: List[Callable[[], None]] = []

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Domain exceptions keep their code and message. Anything else is
        logged in full and reported generically so internals never reach
        the caller.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, name, etc.)

        Returns:
            ServiceResult with failure status and error details
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }

        if isinstance(exception, BaseAppException) and exception.status_code < 500:
            self._logger.warning(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.failure(
                ServiceError(
                    code=exception.error_code,
                    message=exception.message,
                    details=exception.details or None,
                    severity=ErrorSeverity.WARNING,
                )
            )

        if isinstance(exception, (StaleDataError, IntegrityError)):
            self._logger.warning(f"Concurrent modification during {operation}: {exception}", extra=context)
            code = ErrorCode.OPTIMISTIC_LOCK if isinstance(exception, StaleDataError) else ErrorCode.CONFLICT
            return ServiceResult.failure(
                ServiceError(
                    code=code,
                    message="The record was modified concurrently; reload and retry",
                    severity=ErrorSeverity.WARNING,
                )
            )

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=f"Failed to {operation}",
                severity=ErrorSeverity.CRITICAL,
                details={"entity_ref": context["entity_ref"]},
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions with automatic rollback.

        Callbacks registered with ``after_commit`` inside the block run once
        the commit succeeded and are discarded on rollback.

        Example:
            with self.transaction():
                self.repository.create(entity)
                self.after_commit(lambda: notify(entity))
        """
        self._post_commit = []
        try:
            yield self.db
            self._commit()
        except Exception as e:
            self._post_commit = []
            self._rollback()
            if isinstance(e, SQLAlchemyError):
                self._logger.error(f"Transaction failed: {e}", exc_info=True)
            raise

        callbacks, self._post_commit = self._post_commit, []
        for callback in callbacks:
            callback()

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the enclosing transaction commits."""
        self._post_commit.append(callback)

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.warning(f"Commit failed: {e}")
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log service operation with standardized format.

        Args:
            operation: Description of the operation
            entity_ref: Reference to the entity involved
            extra: Additional context to log
        """
        context = {"entity_ref": str(entity_ref) if entity_ref else None}
        if extra:
            context.update(extra)

        self._logger.info(f"Operation: {operation}", extra=context)
