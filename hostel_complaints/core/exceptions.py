"""
Custom Exceptions for the Hostel Complaints Service

This module defines the domain exception hierarchy raised by the validation,
transition and persistence layers. Each exception carries an error code and
the HTTP status the API surfaces it with.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    FORBIDDEN = "FORBIDDEN"

    # State and concurrency errors
    CONFLICT = "CONFLICT"
    COMPLAINT_LOCKED = "COMPLAINT_LOCKED"
    COMPLAINT_CLOSED = "COMPLAINT_CLOSED"
    OPTIMISTIC_LOCK = "OPTIMISTIC_LOCK"

    # Business logic errors
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


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


# ========================================
# Validation and lookup
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)

    @property
    def field_errors(self) -> Dict[str, List[str]]:
        return self.details.get("field_errors", {})


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


class ComplaintNotFoundError(ResourceNotFoundError):
    def __init__(self, complaint_id: Optional[str] = None):
        super().__init__("Complaint", complaint_id)


class StaffMemberNotFoundError(ResourceNotFoundError):
    def __init__(self, staff_id: Optional[str] = None):
        super().__init__("Staff member", staff_id)


# ========================================
# Authorization
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when credentials are missing or invalid"""

    def __init__(self, message: str = "Invalid or expired authentication token"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, None, 401)


class ForbiddenError(BaseAppException):
    """Exception raised when the caller lacks the role an action requires"""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        required_roles: Optional[List[str]] = None,
    ):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(message, ErrorCode.FORBIDDEN, details, 403)


# ========================================
# State and concurrency
# ========================================

class ConflictError(BaseAppException):
    """Exception raised when a precondition on the current state does not hold"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details, 409)


class ComplaintLockedError(ConflictError):
    """Raised for any status or assignment mutation on a locked complaint"""

    def __init__(self, complaint_id: Optional[str] = None):
        super().__init__(
            "Complaint is locked and cannot be updated",
            ErrorCode.COMPLAINT_LOCKED,
            {"complaint_id": complaint_id} if complaint_id else None,
        )


class ComplaintClosedError(ConflictError):
    """Raised when a Closed complaint is asked to change"""

    def __init__(self, message: str = "Complaint is Closed and can no longer be changed"):
        super().__init__(message, ErrorCode.COMPLAINT_CLOSED)


class OptimisticLockError(ConflictError):
    """Raised when the stored version moved since the caller read it"""

    def __init__(
        self,
        message: str = "Complaint was modified concurrently; reload and retry",
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        details = {}
        if expected is not None:
            details["expected_version"] = expected
        if actual is not None:
            details["actual_version"] = actual
        super().__init__(message, ErrorCode.OPTIMISTIC_LOCK, details)


class BusinessRuleViolationError(BaseAppException):
    """Exception raised when an operation would break a business invariant"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.BUSINESS_RULE_VIOLATION, details, 400)


# ========================================
# Persistence
# ========================================

class RepositoryError(BaseAppException):
    """Exception raised when a repository operation fails"""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, ErrorCode.DATABASE_ERROR, None, 500)


def create_validation_error(field_errors: Dict[str, List[str]]) -> ValidationError:
    """Build a ValidationError whose message joins every field's reasons"""
    reasons = [reason for field in field_errors for reason in field_errors[field]]
    return ValidationError("; ".join(reasons) or "Validation failed", field_errors=field_errors)
