"""
Translate ServiceResult objects into HTTP responses.
"""

from typing import Any, Dict

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from hostel_complaints.core.exceptions import ErrorCode
from hostel_complaints.core.middleware import error_envelope
from hostel_complaints.services.base.service_result import ServiceResult

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.COMPLAINT_LOCKED: status.HTTP_409_CONFLICT,
    ErrorCode.COMPLAINT_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.OPTIMISTIC_LOCK: status.HTTP_409_CONFLICT,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.BUSINESS_RULE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(code: ErrorCode) -> int:
    return ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def to_response(result: ServiceResult[Any], success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """
    Render a service result in the response envelope.

    Successful results keep their message, data and metadata. Failures use
    the status mapped from their error code; internal failures carry only
    the generic message the service produced.
    """
    if result.is_success:
        return JSONResponse(
            status_code=success_status,
            content=jsonable_encoder({
                "success": True,
                "message": result.message,
                "data": result.data,
                "metadata": result.metadata or {},
            }),
        )

    error = result.error
    return JSONResponse(
        status_code=status_for(error.code),
        content=jsonable_encoder(error_envelope(error.message, error.code.value, error.details)),
    )
