from hostel_complaints.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from hostel_complaints.schemas.common.response import APIResponse, PaginationMeta

__all__ = [
    "APIResponse",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "BaseUpdateSchema",
    "PaginationMeta",
]
