"""
Response envelope and pagination schemas shared by all endpoints.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Envelope wrapping every JSON response."""

    success: bool = Field(..., description="Whether the operation succeeded")
    message: Optional[str] = Field(default=None, description="Human readable outcome")
    data: Optional[T] = Field(default=None, description="Operation payload")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional context")


class PaginationMeta(BaseModel):
    """Pagination facts returned with list responses."""

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)
