"""
Query parameters for the administrative complaint listing.
"""

from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from hostel_complaints.models.base.enums import (
    ComplaintCategory,
    ComplaintStatus,
    MaintenanceSubCategory,
)
from hostel_complaints.schemas.common.base import BaseSchema

__all__ = ["ComplaintFilterParams", "STATUS_FILTER_CHOICES"]

STATUS_FILTER_CHOICES = ("All", "Active", "Locked") + tuple(s.value for s in ComplaintStatus)


class ComplaintFilterParams(BaseSchema):
    """Filters, search and pagination for listing complaints."""

    status: str = Field(default="All", description="All, Active, Locked or an exact status")
    category: Optional[ComplaintCategory] = None
    sub_category: Optional[MaintenanceSubCategory] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    search: Optional[str] = Field(default=None, max_length=100)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in STATUS_FILTER_CHOICES:
            raise ValueError(f"status must be one of: {', '.join(STATUS_FILTER_CHOICES)}")
        return v

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self
