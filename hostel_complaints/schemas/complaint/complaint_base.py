"""
Complaint request schemas.

Request bodies only shape and bound the input; category pairing and
description length are enforced by the complaint rules layer so that the
multipart create endpoint and direct service callers share one authority.
"""

from typing import Optional

from pydantic import Field, field_validator

from hostel_complaints.models.base.enums import ComplaintStatus
from hostel_complaints.schemas.common.base import BaseCreateSchema, BaseUpdateSchema

__all__ = [
    "ComplaintCreate",
    "ComplaintStatusUpdate",
    "ComplaintFeedbackCreate",
]


class ComplaintCreate(BaseCreateSchema):
    """
    Complaint submission.

    Category and sub-category arrive as raw strings and are validated
    together with the description by the rules layer.
    """

    category: str = Field(..., description="Complaint category")
    sub_category: Optional[str] = Field(
        default=None,
        description="Maintenance sub-category; must be omitted for other categories",
    )
    description: str = Field(..., description="Complaint description (10-1000 characters)")

    @field_validator("sub_category")
    @classmethod
    def blank_sub_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ComplaintStatusUpdate(BaseUpdateSchema):
    """Administrative status transition."""

    status: ComplaintStatus = Field(..., description="Target status")
    note: Optional[str] = Field(
        default=None,
        max_length=500,
        description="History note; defaults to 'Status updated to <status>'",
    )
    staff_id: Optional[str] = Field(
        default=None,
        description="Staff member to assign; only honoured with In Progress",
    )
    expected_version: Optional[int] = Field(
        default=None,
        ge=1,
        description="Version the caller last read; rejected with 409 if it moved",
    )

    @field_validator("note", "staff_id")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ComplaintFeedbackCreate(BaseCreateSchema):
    """Student feedback on a resolved complaint."""

    is_satisfied: bool = Field(..., description="Whether the resolution was satisfactory")
    comment: Optional[str] = Field(default=None, max_length=500)

    @field_validator("comment")
    @classmethod
    def blank_comment_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
