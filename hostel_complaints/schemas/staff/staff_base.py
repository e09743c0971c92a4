"""
Staff member schemas.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import Field, field_validator

from hostel_complaints.models.base.enums import ComplaintCategory, StaffCategory
from hostel_complaints.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)

__all__ = ["StaffCreate", "StaffUpdate", "StaffResponse", "EfficiencyResponse"]

EXPERTISE_CATEGORIES = frozenset(c.value for c in ComplaintCategory)


def validate_expertise_map(v: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
    """Expertise keys must be complaint categories and scores 0-100."""
    if v is None:
        return v
    for category, score in v.items():
        if category not in EXPERTISE_CATEGORIES:
            raise ValueError(f"Unknown expertise category: {category}")
        if score < 0 or score > 100:
            raise ValueError(f"Expertise for {category} must be between 0 and 100")
    return v


class StaffCreate(BaseCreateSchema):
    """New staff member."""

    name: str = Field(..., min_length=2, max_length=50)
    phone: str = Field(..., pattern=r"^[0-9]{10}$", description="Ten digit phone number")
    category: StaffCategory
    category_expertise: Dict[str, float] = Field(
        default_factory=dict,
        description="Complaint category to 0-100 proficiency",
    )
    efficiency_score: float = Field(default=50.0, ge=0, le=100)

    @field_validator("category_expertise")
    @classmethod
    def validate_expertise(cls, v: Dict[str, float]) -> Dict[str, float]:
        return validate_expertise_map(v)


class StaffUpdate(BaseUpdateSchema):
    """Partial update of an active staff member."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=r"^[0-9]{10}$")
    category: Optional[StaffCategory] = None
    category_expertise: Optional[Dict[str, float]] = None

    @field_validator("category_expertise")
    @classmethod
    def validate_expertise(cls, v: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        return validate_expertise_map(v)


class StaffResponse(BaseResponseSchema):
    name: str
    phone: str
    category: StaffCategory
    category_expertise: Dict[str, float] = Field(default_factory=dict)
    efficiency_score: float
    current_workload: int
    last_active: datetime
    is_active: bool


class EfficiencyResponse(BaseSchema):
    """Result of an efficiency recalculation."""

    staff_id: str
    name: str
    previous_score: float
    efficiency_score: float
    current_workload: int
    resolutions_counted: int
