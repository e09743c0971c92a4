"""
Complaint response schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hostel_complaints.models.base.enums import (
    ComplaintCategory,
    ComplaintStatus,
    MaintenanceSubCategory,
    StaffCategory,
)
from hostel_complaints.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "StaffSummary",
    "StatusHistoryEntry",
    "FeedbackResponse",
    "ComplaintResponse",
    "TimelineEntry",
    "ComplaintTimeline",
]


class StaffSummary(BaseSchema):
    """Staff reference embedded in complaint views."""

    id: str
    name: str
    category: StaffCategory
    phone: str


class StatusHistoryEntry(BaseSchema):
    position: int
    status: ComplaintStatus
    timestamp: datetime
    note: Optional[str] = None
    staff_id: Optional[str] = None


class FeedbackResponse(BaseSchema):
    is_satisfied: bool
    comment: Optional[str] = None
    timestamp: Optional[datetime] = None


class ComplaintResponse(BaseResponseSchema):
    """Full complaint view."""

    student_id: str
    student_name: str
    category: ComplaintCategory
    sub_category: Optional[MaintenanceSubCategory] = None
    description: str
    image_url: Optional[str] = None

    status: ComplaintStatus
    assigned_staff_id: Optional[str] = None
    assigned_staff: Optional[StaffSummary] = None
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)

    feedback: Optional[FeedbackResponse] = None
    is_reopened: bool
    is_locked: bool
    reopen_count: int

    resolved_at: Optional[datetime] = None
    resolved_by_staff_id: Optional[str] = None
    auto_assigned: bool
    assignment_latency_ms: Optional[int] = None
    version: int


class TimelineEntry(BaseSchema):
    """History entry with the involved staff member resolved."""

    position: int
    status: ComplaintStatus
    timestamp: datetime
    note: Optional[str] = None
    staff: Optional[StaffSummary] = None


class ComplaintTimeline(BaseSchema):
    complaint_id: str
    status: ComplaintStatus
    is_locked: bool
    is_reopened: bool
    entries: List[TimelineEntry] = Field(default_factory=list)
