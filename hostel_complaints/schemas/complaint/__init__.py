from hostel_complaints.schemas.complaint.complaint_base import (
    ComplaintCreate,
    ComplaintFeedbackCreate,
    ComplaintStatusUpdate,
)
from hostel_complaints.schemas.complaint.complaint_filters import ComplaintFilterParams
from hostel_complaints.schemas.complaint.complaint_response import (
    ComplaintResponse,
    ComplaintTimeline,
    FeedbackResponse,
    StaffSummary,
    StatusHistoryEntry,
    TimelineEntry,
)

__all__ = [
    "ComplaintCreate",
    "ComplaintFeedbackCreate",
    "ComplaintFilterParams",
    "ComplaintResponse",
    "ComplaintStatusUpdate",
    "ComplaintTimeline",
    "FeedbackResponse",
    "StaffSummary",
    "StatusHistoryEntry",
    "TimelineEntry",
]
