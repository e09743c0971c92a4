from hostel_complaints.repositories.complaint.complaint_repository import (
    ComplaintRepository,
    ComplaintSearchCriteria,
    ResolutionRecord,
)

__all__ = ["ComplaintRepository", "ComplaintSearchCriteria", "ResolutionRecord"]
