from hostel_complaints.models.complaint.complaint import Complaint
from hostel_complaints.models.complaint.complaint_status_history import ComplaintStatusHistory

__all__ = ["Complaint", "ComplaintStatusHistory"]
