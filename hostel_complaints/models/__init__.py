"""
ORM models. Importing this package registers every table on ``Base.metadata``.
"""

from hostel_complaints.models.assignment import AssignmentConfig
from hostel_complaints.models.base import Base, BaseModel
from hostel_complaints.models.complaint import Complaint, ComplaintStatusHistory
from hostel_complaints.models.staff import StaffMember

__all__ = [
    "AssignmentConfig",
    "Base",
    "BaseModel",
    "Complaint",
    "ComplaintStatusHistory",
    "StaffMember",
]
