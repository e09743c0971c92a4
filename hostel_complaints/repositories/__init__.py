from hostel_complaints.repositories.assignment import AssignmentConfigRepository
from hostel_complaints.repositories.base import BaseRepository
from hostel_complaints.repositories.complaint import ComplaintRepository, ComplaintSearchCriteria
from hostel_complaints.repositories.staff import StaffRepository

__all__ = [
    "AssignmentConfigRepository",
    "BaseRepository",
    "ComplaintRepository",
    "ComplaintSearchCriteria",
    "StaffRepository",
]
