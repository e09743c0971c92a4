from hostel_complaints.models.assignment.assignment_config import AssignmentConfig

__all__ = ["AssignmentConfig"]
