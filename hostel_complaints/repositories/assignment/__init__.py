from hostel_complaints.repositories.assignment.assignment_config_repository import (
    AssignmentConfigRepository,
)

__all__ = ["AssignmentConfigRepository"]
