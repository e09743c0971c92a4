from hostel_complaints.services.staff.efficiency import compute_efficiency_score, score_from_resolutions
from hostel_complaints.services.staff.staff_rules import (
    MIN_ACTIVE_PER_CATEGORY,
    ensure_can_deactivate,
    validate_staff_fields,
)
from hostel_complaints.services.staff.staff_service import StaffService

__all__ = [
    "MIN_ACTIVE_PER_CATEGORY",
    "StaffService",
    "compute_efficiency_score",
    "ensure_can_deactivate",
    "score_from_resolutions",
    "validate_staff_fields",
]
