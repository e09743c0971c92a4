"""
Complaint lifecycle layer.

- **complaint_rules**: pure validation of submissions, notes and feedback
- **complaint_state_machine**: pure transitions from state plus event
- **complaint_service**: ``ComplaintService``, which applies transitions to
  stored complaints (import it from its module)
"""

from hostel_complaints.services.complaint.complaint_rules import (
    ComplaintSubmission,
    staff_categories_for,
    validate_feedback_comment,
    validate_note,
    validate_staff_for_complaint,
    validate_submission,
)
from hostel_complaints.services.complaint.complaint_state_machine import (
    ComplaintState,
    Transition,
    assign,
    change_status,
    ensure_assignable,
    ensure_deletable,
    ensure_mutable,
    submit_feedback,
)

__all__ = [
    "ComplaintState",
    "ComplaintSubmission",
    "Transition",
    "assign",
    "change_status",
    "ensure_assignable",
    "ensure_deletable",
    "ensure_mutable",
    "staff_categories_for",
    "submit_feedback",
    "validate_feedback_comment",
    "validate_note",
    "validate_staff_for_complaint",
    "validate_submission",
]
