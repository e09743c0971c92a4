"""
Pure validation rules for complaints.

Functions here take candidate values and either return the normalised
value or raise a domain exception. They never touch the database.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from hostel_complaints.core.exceptions import create_validation_error
from hostel_complaints.models.base.enums import (
    ComplaintCategory,
    MaintenanceSubCategory,
    StaffCategory,
)

DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000
FEEDBACK_COMMENT_MAX_LENGTH = 500
NOTE_MAX_LENGTH = 500

# Categories whose complaints must carry a sub-category
CATEGORIES_REQUIRING_SUB_CATEGORY = frozenset({ComplaintCategory.MAINTENANCE})


@dataclass(frozen=True)
class ComplaintSubmission:
    """A validated, normalised complaint submission."""

    category: ComplaintCategory
    sub_category: Optional[MaintenanceSubCategory]
    description: str


def requires_sub_category(category: ComplaintCategory) -> bool:
    return category in CATEGORIES_REQUIRING_SUB_CATEGORY


def validate_submission(
    category: Optional[str],
    sub_category: Optional[str],
    description: Optional[str],
) -> ComplaintSubmission:
    """
    Validate a complaint submission.

    Args:
        category: Raw category value
        sub_category: Raw sub-category value, or None
        description: Raw description text

    Returns:
        The normalised submission

    Raises:
        ValidationError: With one entry per failing field
    """
    errors: Dict[str, List[str]] = {}

    parsed_category: Optional[ComplaintCategory] = None
    if not category:
        errors.setdefault("category", []).append("Category is required")
    else:
        try:
            parsed_category = ComplaintCategory(category)
        except ValueError:
            allowed = ", ".join(c.value for c in ComplaintCategory)
            errors.setdefault("category", []).append(f"Category must be one of: {allowed}")

    sub_category = sub_category.strip() if sub_category else None
    parsed_sub_category: Optional[MaintenanceSubCategory] = None
    if parsed_category is not None:
        if requires_sub_category(parsed_category):
            if not sub_category:
                errors.setdefault("sub_category", []).append(
                    f"Sub-category is required for {parsed_category.value} complaints"
                )
            else:
                try:
                    parsed_sub_category = MaintenanceSubCategory(sub_category)
                except ValueError:
                    allowed = ", ".join(s.value for s in MaintenanceSubCategory)
                    errors.setdefault("sub_category", []).append(
                        f"Sub-category must be one of: {allowed}"
                    )
        elif sub_category:
            errors.setdefault("sub_category", []).append(
                f"Sub-category is not allowed for {parsed_category.value} complaints"
            )

    text = (description or "").strip()
    if not text:
        errors.setdefault("description", []).append("Description is required")
    elif len(text) < DESCRIPTION_MIN_LENGTH:
        errors.setdefault("description", []).append(
            f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
        )
    elif len(text) > DESCRIPTION_MAX_LENGTH:
        errors.setdefault("description", []).append(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
        )

    if errors:
        raise create_validation_error(errors)

    return ComplaintSubmission(
        category=parsed_category,
        sub_category=parsed_sub_category,
        description=text,
    )


def validate_feedback_comment(comment: Optional[str]) -> Optional[str]:
    """Trim a feedback comment; empty becomes None."""
    if comment is None:
        return None
    comment = comment.strip()
    if not comment:
        return None
    if len(comment) > FEEDBACK_COMMENT_MAX_LENGTH:
        raise create_validation_error(
            {"comment": [f"Comment must be at most {FEEDBACK_COMMENT_MAX_LENGTH} characters"]}
        )
    return comment


def validate_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    if len(note) > NOTE_MAX_LENGTH:
        raise create_validation_error({"note": [f"Note must be at most {NOTE_MAX_LENGTH} characters"]})
    return note or None


def staff_categories_for(
    category: ComplaintCategory,
    sub_category: Optional[MaintenanceSubCategory],
) -> Tuple[StaffCategory, ...]:
    """
    Staff departments able to service a complaint, most specific first.

    A Maintenance complaint is serviced by its sub-category department or,
    failing that, by general Maintenance staff.
    """
    if sub_category is not None:
        return (StaffCategory(sub_category.value), StaffCategory(category.value))
    return (StaffCategory(category.value),)


def validate_staff_for_complaint(
    staff_category: StaffCategory,
    staff_is_active: bool,
    category: ComplaintCategory,
    sub_category: Optional[MaintenanceSubCategory],
) -> None:
    """
    Check a manually chosen staff member may take a complaint.

    Raises:
        ValidationError: If the member is inactive or in another department
    """
    if not staff_is_active:
        raise create_validation_error({"staff_id": ["Staff member is not active"]})

    allowed = staff_categories_for(category, sub_category)
    if staff_category not in allowed:
        names = " or ".join(c.value for c in allowed)
        raise create_validation_error(
            {"staff_id": [f"Staff member category must be {names} for this complaint"]}
        )
