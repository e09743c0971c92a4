"""
Pure validation rules for the staff directory.
"""

import re
from typing import Dict, List, Optional

from hostel_complaints.core.exceptions import BusinessRuleViolationError, create_validation_error
from hostel_complaints.models.base.enums import ComplaintCategory, StaffCategory

MIN_ACTIVE_PER_CATEGORY = 2
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")

_EXPERTISE_KEYS = frozenset(c.value for c in ComplaintCategory)


def validate_staff_fields(
    name: Optional[str],
    phone: Optional[str],
    category: Optional[str],
    category_expertise: Optional[Dict[str, float]] = None,
) -> None:
    """
    Validate the full field set of a staff member.

    Runs on every write so a stored record always satisfies every rule,
    whichever fields the request touched.

    Raises:
        ValidationError: With one entry per failing field
    """
    errors: Dict[str, List[str]] = {}

    name = (name or "").strip()
    if len(name) < NAME_MIN_LENGTH or len(name) > NAME_MAX_LENGTH:
        errors["name"] = [f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters"]

    if not phone or not PHONE_PATTERN.match(phone):
        errors["phone"] = ["Phone must be exactly 10 digits"]

    try:
        StaffCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in StaffCategory)
        errors["category"] = [f"Category must be one of: {allowed}"]

    for key, score in (category_expertise or {}).items():
        if key not in _EXPERTISE_KEYS:
            errors.setdefault("category_expertise", []).append(f"Unknown expertise category: {key}")
        elif score < 0 or score > 100:
            errors.setdefault("category_expertise", []).append(
                f"Expertise for {key} must be between 0 and 100"
            )

    if errors:
        raise create_validation_error(errors)


def ensure_can_deactivate(category: StaffCategory, active_count: int) -> None:
    """
    A category must keep at least two active members.

    Args:
        category: Category of the member being deactivated
        active_count: Active members in the category, including that member

    Raises:
        BusinessRuleViolationError: If deactivation would leave fewer than two
    """
    if active_count - 1 < MIN_ACTIVE_PER_CATEGORY:
        raise BusinessRuleViolationError(
            f"Cannot deactivate: {category.value} must keep at least "
            f"{MIN_ACTIVE_PER_CATEGORY} active staff members",
            details={"category": category.value, "active_members": active_count},
        )
