import pytest

from hostel_complaints.core.exceptions import ValidationError
from hostel_complaints.models.base.enums import (
    ComplaintCategory,
    MaintenanceSubCategory,
    StaffCategory,
)
from hostel_complaints.services.complaint.complaint_rules import (
    staff_categories_for,
    validate_feedback_comment,
    validate_staff_for_complaint,
    validate_submission,
)


def test_maintenance_submission_keeps_sub_category():
    submission = validate_submission("Maintenance", "Plumbing", "  Water leaking from the tap  ")

    assert submission.category == ComplaintCategory.MAINTENANCE
    assert submission.sub_category == MaintenanceSubCategory.PLUMBING
    assert submission.description == "Water leaking from the tap"


def test_maintenance_requires_sub_category():
    with pytest.raises(ValidationError) as exc:
        validate_submission("Maintenance", None, "Water leaking from the tap")

    assert "sub_category" in exc.value.field_errors


def test_sub_category_rejected_outside_maintenance():
    with pytest.raises(ValidationError) as exc:
        validate_submission("Canteen", "Plumbing", "Food was served cold again")

    assert "sub_category" in exc.value.field_errors


def test_unknown_category_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_submission("Laundry", None, "Clothes came back torn")

    assert "category" in exc.value.field_errors


@pytest.mark.parametrize("description", ["too short", "", "x" * 1001])
def test_description_length_bounds(description):
    with pytest.raises(ValidationError) as exc:
        validate_submission("Internet", None, description)

    assert "description" in exc.value.field_errors


def test_description_of_exactly_ten_characters_is_accepted():
    assert validate_submission("Internet", None, "0123456789").description == "0123456789"


def test_every_failing_field_is_reported():
    with pytest.raises(ValidationError) as exc:
        validate_submission("Maintenance", "Gardening", "short")

    assert set(exc.value.field_errors) == {"sub_category", "description"}


def test_blank_feedback_comment_becomes_none():
    assert validate_feedback_comment("   ") is None
    assert validate_feedback_comment(" still broken ") == "still broken"


def test_maintenance_routes_to_sub_category_then_parent():
    assert staff_categories_for(ComplaintCategory.MAINTENANCE, MaintenanceSubCategory.PLUMBING) == (
        StaffCategory.PLUMBING,
        StaffCategory.MAINTENANCE,
    )
    assert staff_categories_for(ComplaintCategory.CANTEEN, None) == (StaffCategory.CANTEEN,)


def test_manual_staff_must_match_department():
    validate_staff_for_complaint(
        StaffCategory.MAINTENANCE, True, ComplaintCategory.MAINTENANCE, MaintenanceSubCategory.PLUMBING
    )

    with pytest.raises(ValidationError):
        validate_staff_for_complaint(
            StaffCategory.INTERNET, True, ComplaintCategory.MAINTENANCE, MaintenanceSubCategory.PLUMBING
        )


def test_manual_staff_must_be_active():
    with pytest.raises(ValidationError) as exc:
        validate_staff_for_complaint(StaffCategory.CANTEEN, False, ComplaintCategory.CANTEEN, None)

    assert "staff_id" in exc.value.field_errors
