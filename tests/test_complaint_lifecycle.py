from concurrent.futures import ThreadPoolExecutor

import pytest

from hostel_complaints.core.exceptions import ErrorCode
from hostel_complaints.models.base.enums import ComplaintStatus, StaffCategory
from hostel_complaints.schemas.complaint import (
    ComplaintCreate,
    ComplaintFeedbackCreate,
    ComplaintFilterParams,
    ComplaintStatusUpdate,
)
from hostel_complaints.services.notification import NotificationService

from doubles import ADMIN_RECIPIENT, FailingDispatcher, SlowDispatcher, image_bytes

PLUMBING_COMPLAINT = ComplaintCreate(
    category="Maintenance",
    sub_category="Plumbing",
    description="Water leaking from the bathroom tap",
)
PNG_BYTES = image_bytes("PNG")


@pytest.fixture
def plumber(make_staff):
    return make_staff(name="Ravi Kumar", expertise={"Maintenance": 80})


@pytest.fixture
def in_progress(complaint_service, plumber, student, warden):
    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data
    return complaint_service.update_status(
        complaint.id,
        ComplaintStatusUpdate(status=ComplaintStatus.IN_PROGRESS, staff_id=plumber.id),
        warden,
    ).data


@pytest.fixture
def resolved(complaint_service, in_progress, warden):
    return complaint_service.update_status(
        in_progress.id,
        ComplaintStatusUpdate(status=ComplaintStatus.RESOLVED, note="Replaced the washer"),
        warden,
    ).data


def test_new_complaint_starts_received(complaint_service, student, dispatcher):
    result = complaint_service.create(PLUMBING_COMPLAINT, student)

    complaint = result.data
    assert complaint.status == ComplaintStatus.RECEIVED
    assert complaint.student_id == student.id
    assert complaint.version == 1
    assert [(e.position, e.status) for e in complaint.status_history] == [(0, ComplaintStatus.RECEIVED)]
    assert dispatcher.created[0][0] == ADMIN_RECIPIENT
    assert dispatcher.created[0][2] == student.name


def test_invalid_submission_is_rejected(complaint_service, student):
    result = complaint_service.create(
        ComplaintCreate(category="Maintenance", description="Water leaking from the tap"),
        student,
    )

    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert "sub_category" in result.error.details["field_errors"]


def test_manual_assignment_counts_workload(db, in_progress, plumber):
    assert in_progress.status == ComplaintStatus.IN_PROGRESS
    assert in_progress.assigned_staff.id == plumber.id
    db.refresh(plumber)
    assert plumber.current_workload == 1


def test_manual_assignment_checks_department(complaint_service, make_staff, student, warden):
    cook = make_staff(name="Only Cook", category=StaffCategory.CANTEEN)
    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data

    result = complaint_service.update_status(
        complaint.id,
        ComplaintStatusUpdate(status=ComplaintStatus.IN_PROGRESS, staff_id=cook.id),
        warden,
    )

    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_resolution_credits_staff(db, resolved, plumber):
    assert resolved.status == ComplaintStatus.RESOLVED
    assert resolved.assigned_staff_id is None
    assert resolved.resolved_by_staff_id == plumber.id
    assert resolved.resolved_at is not None
    assert resolved.status_history[-1].note == "Replaced the washer"
    db.refresh(plumber)
    assert plumber.current_workload == 0
    assert plumber.efficiency_score != 50.0


def test_scenario_c_unsatisfied_feedback_reopens(complaint_service, resolved, student, dispatcher):
    result = complaint_service.submit_feedback(
        resolved.id,
        ComplaintFeedbackCreate(is_satisfied=False, comment="still broken"),
        student,
    )

    complaint = result.data
    assert result.is_success
    assert complaint.status == ComplaintStatus.PENDING
    assert complaint.is_reopened
    assert complaint.reopen_count == 1
    assert complaint.resolved_by_staff_id is None
    assert complaint.feedback.is_satisfied is False
    assert "still broken" in complaint.status_history[-1].note
    assert any(change[0] == ADMIN_RECIPIENT for change in dispatcher.status_changes)


def test_scenario_d_satisfied_feedback_locks(complaint_service, resolved, plumber, student, warden, dispatcher):
    locked = complaint_service.submit_feedback(
        resolved.id, ComplaintFeedbackCreate(is_satisfied=True), student
    ).data
    assert locked.is_locked
    assert len(locked.status_history) == len(resolved.status_history) + 1
    assert locked.status_history[-1].status == ComplaintStatus.RESOLVED
    assert locked.status_history[-1].note == "Complaint resolved and locked after positive feedback"
    assert locked.resolved_by_staff_id == plumber.id
    assert any(
        recipient == ADMIN_RECIPIENT and event.complaint_id == locked.id and status == "Resolved"
        for recipient, event, status, _ in dispatcher.status_changes
    )

    result = complaint_service.update_status(
        resolved.id, ComplaintStatusUpdate(status=ComplaintStatus.PENDING), warden
    )

    assert result.error.code == ErrorCode.COMPLAINT_LOCKED
    detail = complaint_service.get_detail(resolved.id).data
    assert detail.status == ComplaintStatus.RESOLVED
    assert detail.version == locked.version


def test_feedback_on_open_complaint_conflicts(complaint_service, in_progress, student):
    result = complaint_service.submit_feedback(
        in_progress.id, ComplaintFeedbackCreate(is_satisfied=True), student
    )

    assert result.error.code == ErrorCode.CONFLICT


def test_feedback_from_another_student_is_hidden(complaint_service, resolved, other_student):
    result = complaint_service.submit_feedback(
        resolved.id, ComplaintFeedbackCreate(is_satisfied=True), other_student
    )

    assert result.error.code == ErrorCode.RESOURCE_NOT_FOUND


def test_closing_requires_super_admin(complaint_service, resolved, warden, super_admin):
    denied = complaint_service.update_status(
        resolved.id, ComplaintStatusUpdate(status=ComplaintStatus.CLOSED), warden
    )
    assert denied.error.code == ErrorCode.FORBIDDEN

    closed = complaint_service.update_status(
        resolved.id, ComplaintStatusUpdate(status=ComplaintStatus.CLOSED), super_admin
    )
    assert closed.data.status == ComplaintStatus.CLOSED

    again = complaint_service.update_status(
        resolved.id, ComplaintStatusUpdate(status=ComplaintStatus.CLOSED), super_admin
    )
    assert again.is_success
    assert again.data.version == closed.data.version

    reopened = complaint_service.update_status(
        resolved.id, ComplaintStatusUpdate(status=ComplaintStatus.PENDING), super_admin
    )
    assert reopened.error.code == ErrorCode.COMPLAINT_CLOSED


def test_stale_version_is_rejected(complaint_service, in_progress, warden):
    result = complaint_service.update_status(
        in_progress.id,
        ComplaintStatusUpdate(status=ComplaintStatus.RESOLVED, expected_version=in_progress.version - 1),
        warden,
    )

    assert result.error.code == ErrorCode.OPTIMISTIC_LOCK


def test_delete_only_while_received(complaint_service, in_progress, student):
    assert complaint_service.delete(in_progress.id).error.code == ErrorCode.CONFLICT

    fresh = complaint_service.create(PLUMBING_COMPLAINT, student).data
    assert complaint_service.delete(fresh.id).is_success
    assert complaint_service.get_detail(fresh.id).error.code == ErrorCode.RESOURCE_NOT_FOUND


def test_timeline_resolves_staff(complaint_service, resolved, plumber, student):
    timeline = complaint_service.get_timeline(resolved.id, viewer=student).data

    assert [entry.status for entry in timeline.entries] == [
        ComplaintStatus.RECEIVED,
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.RESOLVED,
    ]
    assert timeline.entries[1].staff.name == plumber.name


def test_students_only_see_their_own(complaint_service, resolved, student, other_student):
    assert complaint_service.get_detail(resolved.id, viewer=student).is_success
    assert complaint_service.get_detail(resolved.id, viewer=other_student).error.code == ErrorCode.RESOURCE_NOT_FOUND
    assert len(complaint_service.list_own(student).data) == 1
    assert complaint_service.list_own(other_student).data == []


def test_listing_filters_and_counts(complaint_service, resolved, student):
    complaint_service.create(
        ComplaintCreate(category="Internet", description="Wifi drops every evening"),
        student,
    )

    active = complaint_service.list_all(ComplaintFilterParams(status="Active"))
    assert [c.category.value for c in active.data] == ["Internet"]
    assert active.metadata["counts"] == {"active": 1, "resolved": 1, "locked": 0, "closed": 0, "total": 2}

    found = complaint_service.list_all(ComplaintFilterParams(search="wifi"))
    assert found.metadata["pagination"]["total"] == 1

    paged = complaint_service.list_all(ComplaintFilterParams(limit=1, page=2))
    assert len(paged.data) == 1
    assert paged.metadata["pagination"]["total_pages"] == 2


def test_image_is_stored_and_released_on_lock(complaint_service, plumber, student, warden, image_store):
    complaint = complaint_service.create(
        PLUMBING_COMPLAINT, student, image_content=PNG_BYTES, image_filename="leak.PNG"
    ).data
    stored = image_store.base_dir / complaint.image_url.rsplit("/", 1)[-1]
    assert complaint.image_url.endswith(".png")
    assert stored.exists()

    complaint_service.update_status(
        complaint.id, ComplaintStatusUpdate(status=ComplaintStatus.IN_PROGRESS, staff_id=plumber.id), warden
    )
    complaint_service.update_status(complaint.id, ComplaintStatusUpdate(status=ComplaintStatus.RESOLVED), warden)
    complaint_service.submit_feedback(complaint.id, ComplaintFeedbackCreate(is_satisfied=True), student)

    assert not stored.exists()
    assert complaint_service.get_detail(complaint.id).data.image_url is None


def test_unsupported_image_is_rejected(complaint_service, student):
    result = complaint_service.create(
        PLUMBING_COMPLAINT, student, image_content=b"MZ\x90\x00", image_filename="setup.exe"
    )

    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_image_store_failure_is_a_warning(complaint_service, student, monkeypatch):
    def broken_save(content, filename):
        raise OSError("disk full")

    monkeypatch.setattr(complaint_service.image_store, "save", broken_save)

    result = complaint_service.create(PLUMBING_COMPLAINT, student, image_content=PNG_BYTES, image_filename="a.png")

    assert result.is_success
    assert result.data.image_url is None
    assert result.warnings


def test_notification_failure_does_not_fail_the_operation(complaint_service, student):
    with ThreadPoolExecutor(max_workers=1) as pool:
        complaint_service.notifier = NotificationService(
            FailingDispatcher(), executor=pool, timeout=1.0, admin_recipients=[ADMIN_RECIPIENT]
        )
        result = complaint_service.create(PLUMBING_COMPLAINT, student)

    assert result.is_success


def test_slow_notification_is_abandoned_after_timeout(complaint_service, student):
    slow = SlowDispatcher(delay=0.5)
    with ThreadPoolExecutor(max_workers=1) as pool:
        complaint_service.notifier = NotificationService(
            slow, executor=pool, timeout=0.05, admin_recipients=[ADMIN_RECIPIENT]
        )
        result = complaint_service.create(PLUMBING_COMPLAINT, student)
        assert slow.created == []

    assert result.is_success
