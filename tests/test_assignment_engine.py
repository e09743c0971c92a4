from hostel_complaints.core.exceptions import ErrorCode
from hostel_complaints.models.base.enums import ComplaintCategory, ComplaintStatus, StaffCategory
from hostel_complaints.schemas.assignment import AssignmentConfigUpdate, CategorySettingUpdate
from hostel_complaints.schemas.complaint import ComplaintCreate

PLUMBING_COMPLAINT = ComplaintCreate(
    category="Maintenance",
    sub_category="Plumbing",
    description="Water leaking from the bathroom tap",
)
CANTEEN_COMPLAINT = ComplaintCreate(category="Canteen", description="Dinner was served cold again")


def test_scenario_b_single_member_gets_the_complaint(
    db, config_provider, complaint_service, make_staff, student
):
    config_provider.quick_setup()
    cook = make_staff(name="Only Cook", category=StaffCategory.CANTEEN)

    result = complaint_service.create(CANTEEN_COMPLAINT, student)

    assert result.is_success
    assert result.data.status == ComplaintStatus.IN_PROGRESS
    assert result.data.assigned_staff_id == cook.id
    assert result.metadata["assignment"]["assigned"] is True
    db.refresh(cook)
    assert cook.current_workload == 1


def test_assignment_prefers_expertise_and_records_history(
    config_provider, complaint_service, make_staff, student
):
    config_provider.quick_setup()
    make_staff(name="Junior Plumber", expertise={"Maintenance": 20})
    senior = make_staff(name="Senior Plumber", expertise={"Maintenance": 95})

    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data

    assert complaint.assigned_staff_id == senior.id
    assert complaint.auto_assigned
    assert [entry.status for entry in complaint.status_history] == [
        ComplaintStatus.RECEIVED,
        ComplaintStatus.IN_PROGRESS,
    ]
    assert complaint.status_history[0].note is None
    assert complaint.status_history[1].note == "Complaint assigned to Senior Plumber - Plumbing department"
    assert complaint.status_history[1].staff_id == senior.id


def test_sub_category_without_staff_falls_back_to_parent(
    config_provider, complaint_service, make_staff, student
):
    config_provider.quick_setup()
    general = make_staff(name="General Fixer", category=StaffCategory.MAINTENANCE)

    result = complaint_service.create(PLUMBING_COMPLAINT, student)

    assert result.data.assigned_staff_id == general.id
    assert result.metadata["assignment"]["target_category"] == "Maintenance"


def test_scenario_e_cap_admits_exactly_one_claim(
    db, config_provider, complaint_service, make_staff, student
):
    config_provider.quick_setup()
    config_provider.save_config(AssignmentConfigUpdate(max_workload=1))
    plumber = make_staff(name="Single Plumber")

    first = complaint_service.create(PLUMBING_COMPLAINT, student)
    second = complaint_service.create(PLUMBING_COMPLAINT, student)

    assert first.data.assigned_staff_id == plumber.id
    assert second.data.assigned_staff_id is None
    assert second.data.status == ComplaintStatus.RECEIVED
    assert second.metadata["assignment"]["assigned"] is False
    db.refresh(plumber)
    assert plumber.current_workload == 1


def test_cap_sends_work_to_next_member(config_provider, complaint_service, make_staff, student):
    config_provider.quick_setup()
    config_provider.save_config(AssignmentConfigUpdate(max_workload=1))
    expert = make_staff(name="Expert Plumber", expertise={"Maintenance": 90})
    backup = make_staff(name="Backup Plumber", expertise={"Maintenance": 10})

    first = complaint_service.create(PLUMBING_COMPLAINT, student).data
    second = complaint_service.create(PLUMBING_COMPLAINT, student).data
    third = complaint_service.create(PLUMBING_COMPLAINT, student).data

    assert first.assigned_staff_id == expert.id
    assert second.assigned_staff_id == backup.id
    assert third.assigned_staff_id is None


def test_conditional_claim_is_exclusive(db, assignment_engine, make_staff):
    plumber = make_staff(name="Single Plumber")

    assert assignment_engine.repository.try_claim(plumber.id, 1)
    assert not assignment_engine.repository.try_claim(plumber.id, 1)
    db.commit()
    db.refresh(plumber)
    assert plumber.current_workload == 1


def test_scenario_a_disabled_assignment_leaves_complaint_received(
    complaint_service, make_staff, student
):
    make_staff(name="Idle Plumber")

    result = complaint_service.create(PLUMBING_COMPLAINT, student)

    assert result.data.status == ComplaintStatus.RECEIVED
    assert result.data.assigned_staff is None
    assert result.metadata["assignment"] is None


def test_category_without_auto_assign_is_skipped_on_create(
    config_provider, complaint_service, make_staff, student
):
    config_provider.quick_setup()
    config_provider.save_config(
        AssignmentConfigUpdate(
            category_settings={ComplaintCategory.CANTEEN: CategorySettingUpdate(auto_assign=False)}
        )
    )
    make_staff(name="Only Cook", category=StaffCategory.CANTEEN)

    result = complaint_service.create(CANTEEN_COMPLAINT, student)

    assert result.data.status == ComplaintStatus.RECEIVED


def test_manual_trigger_assigns_waiting_complaint(
    config_provider, complaint_service, assignment_engine, make_staff, student, dispatcher
):
    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data
    plumber = make_staff(name="Late Plumber")
    config_provider.quick_setup()

    result = assignment_engine.process_complaint(complaint.id)

    assert result.is_success
    assert result.data.assigned
    assert result.data.staff_id == plumber.id
    assert result.data.status == ComplaintStatus.IN_PROGRESS
    assert any(change[2] == "In Progress" for change in dispatcher.status_changes)


def test_manual_trigger_respects_disabled_category(complaint_service, assignment_engine, student):
    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data

    result = assignment_engine.process_complaint(complaint.id)

    assert result.error.code == ErrorCode.BUSINESS_RULE_VIOLATION


def test_manual_trigger_rejects_assigned_complaint(
    config_provider, complaint_service, assignment_engine, make_staff, student
):
    config_provider.quick_setup()
    make_staff(name="Only Plumber")
    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data

    result = assignment_engine.process_complaint(complaint.id)

    assert result.error.code == ErrorCode.CONFLICT


def test_assignment_without_status_update(config_provider, complaint_service, make_staff, student):
    config_provider.quick_setup()
    config_provider.save_config(AssignmentConfigUpdate(auto_status_update=False))
    plumber = make_staff(name="Only Plumber")

    complaint = complaint_service.create(PLUMBING_COMPLAINT, student).data

    assert complaint.status == ComplaintStatus.RECEIVED
    assert complaint.assigned_staff_id == plumber.id


def test_stats(config_provider, complaint_service, assignment_engine, make_staff, student):
    config_provider.quick_setup()
    make_staff(name="Only Cook", category=StaffCategory.CANTEEN, efficiency=40.0)
    complaint_service.create(CANTEEN_COMPLAINT, student)
    complaint_service.create(PLUMBING_COMPLAINT, student)

    stats = assignment_engine.get_stats().data

    assert stats.total_complaints == 2
    assert stats.auto_processed == 1
    assert stats.success_rate == 50.0
    assert stats.members_below_threshold == 1
    assert stats.enabled_globally
