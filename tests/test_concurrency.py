"""Interleaved sessions on one file-backed database."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from hostel_complaints.core.exceptions import ErrorCode
from hostel_complaints.db.base import Base, import_models
from hostel_complaints.db.session import configure_sqlite
from hostel_complaints.models.base.enums import ComplaintStatus, StaffCategory
from hostel_complaints.models.staff.staff_member import StaffMember
from hostel_complaints.repositories.complaint.complaint_repository import ComplaintRepository
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.schemas.assignment import AssignmentConfigUpdate
from hostel_complaints.schemas.complaint import ComplaintCreate, ComplaintStatusUpdate
from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider
from hostel_complaints.services.complaint.complaint_service import ComplaintService
from hostel_complaints.services.staff.staff_service import StaffService

PLUMBING_COMPLAINT = ComplaintCreate(
    category="Maintenance",
    sub_category="Plumbing",
    description="Water leaking from the bathroom tap",
)


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'complaints.db'}",
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    import_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def open_session(file_engine):
    sessions = []

    def _open(**options):
        session = sessionmaker(bind=file_engine, autoflush=False, **options)()
        sessions.append(session)
        return session

    yield _open
    for session in sessions:
        session.close()


def build_services(session, notifier, image_store):
    staff_repository = StaffRepository(session)
    complaint_repository = ComplaintRepository(session)
    provider = AssignmentConfigProvider.from_session(session)
    engine = AssignmentEngine(
        staff_repository,
        complaint_repository,
        provider,
        StaffService(staff_repository, complaint_repository, session),
        notifier,
        session,
    )
    complaints = ComplaintService(
        complaint_repository, staff_repository, provider, engine, notifier, image_store, session
    )
    return engine, complaints


def test_racing_claims_on_last_slot_admit_one(open_session, notifier, image_store, student):
    setup = open_session()
    _, setup_complaints = build_services(setup, notifier, image_store)
    provider = AssignmentConfigProvider.from_session(setup)
    provider.ensure_default()
    provider.save_config(AssignmentConfigUpdate(max_workload=1))
    plumber = StaffMember(name="Single Plumber", phone="9876543210", category=StaffCategory.PLUMBING)
    setup.add(plumber)
    setup.commit()
    plumber_id = plumber.id
    first_id = setup_complaints.create(PLUMBING_COMPLAINT, student).data.id
    second_id = setup_complaints.create(PLUMBING_COMPLAINT, student).data.id
    setup.close()

    session_a, session_b = open_session(), open_session()
    engine_a, _ = build_services(session_a, notifier, image_store)
    engine_b, _ = build_services(session_b, notifier, image_store)
    config = engine_a.config_provider.get_config()

    # Both rank the plumber while the slot is still free
    _, ranked_a = engine_a.select_candidates(engine_a.complaint_repository.get_by_id(first_id), config)
    session_a.commit()
    _, ranked_b = engine_b.select_candidates(engine_b.complaint_repository.get_by_id(second_id), config)
    session_b.commit()
    assert ranked_a[0].profile.staff_id == plumber_id
    assert ranked_b[0].profile.staff_id == plumber_id

    claimed_a = engine_a.repository.try_claim(plumber_id, config.max_workload)
    session_a.commit()
    claimed_b = engine_b.repository.try_claim(plumber_id, config.max_workload)
    session_b.commit()

    assert (claimed_a, claimed_b) == (True, False)
    check = open_session()
    assert check.get(StaffMember, plumber_id).current_workload == 1


def test_stale_complaint_write_is_rejected(open_session, notifier, image_store, student, warden):
    setup = open_session()
    AssignmentConfigProvider.from_session(setup).ensure_default()
    _, setup_complaints = build_services(setup, notifier, image_store)
    complaint_id = setup_complaints.create(PLUMBING_COMPLAINT, student).data.id
    setup.close()

    # Session B reads the complaint and keeps that copy after its read ends
    session_b = open_session(expire_on_commit=False)
    _, complaints_b = build_services(session_b, notifier, image_store)
    assert complaints_b.get_detail(complaint_id).data.version == 1
    session_b.commit()

    session_a = open_session()
    _, complaints_a = build_services(session_a, notifier, image_store)
    moved = complaints_a.update_status(
        complaint_id, ComplaintStatusUpdate(status=ComplaintStatus.PENDING, note="Waiting for parts"), warden
    )
    assert moved.is_success

    result = complaints_b.update_status(
        complaint_id, ComplaintStatusUpdate(status=ComplaintStatus.PENDING, note="Duplicate update"), warden
    )

    assert result.error.code == ErrorCode.OPTIMISTIC_LOCK
    check = open_session()
    _, complaints = build_services(check, notifier, image_store)
    detail = complaints.get_detail(complaint_id).data
    assert detail.version == moved.data.version
    assert [entry.note for entry in detail.status_history] == [None, "Waiting for parts"]
