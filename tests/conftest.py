import os

# Settings are read once at import time; point the application at an
# in-memory database before anything from the package is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hostel_complaints.core.security import CurrentUser, create_access_token
from hostel_complaints.db.base import Base, import_models
from hostel_complaints.db.session import configure_sqlite, get_db
from hostel_complaints.dependencies import get_image_store, get_notifier
from hostel_complaints.main import app
from hostel_complaints.models.base.enums import StaffCategory, UserRole
from hostel_complaints.models.base.types import utcnow
from hostel_complaints.models.staff.staff_member import StaffMember
from hostel_complaints.repositories.complaint.complaint_repository import ComplaintRepository
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider
from hostel_complaints.services.complaint.complaint_service import ComplaintService
from hostel_complaints.services.file.image_store import LocalImageStore
from hostel_complaints.services.notification import NotificationService
from hostel_complaints.services.staff.staff_service import StaffService

from doubles import ADMIN_RECIPIENT, RecordingDispatcher


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    import_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=False)


@pytest.fixture(scope="function")
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture(scope="function")
def notifier(dispatcher, executor):
    return NotificationService(dispatcher, executor=executor, timeout=2.0, admin_recipients=[ADMIN_RECIPIENT])


@pytest.fixture(scope="function")
def image_store(tmp_path):
    return LocalImageStore(str(tmp_path / "uploads"))


@pytest.fixture(scope="function")
def config_provider(db):
    provider = AssignmentConfigProvider.from_session(db)
    provider.ensure_default()
    return provider


@pytest.fixture(scope="function")
def staff_service(db):
    return StaffService(StaffRepository(db), ComplaintRepository(db), db)


@pytest.fixture(scope="function")
def assignment_engine(db, config_provider, staff_service, notifier):
    return AssignmentEngine(
        staff_service.repository,
        staff_service.complaint_repository,
        config_provider,
        staff_service,
        notifier,
        db,
    )


@pytest.fixture(scope="function")
def complaint_service(db, assignment_engine, notifier, image_store):
    return ComplaintService(
        ComplaintRepository(db),
        assignment_engine.repository,
        assignment_engine.config_provider,
        assignment_engine,
        notifier,
        image_store,
        db,
    )


@pytest.fixture(scope="function")
def client(db, notifier, image_store, config_provider):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_image_store] = lambda: image_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_staff(db):
    def _make(
        name="Ravi Kumar",
        category=StaffCategory.PLUMBING,
        expertise=None,
        efficiency=50.0,
        workload=0,
        idle_hours=0,
        phone="9876543210",
        is_active=True,
    ):
        staff = StaffMember(
            name=name,
            phone=phone,
            category=category,
            category_expertise=expertise or {},
            efficiency_score=efficiency,
            current_workload=workload,
            last_active=utcnow() - timedelta(hours=idle_hours),
            is_active=is_active,
        )
        db.add(staff)
        db.commit()
        return staff

    return _make


@pytest.fixture(scope="function")
def student():
    return CurrentUser(id="student-1", role=UserRole.STUDENT, name="Asha Rao")


@pytest.fixture(scope="function")
def other_student():
    return CurrentUser(id="student-2", role=UserRole.STUDENT, name="Vikram Singh")


@pytest.fixture(scope="function")
def warden():
    return CurrentUser(id="warden-1", role=UserRole.WARDEN, name="Warden Mehta")


@pytest.fixture(scope="function")
def super_admin():
    return CurrentUser(id="root-1", role=UserRole.SUPER_ADMIN, name="Chief Admin")


@pytest.fixture(scope="function")
def auth_headers():
    def _headers(user: CurrentUser) -> dict:
        token = create_access_token(user.id, user.role, name=user.name)
        return {"Authorization": f"Bearer {token}"}

    return _headers
