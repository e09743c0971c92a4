"""
FastAPI dependencies: database session, caller identity and service wiring.

Services receive their repositories and collaborators here, so routers
never construct anything themselves.

Example usage in a router:
    @router.get("/me")
    def read_me(current_user: CurrentUser = Depends(get_current_user)):
        return current_user
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import AuthenticationError, ForbiddenError
from hostel_complaints.core.logging import user_id as user_id_context
from hostel_complaints.core.security import CurrentUser, user_from_token
from hostel_complaints.db.session import get_db
from hostel_complaints.models.base.enums import UserRole
from hostel_complaints.repositories.complaint.complaint_repository import ComplaintRepository
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider
from hostel_complaints.services.complaint.complaint_service import ComplaintService
from hostel_complaints.services.file.image_store import ImageStore, LocalImageStore
from hostel_complaints.services.notification import NotificationService, build_dispatcher
from hostel_complaints.services.staff.staff_service import StaffService

bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)
STAFF_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.WARDEN)


# --- Authentication & Authorization -------------------------------------------

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Caller identity from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication credentials were not provided")

    user = user_from_token(credentials.credentials)
    user_id_context.set(user.id)
    return user


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """
    Create a dependency that admits only the given roles.
    """
    allowed = [r.value for r in roles]

    def role_dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not current_user.has_role(*roles):
            raise ForbiddenError(f"Requires one of the roles: {', '.join(allowed)}", required_roles=allowed)
        return current_user

    return role_dependency


get_student_user = require_roles(UserRole.STUDENT)
get_admin_user = require_roles(*ADMIN_ROLES)
get_staff_user = require_roles(*STAFF_ROLES)


# --- Collaborators -------------------------------------------------------------

def get_notifier() -> NotificationService:
    return NotificationService(build_dispatcher())


def get_image_store() -> ImageStore:
    return LocalImageStore()


# --- Services --------------------------------------------------------------------

def get_config_provider(db: Session = Depends(get_db)) -> AssignmentConfigProvider:
    return AssignmentConfigProvider.from_session(db)


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    return StaffService(StaffRepository(db), ComplaintRepository(db), db)


def get_assignment_engine(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> AssignmentEngine:
    staff_repository = StaffRepository(db)
    complaint_repository = ComplaintRepository(db)
    return AssignmentEngine(
        staff_repository,
        complaint_repository,
        AssignmentConfigProvider.from_session(db),
        StaffService(staff_repository, complaint_repository, db),
        notifier,
        db,
    )


def get_complaint_service(
    db: Session = Depends(get_db),
    engine: AssignmentEngine = Depends(get_assignment_engine),
    notifier: NotificationService = Depends(get_notifier),
    image_store: ImageStore = Depends(get_image_store),
) -> ComplaintService:
    return ComplaintService(
        ComplaintRepository(db),
        engine.repository,
        engine.config_provider,
        engine,
        notifier,
        image_store,
        db,
    )


__all__ = [
    "get_db",
    "get_current_user",
    "require_roles",
    "get_student_user",
    "get_admin_user",
    "get_staff_user",
    "get_notifier",
    "get_image_store",
    "get_config_provider",
    "get_staff_service",
    "get_assignment_engine",
    "get_complaint_service",
]
