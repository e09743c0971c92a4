"""
Domain enumerations shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    WARDEN = "warden"
    STUDENT = "student"


class ComplaintCategory(str, enum.Enum):
    """Service domain a complaint is raised against."""
    CANTEEN = "Canteen"
    INTERNET = "Internet"
    MAINTENANCE = "Maintenance"
    OTHERS = "Others"


class MaintenanceSubCategory(str, enum.Enum):
    """Sub-categories, valid only for Maintenance complaints."""
    HOUSEKEEPING = "Housekeeping"
    PLUMBING = "Plumbing"
    ELECTRICITY = "Electricity"


class ComplaintStatus(str, enum.Enum):
    """Complaint lifecycle status."""
    RECEIVED = "Received"
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class StaffCategory(str, enum.Enum):
    """Department a staff member services."""
    CANTEEN = "Canteen"
    INTERNET = "Internet"
    MAINTENANCE = "Maintenance"
    HOUSEKEEPING = "Housekeeping"
    PLUMBING = "Plumbing"
    ELECTRICITY = "Electricity"
    OTHERS = "Others"


# Statuses in which an assignment counts against the member's workload
OPEN_STATUSES = (
    ComplaintStatus.RECEIVED,
    ComplaintStatus.PENDING,
    ComplaintStatus.IN_PROGRESS,
)


def enum_values(enum_cls):
    """values_callable for SQLAlchemy Enum columns storing the enum value."""
    return [member.value for member in enum_cls]
