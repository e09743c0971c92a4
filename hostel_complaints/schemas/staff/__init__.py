from hostel_complaints.schemas.staff.staff_base import (
    EfficiencyResponse,
    StaffCreate,
    StaffResponse,
    StaffUpdate,
)

__all__ = ["EfficiencyResponse", "StaffCreate", "StaffResponse", "StaffUpdate"]
