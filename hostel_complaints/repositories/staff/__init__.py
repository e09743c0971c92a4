from hostel_complaints.repositories.staff.staff_repository import StaffRepository

__all__ = ["StaffRepository"]
