from hostel_complaints.models.staff.staff_member import StaffMember

__all__ = ["StaffMember"]
