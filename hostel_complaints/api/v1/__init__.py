from hostel_complaints.api.v1.router import router

__all__ = ["router"]
