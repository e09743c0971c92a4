from hostel_complaints.repositories.base.base_repository import BaseRepository

__all__ = ["BaseRepository"]
