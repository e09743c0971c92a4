from hostel_complaints.services.file.image_store import ImageStore, LocalImageStore, validate_image

__all__ = ["ImageStore", "LocalImageStore", "validate_image"]
