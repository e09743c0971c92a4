from hostel_complaints.models.base.base_model import Base, BaseModel
from hostel_complaints.models.base.mixins import TimestampMixin
from hostel_complaints.models.base.types import UTCDateTime, ensure_utc, utcnow

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "UTCDateTime",
    "ensure_utc",
    "utcnow",
]
