"""
SQLAlchemy model mixins for reusable functionality.
"""

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from hostel_complaints.models.base.types import UTCDateTime, utcnow


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Provides created_at and updated_at fields with
    timezone-aware timestamp management.
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        index=True,
        comment="Record creation timestamp (UTC)"
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        comment="Record last update timestamp (UTC)"
    )
