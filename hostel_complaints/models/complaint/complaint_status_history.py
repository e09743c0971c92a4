"""
Append-only status history of a complaint.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_complaints.models.base.base_model import BaseModel
from hostel_complaints.models.base.enums import ComplaintStatus, enum_values
from hostel_complaints.models.base.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from hostel_complaints.models.complaint.complaint import Complaint

__all__ = ["ComplaintStatusHistory"]


class ComplaintStatusHistory(BaseModel):
    """
    One entry in a complaint's status history.

    Entries are numbered by position within their complaint and are never
    updated after insert.
    """

    __tablename__ = "complaint_status_history"
    __table_args__ = (
        UniqueConstraint("complaint_id", "position", name="uq_complaint_history_position"),
    )

    complaint_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Zero-based order within the complaint",
    )

    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", values_callable=enum_values),
        nullable=False,
    )

    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    staff_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("staff_members.id", ondelete="SET NULL"),
        nullable=True,
        comment="Staff member involved in the change",
    )

    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
    )

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="status_history")

    def __repr__(self) -> str:
        return f"<ComplaintStatusHistory(complaint_id={self.complaint_id}, position={self.position}, status={self.status})>"
