"""
Core complaint model with lifecycle tracking.

Handles complaint categorisation, status, assignment, embedded feedback and
the lock / reopen flags driven by that feedback.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_complaints.models.base.base_model import BaseModel
from hostel_complaints.models.base.enums import (
    ComplaintCategory,
    ComplaintStatus,
    MaintenanceSubCategory,
    enum_values,
)
from hostel_complaints.models.base.mixins import TimestampMixin
from hostel_complaints.models.base.types import UTCDateTime

if TYPE_CHECKING:
    from hostel_complaints.models.complaint.complaint_status_history import ComplaintStatusHistory
    from hostel_complaints.models.staff.staff_member import StaffMember

__all__ = ["Complaint"]


class Complaint(BaseModel, TimestampMixin):
    """
    Core complaint entity.

    Attributes:
        student_id: Submitting student identifier
        student_name: Submitting student display name
        category: Primary complaint category
        sub_category: Maintenance sub-category (set only for Maintenance)
        description: Complaint text (10-1000 characters)
        image_url: Optional attached image reference

        status: Current lifecycle status
        assigned_staff_id: Currently assigned staff member

        feedback_is_satisfied: Student verdict on the latest resolution
        feedback_comment: Optional feedback text
        feedback_at: Feedback submission time

        is_reopened: True while in a cycle caused by unsatisfied feedback
        is_locked: True once satisfied feedback is recorded
        reopen_count: Number of unsatisfied-feedback reopen cycles

        resolved_at: Time the complaint last entered Resolved
        resolved_by_staff_id: Member assigned when it was resolved

        auto_assigned: Whether the assignment engine placed the complaint
        auto_assigned_staff_id: Member chosen by the engine
        assignment_latency_ms: Time from creation to automatic assignment

        version: Optimistic concurrency counter
    """

    __tablename__ = "complaints"
    __table_args__ = (
        Index("ix_complaints_status_category", "status", "category"),
        Index("ix_complaints_assigned_staff_status", "assigned_staff_id", "status"),
        Index("ix_complaints_student_id", "student_id"),
        CheckConstraint(
            "(category = 'Maintenance' AND sub_category IS NOT NULL) "
            "OR (category <> 'Maintenance' AND sub_category IS NULL)",
            name="check_sub_category_matches_category",
        ),
        CheckConstraint(
            "is_locked = false OR feedback_is_satisfied = true",
            name="check_locked_requires_satisfied_feedback",
        ),
        CheckConstraint("reopen_count >= 0", name="check_reopen_count_positive"),
    )

    # Submitter
    student_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Submitting student identifier",
    )

    student_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
        comment="Submitting student display name",
    )

    # Content
    category: Mapped[ComplaintCategory] = mapped_column(
        Enum(ComplaintCategory, name="complaint_category_enum", values_callable=enum_values),
        nullable=False,
        index=True,
        comment="Primary complaint category",
    )

    sub_category: Mapped[Optional[MaintenanceSubCategory]] = mapped_column(
        Enum(MaintenanceSubCategory, name="maintenance_sub_category_enum", values_callable=enum_values),
        nullable=True,
        comment="Maintenance sub-category",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Complaint description",
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Attached image reference",
    )

    # Status and assignment
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, name="complaint_status_enum", values_callable=enum_values),
        nullable=False,
        default=ComplaintStatus.RECEIVED,
        index=True,
        comment="Current complaint status",
    )

    assigned_staff_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("staff_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Currently assigned staff member",
    )

    # Feedback
    feedback_is_satisfied: Mapped[Optional[bool]] = mapped_column(
        Boolean,
        nullable=True,
        comment="Student verdict on the latest resolution",
    )

    feedback_comment: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Feedback text",
    )

    feedback_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime,
        nullable=True,
        comment="Feedback submission time",
    )

    # Lock / reopen flags
    is_reopened: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="In a cycle caused by unsatisfied feedback",
    )

    is_locked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Locked after satisfied feedback",
    )

    reopen_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of reopen cycles",
    )

    # Resolution tracking
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime,
        nullable=True,
        comment="Time the complaint last entered Resolved",
    )

    resolved_by_staff_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("staff_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Member assigned at resolution",
    )

    # Automated assignment bookkeeping
    auto_assigned: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Placed by the assignment engine",
    )

    auto_assigned_staff_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        comment="Member chosen by the assignment engine",
    )

    assignment_latency_ms: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Milliseconds from creation to automatic assignment",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Optimistic concurrency counter",
    )

    # Relationships
    status_history: Mapped[List["ComplaintStatusHistory"]] = relationship(
        "ComplaintStatusHistory",
        back_populates="complaint",
        order_by="ComplaintStatusHistory.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    assigned_staff: Mapped[Optional["StaffMember"]] = relationship(
        "StaffMember",
        foreign_keys=[assigned_staff_id],
        lazy="select",
    )

    resolved_by_staff: Mapped[Optional["StaffMember"]] = relationship(
        "StaffMember",
        foreign_keys=[resolved_by_staff_id],
        lazy="select",
    )

    __mapper_args__ = {"version_id_col": version}

    # ==================== Properties ====================

    @property
    def has_feedback(self) -> bool:
        return self.feedback_is_satisfied is not None

    @property
    def feedback(self) -> Optional[dict]:
        """Feedback as a nested object, or None when none was given."""
        if not self.has_feedback:
            return None
        return {
            "is_satisfied": self.feedback_is_satisfied,
            "comment": self.feedback_comment,
            "timestamp": self.feedback_at,
        }

    def __repr__(self) -> str:
        return f"<Complaint(id={self.id}, category={self.category}, status={self.status})>"
