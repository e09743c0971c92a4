"""
Staff member model.

Staff members service exactly one category. Workload and efficiency are
bookkeeping columns maintained by the assignment engine and only ever
changed through single-statement updates.
"""

from datetime import datetime
from typing import Dict

from sqlalchemy import JSON, Boolean, CheckConstraint, Enum, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_complaints.models.base.base_model import BaseModel
from hostel_complaints.models.base.enums import StaffCategory, enum_values
from hostel_complaints.models.base.mixins import TimestampMixin
from hostel_complaints.models.base.types import UTCDateTime, utcnow

__all__ = ["StaffMember"]


class StaffMember(BaseModel, TimestampMixin):
    """
    Member of the maintenance / service staff.

    Attributes:
        name: Display name (2-50 characters)
        phone: Ten digit contact number
        category: Department serviced by this member
        category_expertise: Map of complaint category to 0-100 proficiency
        efficiency_score: Rolling 0-100 score derived from resolution history
        current_workload: Number of open complaints currently assigned
        last_active: Last time the member was assigned or resolved work
        is_active: Soft-delete flag
    """

    __tablename__ = "staff_members"
    __table_args__ = (
        Index("ix_staff_members_category_active", "category", "is_active"),
        CheckConstraint("current_workload >= 0", name="check_workload_non_negative"),
        CheckConstraint(
            "efficiency_score >= 0 AND efficiency_score <= 100",
            name="check_efficiency_score_range",
        ),
    )

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Staff member display name",
    )

    phone: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="Ten digit contact number",
    )

    category: Mapped[StaffCategory] = mapped_column(
        Enum(StaffCategory, name="staff_category_enum", values_callable=enum_values),
        nullable=False,
        index=True,
        comment="Department serviced by this member",
    )

    category_expertise: Mapped[Dict[str, float]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Complaint category to 0-100 proficiency",
    )

    efficiency_score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=50.0,
        comment="Rolling efficiency score (0-100)",
    )

    current_workload: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Open complaints currently assigned",
    )

    last_active: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        comment="Last assignment or resolution activity",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Soft-delete flag",
    )

    def expertise_for(self, category: str) -> float:
        """Proficiency for a complaint category, 0 when not recorded."""
        return float((self.category_expertise or {}).get(category, 0) or 0)

    def __repr__(self) -> str:
        return f"<StaffMember(id={self.id}, name={self.name}, category={self.category})>"
