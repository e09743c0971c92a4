"""
Automated assignment configuration.

A single row keyed by ``singleton_key``; the UNIQUE constraint on that key
makes concurrent find-or-create safe.
"""

from typing import Dict

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_complaints.models.base.base_model import BaseModel
from hostel_complaints.models.base.enums import ComplaintCategory
from hostel_complaints.models.base.mixins import TimestampMixin

__all__ = ["AssignmentConfig", "DEFAULT_SINGLETON_KEY", "default_category_settings"]

DEFAULT_SINGLETON_KEY = "default"


def default_category_settings() -> Dict[str, Dict[str, bool]]:
    """Every complaint category enabled for automatic assignment."""
    return {
        category.value: {"enabled": True, "auto_assign": True}
        for category in ComplaintCategory
    }


class AssignmentConfig(BaseModel, TimestampMixin):
    """
    Process-wide automated assignment settings.

    Attributes:
        singleton_key: Always "default"; unique
        enabled_globally: Master switch
        category_settings: Per complaint category {enabled, auto_assign}
        max_workload: Open assignments at which a member stops receiving work
        efficiency_threshold: Advisory minimum efficiency used in reporting
        auto_status_update: Move complaints to In Progress on assignment
    """

    __tablename__ = "assignment_config"
    __table_args__ = (
        CheckConstraint("max_workload >= 1", name="check_max_workload_positive"),
        CheckConstraint(
            "efficiency_threshold >= 0 AND efficiency_threshold <= 100",
            name="check_efficiency_threshold_range",
        ),
    )

    singleton_key: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        default=DEFAULT_SINGLETON_KEY,
    )

    enabled_globally: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    category_settings: Mapped[Dict[str, Dict[str, bool]]] = mapped_column(
        JSON,
        nullable=False,
        default=default_category_settings,
    )

    max_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=5)

    efficiency_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=70)

    auto_status_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<AssignmentConfig(enabled_globally={self.enabled_globally}, max_workload={self.max_workload})>"
