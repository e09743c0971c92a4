"""
Assignment configuration and engine result schemas.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from hostel_complaints.models.base.enums import ComplaintCategory, ComplaintStatus
from hostel_complaints.schemas.common.base import BaseSchema, BaseUpdateSchema

__all__ = [
    "CategorySetting",
    "CategorySettingUpdate",
    "AssignmentConfigResponse",
    "AssignmentConfigUpdate",
    "ToggleRequest",
    "AssignmentResultResponse",
    "AssignmentStatsResponse",
]


class CategorySetting(BaseSchema):
    enabled: bool = True
    auto_assign: bool = True


class CategorySettingUpdate(BaseUpdateSchema):
    enabled: Optional[bool] = None
    auto_assign: Optional[bool] = None


class AssignmentConfigResponse(BaseSchema):
    enabled_globally: bool
    category_settings: Dict[ComplaintCategory, CategorySetting]
    max_workload: int
    efficiency_threshold: int
    auto_status_update: bool
    updated_at: Optional[datetime] = None


class AssignmentConfigUpdate(BaseUpdateSchema):
    """Partial configuration save; category settings are merged per key."""

    enabled_globally: Optional[bool] = None
    category_settings: Optional[Dict[ComplaintCategory, CategorySettingUpdate]] = None
    max_workload: Optional[int] = Field(default=None, ge=1, le=100)
    efficiency_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    auto_status_update: Optional[bool] = None


class ToggleRequest(BaseSchema):
    enabled: bool


class AssignmentResultResponse(BaseSchema):
    """Outcome of running the assignment engine on one complaint."""

    complaint_id: str
    assigned: bool
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    target_category: Optional[str] = None
    score: Optional[float] = None
    status: Optional[ComplaintStatus] = None
    latency_ms: Optional[int] = None
    reason: Optional[str] = None


class AssignmentStatsResponse(BaseSchema):
    total_complaints: int
    auto_processed: int
    average_latency_ms: float
    success_rate: float
    members_below_threshold: int
    efficiency_threshold: int
    enabled_globally: bool
