from hostel_complaints.schemas.assignment.assignment_config import (
    AssignmentConfigResponse,
    AssignmentConfigUpdate,
    AssignmentResultResponse,
    AssignmentStatsResponse,
    CategorySetting,
    CategorySettingUpdate,
    ToggleRequest,
)

__all__ = [
    "AssignmentConfigResponse",
    "AssignmentConfigUpdate",
    "AssignmentResultResponse",
    "AssignmentStatsResponse",
    "CategorySetting",
    "CategorySettingUpdate",
    "ToggleRequest",
]
