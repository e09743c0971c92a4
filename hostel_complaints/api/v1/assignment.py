"""
Automated assignment configuration and reporting endpoints.
"""

from fastapi import APIRouter, Depends

from hostel_complaints.api.v1.responses import to_response
from hostel_complaints.core.security import CurrentUser
from hostel_complaints.dependencies import (
    get_admin_user,
    get_assignment_engine,
    get_config_provider,
    get_staff_service,
)
from hostel_complaints.schemas.assignment import (
    AssignmentConfigResponse,
    AssignmentConfigUpdate,
    ToggleRequest,
)
from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider
from hostel_complaints.services.base.service_result import ServiceResult
from hostel_complaints.services.staff.staff_service import StaffService

router = APIRouter(prefix="/admin/assignment", tags=["Automated Assignment"])


def _config_response(result: ServiceResult):
    if result.is_success:
        result.data = AssignmentConfigResponse.model_validate(result.data.to_dict())
    return to_response(result)


@router.get("/config", summary="Get assignment configuration")
def get_config(
    _: CurrentUser = Depends(get_admin_user),
    provider: AssignmentConfigProvider = Depends(get_config_provider),
):
    return _config_response(provider.read_config())


@router.put("/config", summary="Update assignment configuration")
def save_config(
    payload: AssignmentConfigUpdate,
    _: CurrentUser = Depends(get_admin_user),
    provider: AssignmentConfigProvider = Depends(get_config_provider),
):
    return _config_response(provider.save_config(payload))


@router.post("/quick-setup", summary="Enable automated assignment everywhere")
def quick_setup(
    _: CurrentUser = Depends(get_admin_user),
    provider: AssignmentConfigProvider = Depends(get_config_provider),
):
    return _config_response(provider.quick_setup())


@router.post("/toggle", summary="Switch automated assignment on or off")
def toggle(
    payload: ToggleRequest,
    _: CurrentUser = Depends(get_admin_user),
    provider: AssignmentConfigProvider = Depends(get_config_provider),
):
    return _config_response(provider.toggle(payload.enabled))


@router.get("/stats", summary="Automated assignment statistics")
def get_stats(
    _: CurrentUser = Depends(get_admin_user),
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    return to_response(engine.get_stats())


@router.put("/members/{staff_id}/efficiency", summary="Recalculate a member's efficiency")
def recalculate_member_efficiency(
    staff_id: str,
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.recalculate_efficiency(staff_id))
