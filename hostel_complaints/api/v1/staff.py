"""
Staff directory endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from hostel_complaints.api.v1.responses import to_response
from hostel_complaints.core.security import CurrentUser
from hostel_complaints.dependencies import get_admin_user, get_staff_service
from hostel_complaints.models.base.enums import StaffCategory
from hostel_complaints.schemas.staff import StaffCreate, StaffUpdate
from hostel_complaints.services.staff.staff_service import StaffService

router = APIRouter(prefix="/admin/staff", tags=["Staff Directory"])


@router.get("", summary="List staff members")
def list_staff(
    include_inactive: bool = Query(False),
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.list_members(include_inactive=include_inactive))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add a staff member")
def add_staff_member(
    payload: StaffCreate,
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.add_member(payload), success_status=status.HTTP_201_CREATED)


@router.get("/category/{category}", summary="List staff members of a category")
def list_staff_by_category(
    category: StaffCategory,
    include_inactive: bool = Query(False),
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.list_by_category(category, include_inactive=include_inactive))


@router.post("/recalculate-efficiency", summary="Recalculate efficiency for all active members")
def recalculate_all_efficiency(
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.recalculate_all())


@router.put("/{staff_id}", summary="Update a staff member")
def update_staff_member(
    staff_id: str,
    payload: StaffUpdate,
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.update_member(staff_id, payload))


@router.delete("/{staff_id}", summary="Deactivate a staff member")
def deactivate_staff_member(
    staff_id: str,
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.deactivate(staff_id))


@router.put("/{staff_id}/reactivate", summary="Reactivate a staff member")
def reactivate_staff_member(
    staff_id: str,
    _: CurrentUser = Depends(get_admin_user),
    service: StaffService = Depends(get_staff_service),
):
    return to_response(service.reactivate(staff_id))
