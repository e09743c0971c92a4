"""
Administrative complaint endpoints.

Wardens and administrators drive status changes; deletion and manual
assignment triggers are limited to administrators.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from hostel_complaints.api.v1.responses import to_response
from hostel_complaints.core.security import CurrentUser
from hostel_complaints.dependencies import (
    get_admin_user,
    get_assignment_engine,
    get_complaint_service,
    get_staff_user,
)
from hostel_complaints.schemas.complaint import ComplaintFilterParams, ComplaintStatusUpdate
from hostel_complaints.services.assignment.assignment_engine import AssignmentEngine
from hostel_complaints.services.complaint.complaint_service import ComplaintService

router = APIRouter(prefix="/admin/complaints", tags=["Complaint Administration"])


@router.get("", summary="List complaints with filters")
def list_complaints(
    filters: Annotated[ComplaintFilterParams, Query()],
    _: CurrentUser = Depends(get_staff_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.list_all(filters))


@router.get("/{complaint_id}", summary="Get complaint details")
def get_complaint(
    complaint_id: str,
    _: CurrentUser = Depends(get_staff_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.get_detail(complaint_id))


@router.put("/{complaint_id}/status", summary="Change complaint status")
def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    actor: CurrentUser = Depends(get_staff_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.update_status(complaint_id, payload, actor))


@router.get("/{complaint_id}/timeline", summary="Get complaint timeline")
def get_complaint_timeline(
    complaint_id: str,
    _: CurrentUser = Depends(get_staff_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.get_timeline(complaint_id))


@router.delete("/{complaint_id}", summary="Delete a Received complaint")
def delete_complaint(
    complaint_id: str,
    _: CurrentUser = Depends(get_admin_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.delete(complaint_id))


@router.post("/{complaint_id}/assign", summary="Run automated assignment")
def trigger_assignment(
    complaint_id: str,
    _: CurrentUser = Depends(get_admin_user),
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    return to_response(engine.process_complaint(complaint_id))
