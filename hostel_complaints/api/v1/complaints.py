"""
Student complaint endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from hostel_complaints.api.v1.responses import to_response
from hostel_complaints.core.security import CurrentUser
from hostel_complaints.dependencies import get_complaint_service, get_current_user, get_student_user
from hostel_complaints.schemas.complaint import ComplaintCreate, ComplaintFeedbackCreate
from hostel_complaints.services.complaint.complaint_service import ComplaintService

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Submit a complaint")
def create_complaint(
    category: str = Form(..., description="Canteen, Internet, Maintenance or Others"),
    description: str = Form(..., description="10-1000 characters"),
    sub_category: Optional[str] = Form(None, description="Required for Maintenance"),
    image: Optional[UploadFile] = File(None),
    student: CurrentUser = Depends(get_student_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    request = ComplaintCreate(category=category, sub_category=sub_category, description=description)

    content = filename = None
    if image is not None and image.filename:
        content = image.file.read()
        filename = image.filename

    result = service.create(request, student, image_content=content, image_filename=filename)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/my", summary="List my complaints")
def list_my_complaints(
    student: CurrentUser = Depends(get_student_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.list_own(student))


@router.get("/{complaint_id}", summary="Get complaint details")
def get_complaint(
    complaint_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.get_detail(complaint_id, viewer=current_user))


@router.get("/{complaint_id}/timeline", summary="Get complaint timeline")
def get_complaint_timeline(
    complaint_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.get_timeline(complaint_id, viewer=current_user))


@router.post("/{complaint_id}/feedback", summary="Give feedback on a resolution")
def submit_feedback(
    complaint_id: str,
    payload: ComplaintFeedbackCreate,
    student: CurrentUser = Depends(get_student_user),
    service: ComplaintService = Depends(get_complaint_service),
):
    return to_response(service.submit_feedback(complaint_id, payload, student))
