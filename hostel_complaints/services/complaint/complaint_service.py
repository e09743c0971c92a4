"""
Core complaint service: creation, status changes, feedback and listings.

Validation lives in ``complaint_rules`` and every state change is computed
by ``complaint_state_machine``; this service loads records, applies the
computed transition, keeps staff workload in step and notifies interested
parties once the change is committed.
"""

from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import ComplaintNotFoundError, OptimisticLockError
from hostel_complaints.core.security import CurrentUser
from hostel_complaints.models.base.enums import OPEN_STATUSES, ComplaintStatus
from hostel_complaints.models.base.types import utcnow
from hostel_complaints.models.complaint.complaint import Complaint
from hostel_complaints.repositories.complaint.complaint_repository import (
    ComplaintRepository,
    ComplaintSearchCriteria,
)
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.schemas.assignment import AssignmentResultResponse
from hostel_complaints.schemas.common.response import PaginationMeta
from hostel_complaints.schemas.complaint import (
    ComplaintCreate,
    ComplaintFeedbackCreate,
    ComplaintFilterParams,
    ComplaintResponse,
    ComplaintStatusUpdate,
    ComplaintTimeline,
    StaffSummary,
    TimelineEntry,
)
from hostel_complaints.services.assignment.assignment_engine import AUTOMATION_ACTOR, AssignmentEngine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider
from hostel_complaints.services.base.base_service import BaseService
from hostel_complaints.services.base.service_result import ServiceResult
from hostel_complaints.services.complaint import complaint_state_machine as machine
from hostel_complaints.services.complaint.complaint_rules import (
    validate_feedback_comment,
    validate_note,
    validate_staff_for_complaint,
    validate_submission,
)
from hostel_complaints.services.file.image_store import ImageStore, validate_image
from hostel_complaints.services.notification import ComplaintEvent, NotificationService


class ComplaintService(BaseService[ComplaintRepository]):
    """
    Complaint lifecycle controller.

    Collaborators are injected at construction; the configuration is read
    once per operation as an immutable snapshot.
    """

    def __init__(
        self,
        repository: ComplaintRepository,
        staff_repository: StaffRepository,
        config_provider: AssignmentConfigProvider,
        engine: AssignmentEngine,
        notifier: NotificationService,
        image_store: ImageStore,
        db_session: Session,
    ):
        """
        Initialize complaint service.

        Args:
            repository: Complaint repository instance
            staff_repository: Staff repository for assignment bookkeeping
            config_provider: Assignment configuration provider
            engine: Automated assignment engine
            notifier: Best-effort notification front
            image_store: Attachment storage
            db_session: Active database session
        """
        super().__init__(repository, db_session)
        self.staff_repository = staff_repository
        self.config_provider = config_provider
        self.engine = engine
        self.notifier = notifier
        self.image_store = image_store

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create(
        self,
        request: ComplaintCreate,
        student: CurrentUser,
        image_content: Optional[bytes] = None,
        image_filename: Optional[str] = None,
    ) -> ServiceResult[ComplaintResponse]:
        """
        Submit a complaint.

        The complaint is committed in Received status first. Automated
        assignment then runs in its own transaction when enabled for the
        category, so an assignment failure leaves the complaint Received
        instead of losing it.

        Args:
            request: Raw submission
            student: Submitting student
            image_content: Optional attachment bytes
            image_filename: Original attachment name

        Returns:
            ServiceResult containing the complaint; metadata carries the
            assignment outcome and any image warnings
        """
        warnings: List[str] = []
        try:
            submission = validate_submission(request.category, request.sub_category, request.description)
            image_url = None
            if image_content is not None:
                validate_image(image_content, image_filename)
                image_url = self._store_image(image_content, image_filename, warnings)

            with self.transaction():
                complaint = self.repository.create(
                    Complaint(
                        student_id=student.id,
                        student_name=student.name,
                        category=submission.category,
                        sub_category=submission.sub_category,
                        description=submission.description,
                        image_url=image_url,
                        status=ComplaintStatus.RECEIVED,
                    )
                )
                self.repository.append_history(complaint, ComplaintStatus.RECEIVED)
                self.db.flush()

                config = self.config_provider.get_config()
                event = ComplaintEvent.of(complaint)
                self.after_commit(lambda: self.notifier.complaint_created(event, student.name))

            self._log_operation(
                "create complaint",
                complaint.id,
                extra={"category": submission.category.value, "student_id": student.id},
            )

            assignment = None
            if config.auto_assigns_on_create(complaint.category) and self.engine.has_candidates(complaint):
                assignment = self._auto_assign(complaint.id, config)

            result = ServiceResult.success(
                ComplaintResponse.model_validate(self.repository.get_by_id(complaint.id)),
                message="Complaint submitted successfully",
                metadata={"assignment": assignment.model_dump(mode="json") if assignment else None},
            )
            for warning in warnings:
                result.add_warning(warning)
            return result
        except Exception as e:
            return self._handle_exception(e, "create complaint")

    def _auto_assign(self, complaint_id: str, config) -> Optional[AssignmentResultResponse]:
        """Run the engine for a freshly created complaint; failures are logged only."""
        try:
            with self.transaction():
                complaint = self.repository.get_by_id(complaint_id, for_update=True)
                outcome = self.engine.apply(complaint, config)
                if outcome.assigned:
                    event = ComplaintEvent.of(complaint)
                    self.after_commit(
                        lambda: self.notifier.status_changed(event, event.status, AUTOMATION_ACTOR)
                    )
            return outcome
        except Exception as e:
            self._logger.error(
                f"Automated assignment failed; complaint stays Received: {e}",
                exc_info=True,
                extra={"complaint_id": complaint_id},
            )
            return None

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def update_status(
        self,
        complaint_id: str,
        request: ComplaintStatusUpdate,
        actor: CurrentUser,
    ) -> ServiceResult[ComplaintResponse]:
        """
        Administrative status transition.

        A staff_id is honoured only with In Progress and bypasses the
        workload cap. Entering Resolved credits the assigned member and
        recomputes their efficiency.
        """
        try:
            with self.transaction():
                complaint = self.repository.get_by_id(complaint_id, for_update=True)
                self._check_version(complaint, request.expected_version)

                staff_id = request.staff_id if request.status == ComplaintStatus.IN_PROGRESS else None
                transition = machine.change_status(
                    machine.ComplaintState.of(complaint),
                    request.status,
                    note=validate_note(request.note),
                    staff_id=staff_id,
                    can_close=actor.can_close_complaints(),
                )

                if transition.is_noop:
                    return ServiceResult.success(
                        ComplaintResponse.model_validate(complaint),
                        message=f"Complaint is already {complaint.status.value}",
                    )

                if staff_id:
                    staff = self.staff_repository.get_by_id(staff_id)
                    validate_staff_for_complaint(
                        staff.category,
                        staff.is_active,
                        complaint.category,
                        complaint.sub_category,
                    )

                self._apply_transition(complaint, transition, staff_id=staff_id)

                event = ComplaintEvent.of(complaint)
                self.after_commit(
                    lambda: self.notifier.status_changed(event, event.status, actor.name or actor.role.value)
                )

            self._log_operation(
                "update complaint status",
                complaint_id,
                extra={
                    "from_status": transition.previous.status.value,
                    "to_status": transition.next.status.value,
                    "actor_id": actor.id,
                },
            )
            return ServiceResult.success(
                ComplaintResponse.model_validate(complaint),
                message=f"Complaint status updated to {transition.next.status.value}",
            )
        except Exception as e:
            return self._handle_exception(e, "update complaint status", complaint_id)

    def _check_version(self, complaint: Complaint, expected_version: Optional[int]) -> None:
        if expected_version is not None and complaint.version != expected_version:
            raise OptimisticLockError(expected=expected_version, actual=complaint.version)

    def _apply_transition(
        self,
        complaint: Complaint,
        transition: machine.Transition,
        staff_id: Optional[str] = None,
    ) -> None:
        """
        Write a computed transition onto the record.

        Appends the history entry, moves workload between members and keeps
        the resolution credit in step with the Resolved status.
        """
        previous, nxt = transition.previous, transition.next

        complaint.status = nxt.status
        complaint.assigned_staff_id = nxt.assigned_staff_id
        complaint.is_reopened = nxt.is_reopened
        complaint.is_locked = nxt.is_locked
        if nxt.feedback_is_satisfied is None and complaint.feedback_is_satisfied is not None:
            complaint.feedback_is_satisfied = None
            complaint.feedback_comment = None
            complaint.feedback_at = None

        if transition.history_status is not None:
            self.repository.append_history(
                complaint,
                transition.history_status,
                note=transition.note,
                staff_id=staff_id or nxt.assigned_staff_id,
            )

        if transition.released_staff_id:
            self.staff_repository.decrement_workload(transition.released_staff_id)
        if transition.claimed_staff_id:
            # Manual override: administrators may exceed the cap
            self.staff_repository.increment_workload(transition.claimed_staff_id)

        uncredited: Optional[str] = None
        if transition.entered_resolved:
            complaint.resolved_at = utcnow()
            complaint.resolved_by_staff_id = transition.resolved_by_staff_id
        elif previous.status == ComplaintStatus.RESOLVED and nxt.status in OPEN_STATUSES:
            uncredited = complaint.resolved_by_staff_id
            complaint.resolved_at = None
            complaint.resolved_by_staff_id = None

        self.db.flush()

        if transition.entered_resolved and transition.resolved_by_staff_id:
            self.staff_repository.touch(transition.resolved_by_staff_id)
            self.engine.recompute_efficiency(transition.resolved_by_staff_id)
        if uncredited:
            self.engine.recompute_efficiency(uncredited)

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    def submit_feedback(
        self,
        complaint_id: str,
        request: ComplaintFeedbackCreate,
        student: CurrentUser,
    ) -> ServiceResult[ComplaintResponse]:
        """
        Record the student's verdict on a resolution.

        Satisfied feedback locks the complaint, records the lock in the
        history and releases its image. Unsatisfied feedback reopens it
        through the status transition rules. Administrators hear about both.
        """
        try:
            with self.transaction():
                complaint = self._get_owned(complaint_id, student, for_update=True)
                comment = validate_feedback_comment(request.comment)

                transition = machine.submit_feedback(
                    machine.ComplaintState.of(complaint),
                    request.is_satisfied,
                    comment,
                )

                # Feedback first: a locked row must carry satisfied feedback
                complaint.feedback_is_satisfied = request.is_satisfied
                complaint.feedback_comment = comment
                complaint.feedback_at = utcnow()
                image_url = None
                if request.is_satisfied:
                    image_url, complaint.image_url = complaint.image_url, None
                else:
                    complaint.reopen_count = (complaint.reopen_count or 0) + 1
                self._apply_transition(complaint, transition)

                event = ComplaintEvent.of(complaint)
                actor_name = student.name or "Student"
                if request.is_satisfied:
                    self.after_commit(lambda: self.notifier.complaint_locked(event, actor_name))
                else:
                    self.after_commit(lambda: self.notifier.complaint_reopened(event, actor_name))
                    self.after_commit(lambda: self.notifier.status_changed(event, event.status, actor_name))

            self._log_operation(
                "submit complaint feedback",
                complaint_id,
                extra={"is_satisfied": request.is_satisfied},
            )
            result = ServiceResult.success(
                ComplaintResponse.model_validate(complaint),
                message=(
                    "Feedback recorded; complaint is now locked"
                    if request.is_satisfied
                    else f"Feedback recorded; complaint reopened as {complaint.status.value}"
                ),
            )
            if image_url:
                self._release_image(image_url, result)
            return result
        except Exception as e:
            return self._handle_exception(e, "submit complaint feedback", complaint_id)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete(self, complaint_id: str) -> ServiceResult[Dict[str, str]]:
        """Delete a complaint that is still Received and unlocked."""
        try:
            with self.transaction():
                complaint = self.repository.get_by_id(complaint_id, for_update=True)
                state = machine.ComplaintState.of(complaint)
                machine.ensure_deletable(state)

                image_url = complaint.image_url
                if state.holds_open_assignment:
                    self.staff_repository.decrement_workload(state.assigned_staff_id)
                self.repository.delete(complaint)

            self._log_operation("delete complaint", complaint_id)
            result = ServiceResult.success({"id": complaint_id}, message="Complaint deleted successfully")
            if image_url:
                self._release_image(image_url, result)
            return result
        except Exception as e:
            return self._handle_exception(e, "delete complaint", complaint_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_own(self, student: CurrentUser) -> ServiceResult[List[ComplaintResponse]]:
        try:
            complaints = self.repository.list_by_student(student.id)
            return ServiceResult.success(
                [ComplaintResponse.model_validate(c) for c in complaints],
                metadata={"count": len(complaints)},
            )
        except Exception as e:
            return self._handle_exception(e, "list own complaints", student.id)

    def list_all(self, filters: ComplaintFilterParams) -> ServiceResult[List[ComplaintResponse]]:
        """Filtered, paginated listing with dashboard counts."""
        try:
            criteria = ComplaintSearchCriteria(**filters.model_dump())
            complaints, total = self.repository.search(criteria)
            return ServiceResult.success(
                [ComplaintResponse.model_validate(c) for c in complaints],
                metadata={
                    "pagination": PaginationMeta.build(filters.page, filters.limit, total).model_dump(),
                    "counts": self.repository.status_counts(),
                },
            )
        except Exception as e:
            return self._handle_exception(e, "list complaints")

    def get_detail(
        self,
        complaint_id: str,
        viewer: Optional[CurrentUser] = None,
    ) -> ServiceResult[ComplaintResponse]:
        """Complaint detail; students only see their own complaints."""
        try:
            complaint = self._get_owned(complaint_id, viewer)
            return ServiceResult.success(ComplaintResponse.model_validate(complaint))
        except Exception as e:
            return self._handle_exception(e, "get complaint", complaint_id)

    def get_timeline(
        self,
        complaint_id: str,
        viewer: Optional[CurrentUser] = None,
    ) -> ServiceResult[ComplaintTimeline]:
        """Ordered status history with each entry's staff member resolved."""
        try:
            complaint = self._get_owned(complaint_id, viewer)

            staff_ids: Set[str] = {e.staff_id for e in complaint.status_history if e.staff_id}
            staff_by_id = {}
            if staff_ids:
                members = self.staff_repository.find_by_criteria({"id": list(staff_ids)}, limit=None)
                staff_by_id = {m.id: StaffSummary.model_validate(m) for m in members}

            timeline = ComplaintTimeline(
                complaint_id=complaint.id,
                status=complaint.status,
                is_locked=complaint.is_locked,
                is_reopened=complaint.is_reopened,
                entries=[
                    TimelineEntry(
                        position=entry.position,
                        status=entry.status,
                        timestamp=entry.timestamp,
                        note=entry.note,
                        staff=staff_by_id.get(entry.staff_id),
                    )
                    for entry in complaint.status_history
                ],
            )
            return ServiceResult.success(timeline)
        except Exception as e:
            return self._handle_exception(e, "get complaint timeline", complaint_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_owned(
        self,
        complaint_id: str,
        viewer: Optional[CurrentUser],
        for_update: bool = False,
    ) -> Complaint:
        """
        Load a complaint, hiding other students' complaints.

        Raises:
            ComplaintNotFoundError: Unknown id, or a student asking for
                someone else's complaint
        """
        complaint = self.repository.get_by_id(complaint_id, for_update=for_update)
        if viewer is not None and viewer.is_student and complaint.student_id != viewer.id:
            raise ComplaintNotFoundError(complaint_id)
        return complaint

    def _store_image(self, content: bytes, filename: Optional[str], warnings: List[str]) -> Optional[str]:
        try:
            return self.image_store.save(content, filename or "")
        except Exception as e:
            self._logger.warning(f"Image upload failed; complaint saved without image: {e}")
            warnings.append("Image upload failed; complaint was saved without the image")
            return None

    def _release_image(self, url: str, result: ServiceResult) -> None:
        try:
            self.image_store.delete(url)
        except Exception as e:
            self._logger.warning(f"Image delete failed for {url}: {e}")
            result.add_warning("Attached image could not be deleted")
