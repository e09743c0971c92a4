"""
Automated assignment engine.

Selects the best staff member for a complaint and claims a workload slot
for them:

1. Resolve the target department (sub-category department when it has
   active staff, otherwise the parent category).
2. Reset the candidates' workload counters from their open assignments.
3. Drop candidates at the cap, score and rank the rest.
4. Claim candidates in rank order with a conditional UPDATE; the first
   successful claim wins.

A complaint with no eligible candidate is a normal outcome and stays
unassigned.
"""

from statistics import mean
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import BusinessRuleViolationError
from hostel_complaints.models.base.enums import StaffCategory
from hostel_complaints.models.base.types import ensure_utc, utcnow
from hostel_complaints.models.complaint.complaint import Complaint
from hostel_complaints.repositories.complaint.complaint_repository import ComplaintRepository
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.schemas.assignment import AssignmentResultResponse, AssignmentStatsResponse
from hostel_complaints.schemas.staff import EfficiencyResponse
from hostel_complaints.services.assignment.config_provider import (
    AssignmentConfigProvider,
    AssignmentConfigSnapshot,
)
from hostel_complaints.services.assignment.scoring import (
    CandidateProfile,
    ScoredCandidate,
    rank_candidates,
)
from hostel_complaints.services.base.base_service import BaseService
from hostel_complaints.services.base.service_result import ServiceResult
from hostel_complaints.services.complaint.complaint_rules import staff_categories_for
from hostel_complaints.services.complaint.complaint_state_machine import (
    ComplaintState,
    assign,
    ensure_assignable,
)
from hostel_complaints.services.notification import ComplaintEvent, NotificationService
from hostel_complaints.services.staff.staff_service import StaffService

ASSIGNMENT_NOTE = "Complaint assigned to {name} - {department} department"
AUTOMATION_ACTOR = "Automated Assignment"
LATENCY_WINDOW = 100


class AssignmentEngine(BaseService[StaffRepository]):
    """Scores staff and applies automated assignments."""

    def __init__(
        self,
        repository: StaffRepository,
        complaint_repository: ComplaintRepository,
        config_provider: AssignmentConfigProvider,
        staff_service: StaffService,
        notifier: NotificationService,
        db_session: Session,
    ):
        super().__init__(repository, db_session)
        self.complaint_repository = complaint_repository
        self.config_provider = config_provider
        self.staff_service = staff_service
        self.notifier = notifier

    # -------------------------------------------------------------------------
    # Candidate selection
    # -------------------------------------------------------------------------

    def target_category(self, complaint: Complaint) -> StaffCategory:
        """
        Department the complaint is routed to.

        The most specific department with at least one active member, or
        the parent category when none has staff.
        """
        departments = staff_categories_for(complaint.category, complaint.sub_category)
        for department in departments:
            if self.repository.count_active_in_category(department):
                return department
        return departments[-1]

    def has_candidates(self, complaint: Complaint) -> bool:
        """Whether any department able to take the complaint has active staff."""
        return any(
            self.repository.count_active_in_category(department)
            for department in staff_categories_for(complaint.category, complaint.sub_category)
        )

    def select_candidates(
        self,
        complaint: Complaint,
        config: AssignmentConfigSnapshot,
    ) -> Tuple[StaffCategory, List[ScoredCandidate]]:
        """
        Rank eligible members for a complaint, best first.

        Workload counters are reset from the open assignments before
        scoring so ranking never runs on drifted counts.
        """
        department = self.target_category(complaint)
        members = self.repository.find_active_by_category(department)
        if not members:
            return department, []

        self.repository.recompute_workloads([m.id for m in members])

        profiles = [
            CandidateProfile(
                staff_id=m.id,
                name=m.name,
                expertise=m.expertise_for(complaint.category.value),
                efficiency_score=float(m.efficiency_score),
                current_workload=int(m.current_workload),
                last_active=m.last_active,
            )
            for m in members
        ]
        return department, rank_candidates(profiles, config.max_workload)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def apply(
        self,
        complaint: Complaint,
        config: AssignmentConfigSnapshot,
    ) -> AssignmentResultResponse:
        """
        Assign a complaint inside the caller's transaction.

        Candidates are claimed in rank order; a claim only succeeds while
        the member is below the cap, so concurrent assignments can never
        push a member over it. When every claim fails the complaint stays
        unassigned.

        Raises:
            ComplaintClosedError / ComplaintLockedError / ConflictError:
                The complaint cannot be assigned
        """
        state = ComplaintState.of(complaint)
        ensure_assignable(state)

        department, ranked = self.select_candidates(complaint, config)
        if not ranked:
            return self._unassigned(complaint, department, "No eligible staff member available")

        chosen: Optional[ScoredCandidate] = None
        for candidate in ranked:
            if self.repository.try_claim(candidate.profile.staff_id, config.max_workload):
                chosen = candidate
                break
            self._logger.info(
                "Candidate reached the workload cap before claim",
                extra={"complaint_id": complaint.id, "staff_id": candidate.profile.staff_id},
            )

        if chosen is None:
            return self._unassigned(complaint, department, "All eligible staff members are at the workload cap")

        transition = assign(state, chosen.profile.staff_id, advance_status=config.auto_status_update)
        complaint.assigned_staff_id = transition.next.assigned_staff_id
        complaint.status = transition.next.status
        self.complaint_repository.append_history(
            complaint,
            transition.history_status,
            note=ASSIGNMENT_NOTE.format(name=chosen.profile.name, department=department.value),
            staff_id=chosen.profile.staff_id,
        )

        latency_ms = self._latency_ms(complaint)
        complaint.auto_assigned = True
        complaint.auto_assigned_staff_id = chosen.profile.staff_id
        complaint.assignment_latency_ms = latency_ms
        self.db.flush()

        self._logger.info(
            f"Complaint assigned to {chosen.profile.name}",
            extra={
                "complaint_id": complaint.id,
                "staff_id": chosen.profile.staff_id,
                "department": department.value,
                "score": round(chosen.score, 2),
                "latency_ms": latency_ms,
            },
        )
        return AssignmentResultResponse(
            complaint_id=complaint.id,
            assigned=True,
            staff_id=chosen.profile.staff_id,
            staff_name=chosen.profile.name,
            target_category=department.value,
            score=round(chosen.score, 2),
            status=complaint.status,
            latency_ms=latency_ms,
        )

    def _unassigned(self, complaint: Complaint, department: StaffCategory, reason: str) -> AssignmentResultResponse:
        self._logger.info(
            f"No assignment: {reason}",
            extra={"complaint_id": complaint.id, "department": department.value},
        )
        return AssignmentResultResponse(
            complaint_id=complaint.id,
            assigned=False,
            target_category=department.value,
            status=complaint.status,
            reason=reason,
        )

    @staticmethod
    def _latency_ms(complaint: Complaint) -> int:
        created_at = complaint.created_at or utcnow()
        return max(0, int((utcnow() - ensure_utc(created_at)).total_seconds() * 1000))

    def process_complaint(self, complaint_id: str) -> ServiceResult[AssignmentResultResponse]:
        """
        Manually trigger automated assignment for one complaint.

        The complaint must be open and unassigned and its category enabled
        for automated assignment. The student is told about the assignment
        once it is committed.
        """
        try:
            with self.transaction():
                complaint = self.complaint_repository.get_by_id(complaint_id, for_update=True)
                ensure_assignable(ComplaintState.of(complaint))

                config = self.config_provider.get_config()
                if not config.is_enabled_for(complaint.category):
                    raise BusinessRuleViolationError(
                        f"Automated assignment is disabled for {complaint.category.value} complaints",
                        details={"category": complaint.category.value},
                    )

                result = self.apply(complaint, config)
                if result.assigned:
                    event = ComplaintEvent.of(complaint)
                    self.after_commit(
                        lambda: self.notifier.status_changed(event, event.status, AUTOMATION_ACTOR)
                    )

            message = (
                f"Complaint assigned to {result.staff_name}"
                if result.assigned
                else "No eligible staff member available; complaint left unassigned"
            )
            return ServiceResult.success(result, message=message)
        except Exception as e:
            return self._handle_exception(e, "process automated assignment", complaint_id)

    # -------------------------------------------------------------------------
    # Efficiency & reporting
    # -------------------------------------------------------------------------

    def recompute_efficiency(self, staff_id: str) -> EfficiencyResponse:
        """Recompute a member's efficiency inside the caller's transaction."""
        return self.staff_service.refresh_efficiency(staff_id)

    def get_stats(self) -> ServiceResult[AssignmentStatsResponse]:
        """
        Automated assignment statistics.

        success_rate is the share of all complaints placed by the engine;
        average latency covers the most recent automatic assignments.
        """
        try:
            with self.transaction():
                config = self.config_provider.get_config()
                summary = self.complaint_repository.assignment_summary(latency_window=LATENCY_WINDOW)
                below = self.repository.count_below_efficiency(config.efficiency_threshold)

            total = summary["total_complaints"]
            auto_processed = summary["auto_processed"]
            latencies = summary["recent_latencies_ms"]

            stats = AssignmentStatsResponse(
                total_complaints=total,
                auto_processed=auto_processed,
                average_latency_ms=round(mean(latencies), 2) if latencies else 0.0,
                success_rate=round(auto_processed / total * 100, 2) if total else 0.0,
                members_below_threshold=below,
                efficiency_threshold=config.efficiency_threshold,
                enabled_globally=config.enabled_globally,
            )
            return ServiceResult.success(stats)
        except Exception as e:
            return self._handle_exception(e, "get assignment statistics")
