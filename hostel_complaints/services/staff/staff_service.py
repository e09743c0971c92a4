"""
Staff directory service: membership, activation and efficiency upkeep.

Members are never hard-deleted. Every category keeps at least two active
members so the assignment engine always has someone to route work to.
"""

from typing import List

from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import ConflictError
from hostel_complaints.models.base.enums import StaffCategory
from hostel_complaints.models.staff.staff_member import StaffMember
from hostel_complaints.repositories.complaint.complaint_repository import ComplaintRepository
from hostel_complaints.repositories.staff.staff_repository import StaffRepository
from hostel_complaints.schemas.staff import (
    EfficiencyResponse,
    StaffCreate,
    StaffResponse,
    StaffUpdate,
)
from hostel_complaints.services.base.base_service import BaseService
from hostel_complaints.services.base.service_result import ServiceResult
from hostel_complaints.services.staff.efficiency import score_from_resolutions
from hostel_complaints.services.staff.staff_rules import ensure_can_deactivate, validate_staff_fields


class StaffService(BaseService[StaffRepository]):
    """
    Staff directory operations.

    Provides member CRUD with soft deactivation, the minimum staffing rule
    and efficiency recalculation from resolution history.
    """

    def __init__(
        self,
        repository: StaffRepository,
        complaint_repository: ComplaintRepository,
        db_session: Session,
    ):
        """
        Initialize staff service.

        Args:
            repository: Staff repository instance
            complaint_repository: Source of resolution history
            db_session: Active database session
        """
        super().__init__(repository, db_session)
        self.complaint_repository = complaint_repository

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def add_member(self, request: StaffCreate) -> ServiceResult[StaffResponse]:
        """
        Add a staff member.

        Several members may share a category; the category itself must come
        from the fixed enumeration.
        """
        try:
            validate_staff_fields(
                request.name,
                request.phone,
                request.category.value,
                request.category_expertise,
            )

            with self.transaction():
                staff = self.repository.create(
                    StaffMember(
                        name=request.name.strip(),
                        phone=request.phone,
                        category=request.category,
                        category_expertise=dict(request.category_expertise),
                        efficiency_score=request.efficiency_score,
                        current_workload=0,
                        is_active=True,
                    )
                )

            self._log_operation("add staff member", staff.id, extra={"category": staff.category.value})
            return ServiceResult.success(
                StaffResponse.model_validate(staff),
                message="Staff member added successfully",
            )
        except Exception as e:
            return self._handle_exception(e, "add staff member")

    def update_member(self, staff_id: str, request: StaffUpdate) -> ServiceResult[StaffResponse]:
        """
        Update an active member in place.

        The merged record is validated as a whole, so the phone format is
        re-checked even when only the name changes. Moving a member to
        another department counts as leaving the old one for the minimum
        staffing rule.
        """
        try:
            with self.transaction():
                staff = self.repository.get_by_id(staff_id, for_update=True)
                if not staff.is_active:
                    raise ConflictError("Inactive staff members cannot be updated; reactivate first")

                changes = request.model_dump(exclude_unset=True, exclude_none=True)
                merged_category = changes.get("category", staff.category)
                validate_staff_fields(
                    changes.get("name", staff.name),
                    changes.get("phone", staff.phone),
                    StaffCategory(merged_category).value,
                    changes.get("category_expertise", staff.category_expertise),
                )

                if merged_category != staff.category:
                    active = self.repository.find_by_category(staff.category, for_update=True)
                    ensure_can_deactivate(staff.category, len(active))

                if "name" in changes:
                    changes["name"] = changes["name"].strip()
                if "category_expertise" in changes:
                    changes["category_expertise"] = dict(changes["category_expertise"])

                for key, value in changes.items():
                    setattr(staff, key, value)
                self.db.flush()

            self._log_operation("update staff member", staff_id, extra={"changed": sorted(changes)})
            return ServiceResult.success(
                StaffResponse.model_validate(staff),
                message="Staff member updated successfully",
            )
        except Exception as e:
            return self._handle_exception(e, "update staff member", staff_id)

    def deactivate(self, staff_id: str) -> ServiceResult[StaffResponse]:
        """
        Soft-delete a member.

        Rejected when the member's category would be left with fewer than
        two active members. The category's active rows are locked first so
        two concurrent deactivations cannot both pass the check.
        """
        try:
            with self.transaction():
                staff = self.repository.get_by_id(staff_id)
                if not staff.is_active:
                    raise ConflictError("Staff member is already inactive")

                active = self.repository.find_by_category(staff.category, for_update=True)
                ensure_can_deactivate(staff.category, len(active))

                staff.is_active = False
                self.db.flush()

            self._log_operation("deactivate staff member", staff_id, extra={"category": staff.category.value})
            return ServiceResult.success(
                StaffResponse.model_validate(staff),
                message="Staff member deactivated successfully",
            )
        except Exception as e:
            return self._handle_exception(e, "deactivate staff member", staff_id)

    def reactivate(self, staff_id: str) -> ServiceResult[StaffResponse]:
        try:
            with self.transaction():
                staff = self.repository.get_by_id(staff_id, for_update=True)
                if staff.is_active:
                    raise ConflictError("Staff member is already active")

                validate_staff_fields(staff.name, staff.phone, staff.category.value, staff.category_expertise)
                staff.is_active = True
                self.db.flush()
                self.repository.recompute_workloads([staff.id])

            self._log_operation("reactivate staff member", staff_id)
            return ServiceResult.success(
                StaffResponse.model_validate(staff),
                message="Staff member reactivated successfully",
            )
        except Exception as e:
            return self._handle_exception(e, "reactivate staff member", staff_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_members(self, include_inactive: bool = False) -> ServiceResult[List[StaffResponse]]:
        try:
            members = self.repository.list_members(include_inactive=include_inactive)
            return ServiceResult.success(
                [StaffResponse.model_validate(m) for m in members],
                metadata={"count": len(members)},
            )
        except Exception as e:
            return self._handle_exception(e, "list staff members")

    def list_by_category(
        self,
        category: StaffCategory,
        include_inactive: bool = False,
    ) -> ServiceResult[List[StaffResponse]]:
        try:
            members = self.repository.find_by_category(category, include_inactive=include_inactive)
            return ServiceResult.success(
                [StaffResponse.model_validate(m) for m in members],
                metadata={"count": len(members), "category": category.value},
            )
        except Exception as e:
            return self._handle_exception(e, "list staff members by category", category.value)

    # -------------------------------------------------------------------------
    # Efficiency
    # -------------------------------------------------------------------------

    def refresh_efficiency(self, staff_id: str) -> EfficiencyResponse:
        """
        Recompute one member's efficiency inside the caller's transaction.

        Members without any credited resolution keep their current score.

        Raises:
            StaffMemberNotFoundError: Unknown member
        """
        staff = self.repository.get_by_id(staff_id)
        previous = float(staff.efficiency_score)

        records = self.complaint_repository.resolutions_for_staff(staff_id)
        score = score_from_resolutions(records)
        if score is not None and score != previous:
            self.repository.set_efficiency(staff_id, score)

        return EfficiencyResponse(
            staff_id=staff.id,
            name=staff.name,
            previous_score=previous,
            efficiency_score=previous if score is None else score,
            current_workload=staff.current_workload,
            resolutions_counted=len(records),
        )

    def recalculate_efficiency(self, staff_id: str) -> ServiceResult[EfficiencyResponse]:
        """Recompute workload and efficiency for one member."""
        try:
            with self.transaction():
                self.repository.get_by_id(staff_id)
                self.repository.recompute_workloads([staff_id])
                result = self.refresh_efficiency(staff_id)

            self._log_operation(
                "recalculate efficiency",
                staff_id,
                extra={"previous_score": result.previous_score, "efficiency_score": result.efficiency_score},
            )
            return ServiceResult.success(result, message="Efficiency recalculated")
        except Exception as e:
            return self._handle_exception(e, "recalculate efficiency", staff_id)

    def recalculate_all(self) -> ServiceResult[List[EfficiencyResponse]]:
        """Recompute workload and efficiency for every active member."""
        try:
            with self.transaction():
                ids = [m.id for m in self.repository.list_members()]
                self.repository.recompute_workloads(ids)
                results = [self.refresh_efficiency(staff_id) for staff_id in ids]

            self._log_operation("recalculate efficiency for all members", extra={"members": len(results)})
            return ServiceResult.success(
                results,
                message=f"Efficiency recalculated for {len(results)} staff members",
                metadata={"count": len(results)},
            )
        except Exception as e:
            return self._handle_exception(e, "recalculate efficiency for all members")
