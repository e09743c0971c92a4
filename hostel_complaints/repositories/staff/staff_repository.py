"""
Staff member repository.

Workload changes are issued as single UPDATE statements so that concurrent
assignments cannot overrun the workload cap through read-then-write races.
"""

from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import StaffMemberNotFoundError
from hostel_complaints.models.base.enums import OPEN_STATUSES, StaffCategory
from hostel_complaints.models.base.types import utcnow
from hostel_complaints.models.complaint.complaint import Complaint
from hostel_complaints.models.staff.staff_member import StaffMember
from hostel_complaints.repositories.base.base_repository import BaseRepository


class StaffRepository(BaseRepository[StaffMember]):
    """Repository for staff members and their workload counters."""

    def __init__(self, db: Session):
        super().__init__(StaffMember, db)

    def get_by_id(self, id: str, for_update: bool = False) -> StaffMember:
        staff = self.find_by_id(id, for_update=for_update)
        if not staff:
            raise StaffMemberNotFoundError(id)
        return staff

    # ==================== Queries ====================

    def list_members(self, include_inactive: bool = False) -> List[StaffMember]:
        query = select(StaffMember).order_by(StaffMember.category, StaffMember.name)
        if not include_inactive:
            query = query.where(StaffMember.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def find_by_category(
        self,
        category: StaffCategory,
        include_inactive: bool = False,
        for_update: bool = False,
    ) -> List[StaffMember]:
        """Members of a category ordered by creation time."""
        query = (
            select(StaffMember)
            .where(StaffMember.category == category)
            .order_by(StaffMember.created_at, StaffMember.id)
        )
        if not include_inactive:
            query = query.where(StaffMember.is_active.is_(True))
        if for_update and self.supports_row_locks:
            query = query.with_for_update()
        return list(self.db.execute(query).scalars().all())

    def find_active_by_category(self, category: StaffCategory) -> List[StaffMember]:
        return self.find_by_category(category, include_inactive=False)

    def count_active_in_category(self, category: StaffCategory) -> int:
        query = (
            select(func.count(StaffMember.id))
            .where(StaffMember.category == category)
            .where(StaffMember.is_active.is_(True))
        )
        return int(self.db.execute(query).scalar_one())

    def count_below_efficiency(self, threshold: float) -> int:
        query = (
            select(func.count(StaffMember.id))
            .where(StaffMember.is_active.is_(True))
            .where(StaffMember.efficiency_score < threshold)
        )
        return int(self.db.execute(query).scalar_one())

    # ==================== Atomic workload bookkeeping ====================

    def try_claim(self, staff_id: str, max_workload: int) -> bool:
        """
        Increment a member's workload if and only if it is below the cap.

        Issued as one conditional UPDATE; of several concurrent claims on
        the last free slot exactly one can match the row.

        Returns:
            True if the slot was claimed
        """
        stmt = (
            update(StaffMember)
            .where(StaffMember.id == staff_id)
            .where(StaffMember.is_active.is_(True))
            .where(StaffMember.current_workload < max_workload)
            .values(
                current_workload=StaffMember.current_workload + 1,
                last_active=utcnow(),
            )
        )
        return self._execute_update(stmt, [staff_id]) == 1

    def increment_workload(self, staff_id: str) -> None:
        """Uncapped increment used for manual administrative assignment."""
        stmt = (
            update(StaffMember)
            .where(StaffMember.id == staff_id)
            .values(
                current_workload=StaffMember.current_workload + 1,
                last_active=utcnow(),
            )
        )
        self._execute_update(stmt, [staff_id])

    def decrement_workload(self, staff_id: str) -> None:
        """Release one open assignment, never going below zero."""
        stmt = (
            update(StaffMember)
            .where(StaffMember.id == staff_id)
            .where(StaffMember.current_workload > 0)
            .values(current_workload=StaffMember.current_workload - 1)
        )
        self._execute_update(stmt, [staff_id])

    def recompute_workloads(self, staff_ids: Iterable[str]) -> None:
        """
        Reset workload counters to the number of open assigned complaints.

        One UPDATE with a correlated count subquery for all given members.
        """
        ids = list(staff_ids)
        if not ids:
            return

        open_count = (
            select(func.count(Complaint.id))
            .where(Complaint.assigned_staff_id == StaffMember.id)
            .where(Complaint.status.in_(OPEN_STATUSES))
            .scalar_subquery()
        )
        stmt = (
            update(StaffMember)
            .where(StaffMember.id.in_(ids))
            .values(current_workload=open_count)
        )
        self._execute_update(stmt, ids)

    def touch(self, staff_id: str) -> None:
        """Bump last_active to now."""
        stmt = (
            update(StaffMember)
            .where(StaffMember.id == staff_id)
            .values(last_active=utcnow())
        )
        self._execute_update(stmt, [staff_id])

    def set_efficiency(self, staff_id: str, score: float) -> None:
        stmt = (
            update(StaffMember)
            .where(StaffMember.id == staff_id)
            .values(efficiency_score=score)
        )
        self._execute_update(stmt, [staff_id])

    def _execute_update(self, stmt, staff_ids: List[str]) -> int:
        """
        Run a bulk UPDATE against staff_members.

        Pending ORM changes are flushed first so the statement sees them, and
        in-session copies of the touched rows are expired afterwards so the
        next attribute access reloads the new counters.
        """
        self.db.flush()
        result = self.db.execute(stmt.execution_options(synchronize_session=False))

        for staff_id in staff_ids:
            key = Session.identity_key(StaffMember, staff_id)
            instance: Optional[StaffMember] = self.db.identity_map.get(key)
            if instance is not None:
                self.db.expire(instance)

        return result.rowcount
