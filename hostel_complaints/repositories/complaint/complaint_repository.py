"""
Complaint repository with filtered listing, history append and reporting queries.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import ComplaintNotFoundError
from hostel_complaints.models.base.enums import (
    OPEN_STATUSES,
    ComplaintCategory,
    ComplaintStatus,
    MaintenanceSubCategory,
)
from hostel_complaints.models.complaint.complaint import Complaint
from hostel_complaints.models.complaint.complaint_status_history import ComplaintStatusHistory
from hostel_complaints.repositories.base.base_repository import BaseRepository

STATUS_FILTER_ALL = "All"
STATUS_FILTER_ACTIVE = "Active"
STATUS_FILTER_LOCKED = "Locked"


@dataclass
class ComplaintSearchCriteria:
    """Filters accepted by the administrative complaint listing."""

    status: str = STATUS_FILTER_ALL
    category: Optional[ComplaintCategory] = None
    sub_category: Optional[MaintenanceSubCategory] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 10


@dataclass
class ResolutionRecord:
    """Timing facts about one resolution credited to a staff member."""

    created_at: datetime
    resolved_at: datetime
    reopen_count: int


class ComplaintRepository(BaseRepository[Complaint]):
    """Repository for complaints and their status history."""

    def __init__(self, db: Session):
        super().__init__(Complaint, db)

    def get_by_id(self, id: str, for_update: bool = False) -> Complaint:
        complaint = self.find_by_id(id, for_update=for_update)
        if not complaint:
            raise ComplaintNotFoundError(id)
        return complaint

    # ==================== History ====================

    def append_history(
        self,
        complaint: Complaint,
        status: ComplaintStatus,
        note: Optional[str] = None,
        staff_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> ComplaintStatusHistory:
        """
        Append a status history entry at the next position.

        Existing entries are never touched; the UNIQUE (complaint_id, position)
        constraint rejects a concurrent writer that raced for the same slot.
        """
        entry = ComplaintStatusHistory(
            position=len(complaint.status_history),
            status=status,
            note=note,
            staff_id=staff_id,
        )
        if timestamp is not None:
            entry.timestamp = timestamp
        complaint.status_history.append(entry)
        return entry

    # ==================== Listing ====================

    def list_by_student(self, student_id: str) -> List[Complaint]:
        query = (
            select(Complaint)
            .where(Complaint.student_id == student_id)
            .order_by(Complaint.created_at.desc(), Complaint.id)
        )
        return list(self.db.execute(query).scalars().all())

    def search(self, criteria: ComplaintSearchCriteria) -> Tuple[List[Complaint], int]:
        """
        Filtered, paginated complaint listing.

        Returns:
            Tuple of (page of complaints newest first, total matching count)
        """
        conditions = self._build_conditions(criteria)

        total_query = select(func.count(Complaint.id)).where(*conditions)
        total = int(self.db.execute(total_query).scalar_one())

        query = (
            select(Complaint)
            .where(*conditions)
            .order_by(Complaint.created_at.desc(), Complaint.id)
            .offset((criteria.page - 1) * criteria.limit)
            .limit(criteria.limit)
        )
        return list(self.db.execute(query).scalars().all()), total

    def _build_conditions(self, criteria: ComplaintSearchCriteria) -> List[Any]:
        conditions: List[Any] = []

        if criteria.status == STATUS_FILTER_ACTIVE:
            conditions.append(Complaint.status.in_(OPEN_STATUSES))
        elif criteria.status == STATUS_FILTER_LOCKED:
            conditions.append(
                and_(Complaint.status == ComplaintStatus.RESOLVED, Complaint.is_locked.is_(True))
            )
        elif criteria.status and criteria.status != STATUS_FILTER_ALL:
            conditions.append(Complaint.status == ComplaintStatus(criteria.status))

        if criteria.category:
            conditions.append(Complaint.category == criteria.category)
        if criteria.sub_category:
            conditions.append(Complaint.sub_category == criteria.sub_category)

        if criteria.from_date:
            start = datetime.combine(criteria.from_date, time.min, tzinfo=timezone.utc)
            conditions.append(Complaint.created_at >= start)
        if criteria.to_date:
            end = datetime.combine(criteria.to_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            conditions.append(Complaint.created_at < end)

        if criteria.search:
            escaped = (
                criteria.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            pattern = f"%{escaped}%"
            conditions.append(
                or_(
                    Complaint.description.ilike(pattern, escape="\\"),
                    Complaint.student_name.ilike(pattern, escape="\\"),
                )
            )

        return conditions

    def status_counts(self) -> Dict[str, int]:
        """Counts for the dashboard summary across all complaints."""
        query = select(
            func.count(Complaint.id),
            func.sum(case((Complaint.status.in_(OPEN_STATUSES), 1), else_=0)),
            func.sum(case((Complaint.status == ComplaintStatus.RESOLVED, 1), else_=0)),
            func.sum(case((Complaint.is_locked.is_(True), 1), else_=0)),
            func.sum(case((Complaint.status == ComplaintStatus.CLOSED, 1), else_=0)),
        )
        total, active, resolved, locked, closed = self.db.execute(query).one()
        return {
            "active": int(active or 0),
            "resolved": int(resolved or 0),
            "locked": int(locked or 0),
            "closed": int(closed or 0),
            "total": int(total or 0),
        }

    # ==================== Reporting ====================

    def resolutions_for_staff(self, staff_id: str) -> List[ResolutionRecord]:
        """Resolutions currently credited to a staff member."""
        query = (
            select(Complaint.created_at, Complaint.resolved_at, Complaint.reopen_count)
            .where(Complaint.resolved_by_staff_id == staff_id)
            .where(Complaint.resolved_at.is_not(None))
            .where(Complaint.status.in_((ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED)))
        )
        return [
            ResolutionRecord(created_at=row[0], resolved_at=row[1], reopen_count=row[2] or 0)
            for row in self.db.execute(query).all()
        ]

    def assignment_summary(self, latency_window: int = 100) -> Dict[str, Any]:
        """Totals and recent latency for automatically assigned complaints."""
        total = int(self.db.execute(select(func.count(Complaint.id))).scalar_one())
        auto_processed = int(
            self.db.execute(
                select(func.count(Complaint.id)).where(Complaint.auto_assigned.is_(True))
            ).scalar_one()
        )

        recent = (
            select(Complaint.assignment_latency_ms)
            .where(Complaint.auto_assigned.is_(True))
            .where(Complaint.assignment_latency_ms.is_not(None))
            .order_by(Complaint.created_at.desc())
            .limit(latency_window)
        )
        latencies = [row[0] for row in self.db.execute(recent).all()]

        return {
            "total_complaints": total,
            "auto_processed": auto_processed,
            "recent_latencies_ms": latencies,
        }
