"""
Pure complaint state machine.

Every function maps the current ``ComplaintState`` plus an event to a
``Transition`` describing the next state and its side effects, or raises
the domain exception naming the violated precondition. Nothing here reads
or writes storage; the lifecycle service applies the outcome.

    Received --assign--> In Progress --resolve--> Resolved --satisfied--> locked
       |                     ^                       |
       +----> Pending <------+                       +--unsatisfied--> Pending / In Progress
                                      (elevated role) ---> Closed
"""

from dataclasses import dataclass, replace
from typing import Optional

from hostel_complaints.core.exceptions import (
    ComplaintClosedError,
    ComplaintLockedError,
    ConflictError,
    ForbiddenError,
)
from hostel_complaints.models.base.enums import OPEN_STATUSES, ComplaintStatus

REOPEN_NOTE_WITH_COMMENT = "Reopened due to feedback: {comment}"
REOPEN_NOTE_WITHOUT_COMMENT = "Complaint reopened due to unsatisfactory feedback"
LOCK_NOTE = "Complaint resolved and locked after positive feedback"
DEFAULT_STATUS_NOTE = "Status updated to {status}"

# Statuses from which the assignment engine may place a complaint
ASSIGNABLE_STATUSES = (ComplaintStatus.RECEIVED, ComplaintStatus.PENDING)


@dataclass(frozen=True)
class ComplaintState:
    """The parts of a complaint the state machine reasons about."""

    status: ComplaintStatus
    assigned_staff_id: Optional[str] = None
    is_locked: bool = False
    is_reopened: bool = False
    feedback_is_satisfied: Optional[bool] = None

    @property
    def has_feedback(self) -> bool:
        return self.feedback_is_satisfied is not None

    @property
    def holds_open_assignment(self) -> bool:
        return self.assigned_staff_id is not None and self.status in OPEN_STATUSES

    @classmethod
    def of(cls, complaint) -> "ComplaintState":
        """Snapshot the relevant fields of a complaint record."""
        return cls(
            status=complaint.status,
            assigned_staff_id=complaint.assigned_staff_id,
            is_locked=bool(complaint.is_locked),
            is_reopened=bool(complaint.is_reopened),
            feedback_is_satisfied=complaint.feedback_is_satisfied,
        )


@dataclass(frozen=True)
class Transition:
    """
    Outcome of applying an event.

    Attributes:
        previous: State before the event
        next: State after the event
        history_status: Status to append to the history; None when no entry
        note: History note
        released_staff_id: Member whose open assignment ends
        claimed_staff_id: Member who gains an open assignment
        resolved_by_staff_id: Member credited when entering Resolved
    """

    previous: ComplaintState
    next: ComplaintState
    history_status: Optional[ComplaintStatus] = None
    note: Optional[str] = None
    released_staff_id: Optional[str] = None
    claimed_staff_id: Optional[str] = None
    resolved_by_staff_id: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.history_status is None and self.previous == self.next

    @property
    def locked(self) -> bool:
        return self.next.is_locked and not self.previous.is_locked

    @property
    def entered_resolved(self) -> bool:
        return (
            self.next.status == ComplaintStatus.RESOLVED
            and self.history_status is not None
            and not self.locked
        )


def ensure_mutable(state: ComplaintState) -> None:
    """
    Reject any mutation of a terminal complaint.

    Raises:
        ComplaintClosedError: If the complaint is Closed
        ComplaintLockedError: If satisfied feedback locked the complaint
    """
    if state.status == ComplaintStatus.CLOSED:
        raise ComplaintClosedError()
    if state.is_locked:
        raise ComplaintLockedError()


def _workload_changes(state: ComplaintState, next_state: ComplaintState):
    """Members releasing and gaining an open assignment between two states."""
    before = state.assigned_staff_id if state.holds_open_assignment else None
    after = next_state.assigned_staff_id if next_state.holds_open_assignment else None
    if before == after:
        return None, None
    return before, after


def change_status(
    state: ComplaintState,
    target: ComplaintStatus,
    note: Optional[str] = None,
    staff_id: Optional[str] = None,
    can_close: bool = False,
) -> Transition:
    """
    Administrative status transition.

    Args:
        state: Current complaint state
        target: Requested status
        note: History note (defaults to "Status updated to <status>")
        staff_id: Member to assign; honoured only when target is In Progress
        can_close: Whether the caller holds a role allowed to close

    Returns:
        The transition; a no-op when re-closing a Closed complaint

    Raises:
        ComplaintClosedError: Closed complaints cannot change status
        ComplaintLockedError: Locked complaints cannot change status
        ForbiddenError: Closing without an elevated role
    """
    if state.status == ComplaintStatus.CLOSED and target == ComplaintStatus.CLOSED:
        return Transition(previous=state, next=state)

    ensure_mutable(state)

    if target == ComplaintStatus.CLOSED and not can_close:
        raise ForbiddenError("Closing a complaint requires an elevated role; resolve it instead")

    if target == ComplaintStatus.IN_PROGRESS:
        assignee = staff_id or state.assigned_staff_id
    else:
        assignee = None

    next_state = replace(
        state,
        status=target,
        assigned_staff_id=assignee,
        is_reopened=False if target in (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED) else state.is_reopened,
        # A fresh resolution needs fresh feedback
        feedback_is_satisfied=None if target == ComplaintStatus.RESOLVED else state.feedback_is_satisfied,
    )
    released, claimed = _workload_changes(state, next_state)

    return Transition(
        previous=state,
        next=next_state,
        history_status=target,
        note=note or DEFAULT_STATUS_NOTE.format(status=target.value),
        released_staff_id=released,
        claimed_staff_id=claimed,
        resolved_by_staff_id=state.assigned_staff_id if target == ComplaintStatus.RESOLVED else None,
    )


def submit_feedback(
    state: ComplaintState,
    is_satisfied: bool,
    comment: Optional[str] = None,
) -> Transition:
    """
    Student feedback on a resolution.

    Satisfied feedback locks the complaint, recording a Resolved history
    entry without changing the status.
    Unsatisfied feedback reopens it through the ordinary status transition
    to In Progress when still assigned, otherwise Pending.

    Raises:
        ComplaintClosedError: The complaint is Closed
        ComplaintLockedError: Feedback already locked the complaint
        ConflictError: Not Resolved, or feedback already recorded
    """
    ensure_mutable(state)

    if state.status != ComplaintStatus.RESOLVED:
        raise ConflictError(
            f"Feedback can only be submitted for Resolved complaints (current status: {state.status.value})"
        )
    if state.has_feedback:
        raise ConflictError("Feedback has already been submitted for this resolution")

    if is_satisfied:
        next_state = replace(
            state,
            is_locked=True,
            is_reopened=False,
            feedback_is_satisfied=True,
        )
        return Transition(
            previous=state,
            next=next_state,
            history_status=ComplaintStatus.RESOLVED,
            note=LOCK_NOTE,
        )

    target = ComplaintStatus.IN_PROGRESS if state.assigned_staff_id else ComplaintStatus.PENDING
    note = (
        REOPEN_NOTE_WITH_COMMENT.format(comment=comment)
        if comment
        else REOPEN_NOTE_WITHOUT_COMMENT
    )
    reopened = change_status(state, target, note=note)
    next_state = replace(reopened.next, is_reopened=True, feedback_is_satisfied=False)
    return replace(reopened, next=next_state)


def assign(state: ComplaintState, staff_id: str, advance_status: bool = True) -> Transition:
    """
    Automated assignment of an unassigned, open complaint.

    Raises:
        ComplaintClosedError / ComplaintLockedError: Terminal complaint
        ConflictError: Already assigned or not awaiting assignment
    """
    ensure_assignable(state)

    target = ComplaintStatus.IN_PROGRESS if advance_status else state.status
    next_state = replace(state, status=target, assigned_staff_id=staff_id)
    return Transition(
        previous=state,
        next=next_state,
        history_status=target,
        claimed_staff_id=staff_id,
    )


def ensure_assignable(state: ComplaintState) -> None:
    ensure_mutable(state)
    if state.assigned_staff_id:
        raise ConflictError("Complaint is already assigned to a staff member")
    if state.status not in ASSIGNABLE_STATUSES:
        raise ConflictError(
            f"Only Received or Pending complaints can be assigned (current status: {state.status.value})"
        )


def ensure_deletable(state: ComplaintState) -> None:
    """
    Deletion is allowed only before work has started.

    Raises:
        ConflictError: Unless the complaint is Received and unlocked
    """
    if state.is_locked:
        raise ComplaintLockedError()
    if state.status != ComplaintStatus.RECEIVED:
        raise ConflictError(
            f"Only complaints in Received status can be deleted (current status: {state.status.value})"
        )
