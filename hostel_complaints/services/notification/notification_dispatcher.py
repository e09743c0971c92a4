"""
Notification dispatch for complaint lifecycle events.

Delivery is best effort: dispatchers run on a shared thread pool after the
triggering transaction has committed, callers wait at most
``NOTIFICATION_TIMEOUT_SECONDS`` and failures are only logged.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Protocol

import requests

from hostel_complaints.config.settings import settings
from hostel_complaints.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComplaintEvent:
    """Detached snapshot of a complaint handed to dispatchers."""

    complaint_id: str
    student_id: str
    student_name: str
    category: str
    sub_category: Optional[str]
    description: str
    status: str
    assigned_staff_id: Optional[str] = None

    @classmethod
    def of(cls, complaint) -> "ComplaintEvent":
        return cls(
            complaint_id=complaint.id,
            student_id=complaint.student_id,
            student_name=complaint.student_name,
            category=complaint.category.value,
            sub_category=complaint.sub_category.value if complaint.sub_category else None,
            description=complaint.description,
            status=complaint.status.value,
            assigned_staff_id=complaint.assigned_staff_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NotificationDispatcher(Protocol):
    """Delivery channel for lifecycle events."""

    def notify_complaint_created(
        self, recipient_id: str, complaint: ComplaintEvent, submitter_name: str
    ) -> None:
        ...

    def notify_status_changed(
        self, recipient_id: str, complaint: ComplaintEvent, new_status: str, actor_name: str
    ) -> None:
        ...


class LoggingNotificationDispatcher:
    """Writes notifications to the application log."""

    def notify_complaint_created(
        self, recipient_id: str, complaint: ComplaintEvent, submitter_name: str
    ) -> None:
        logger.info(
            f"New {complaint.category} complaint from {submitter_name}",
            extra={"recipient_id": recipient_id, "complaint_id": complaint.complaint_id},
        )

    def notify_status_changed(
        self, recipient_id: str, complaint: ComplaintEvent, new_status: str, actor_name: str
    ) -> None:
        logger.info(
            f"Complaint status changed to {new_status} by {actor_name}",
            extra={"recipient_id": recipient_id, "complaint_id": complaint.complaint_id},
        )


class WebhookNotificationDispatcher:
    """Posts notifications as JSON to an HTTP endpoint."""

    def __init__(self, url: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, payload: Dict[str, Any]) -> None:
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()

    def notify_complaint_created(
        self, recipient_id: str, complaint: ComplaintEvent, submitter_name: str
    ) -> None:
        self._post({
            "event": "complaint_created",
            "recipient_id": recipient_id,
            "submitter_name": submitter_name,
            "complaint": complaint.to_dict(),
        })

    def notify_status_changed(
        self, recipient_id: str, complaint: ComplaintEvent, new_status: str, actor_name: str
    ) -> None:
        self._post({
            "event": "complaint_status_changed",
            "recipient_id": recipient_id,
            "new_status": new_status,
            "actor_name": actor_name,
            "complaint": complaint.to_dict(),
        })


@lru_cache()
def get_notification_executor() -> ThreadPoolExecutor:
    """Process-wide pool for notification delivery."""
    return ThreadPoolExecutor(
        max_workers=settings.NOTIFICATION_MAX_WORKERS,
        thread_name_prefix="notify",
    )


def shutdown_notification_executor() -> None:
    if get_notification_executor.cache_info().currsize:
        get_notification_executor().shutdown(wait=False)
        get_notification_executor.cache_clear()


def check_admin_recipients(recipients: Optional[Iterable[str]] = None) -> bool:
    """Warn when new complaints would reach no administrator."""
    recipients = list(settings.ADMIN_NOTIFICATION_RECIPIENTS if recipients is None else recipients)
    if not recipients:
        logger.warning(
            "ADMIN_NOTIFICATION_RECIPIENTS is empty; complaint submissions and feedback "
            "will not notify any administrator"
        )
        return False
    return True


def build_dispatcher() -> NotificationDispatcher:
    """Webhook dispatcher when a URL is configured, logging otherwise."""
    if settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotificationDispatcher(
            settings.NOTIFICATION_WEBHOOK_URL,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    return LoggingNotificationDispatcher()


class NotificationService:
    """
    Safe, time-bounded front for a ``NotificationDispatcher``.

    No method raises: timeouts and dispatcher errors are logged and the
    caller carries on.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        executor: Optional[ThreadPoolExecutor] = None,
        timeout: Optional[float] = None,
        admin_recipients: Optional[Iterable[str]] = None,
    ):
        self.dispatcher = dispatcher
        self.executor = executor or get_notification_executor()
        self.timeout = settings.NOTIFICATION_TIMEOUT_SECONDS if timeout is None else timeout
        self.admin_recipients: List[str] = list(
            settings.ADMIN_NOTIFICATION_RECIPIENTS if admin_recipients is None else admin_recipients
        )

    def complaint_created(self, complaint: ComplaintEvent, submitter_name: str) -> None:
        """Tell every administrative recipient about a new complaint."""
        self._dispatch(
            "complaint_created",
            complaint,
            [
                (self.dispatcher.notify_complaint_created, (recipient, complaint, submitter_name))
                for recipient in self.admin_recipients
            ],
        )

    def status_changed(self, complaint: ComplaintEvent, new_status: str, actor_name: str) -> None:
        """Tell the submitting student about a status change."""
        self._dispatch(
            "status_changed",
            complaint,
            [(self.dispatcher.notify_status_changed, (complaint.student_id, complaint, new_status, actor_name))],
        )

    def complaint_reopened(self, complaint: ComplaintEvent, actor_name: str) -> None:
        """Tell administrators a student rejected a resolution."""
        self._notify_admins("complaint_reopened", complaint, actor_name)

    def complaint_locked(self, complaint: ComplaintEvent, actor_name: str) -> None:
        """Tell administrators a student accepted a resolution."""
        self._notify_admins("complaint_locked", complaint, actor_name)

    def _notify_admins(self, event: str, complaint: ComplaintEvent, actor_name: str) -> None:
        self._dispatch(
            event,
            complaint,
            [
                (self.dispatcher.notify_status_changed, (recipient, complaint, complaint.status, actor_name))
                for recipient in self.admin_recipients
            ],
        )

    def _dispatch(
        self,
        event: str,
        complaint: ComplaintEvent,
        calls: List[tuple],
    ) -> None:
        if not calls:
            return

        try:
            futures = [self.executor.submit(fn, *args) for fn, args in calls]
        except RuntimeError as e:
            logger.warning(f"Notification {event} not scheduled: {e}")
            return

        done, not_done = wait(futures, timeout=self.timeout)

        for future in not_done:
            future.cancel()
        if not_done:
            logger.warning(
                f"Notification {event} timed out after {self.timeout}s",
                extra={"complaint_id": complaint.complaint_id, "pending": len(not_done)},
            )

        for future in done:
            error = future.exception()
            if error is not None:
                logger.error(
                    f"Notification {event} failed: {error}",
                    extra={"complaint_id": complaint.complaint_id, "error_type": type(error).__name__},
                )
