from hostel_complaints.services.notification.notification_dispatcher import (
    ComplaintEvent,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    NotificationService,
    WebhookNotificationDispatcher,
    build_dispatcher,
    check_admin_recipients,
)

__all__ = [
    "ComplaintEvent",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "NotificationService",
    "WebhookNotificationDispatcher",
    "build_dispatcher",
    "check_admin_recipients",
]
