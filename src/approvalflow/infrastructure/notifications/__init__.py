"""Notification sink adapters."""

from approvalflow.infrastructure.notifications.in_memory_sink import (
    InMemoryNotificationSink,
    SentNotification,
)
from approvalflow.infrastructure.notifications.logging_sink import LoggingNotificationSink

__all__ = ["InMemoryNotificationSink", "LoggingNotificationSink", "SentNotification"]
