"""Notification sink that records approval events in the structured log."""

from __future__ import annotations

import structlog

from approvalflow.core.domain.enums import NotificationKind
from approvalflow.core.interfaces.notifications import NotificationSinkProtocol


class LoggingNotificationSink(NotificationSinkProtocol):
    """Writes one log event per notification instead of delivering it."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__).bind(component="notifications")

    async def notify(
        self,
        request_id: str,
        recipient_ids: list[str],
        kind: NotificationKind,
    ) -> None:
        await self._logger.ainfo(
            "notification.sent",
            request_id=request_id,
            recipients=recipient_ids,
            kind=kind.value,
        )
