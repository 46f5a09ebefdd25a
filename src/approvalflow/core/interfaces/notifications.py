"""Notification Sink Protocol.

Delivery is best-effort: the approval service dispatches notifications
in the background and only logs failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from approvalflow.core.domain.enums import NotificationKind


class NotificationSinkProtocol(Protocol):
    """Protocol for delivering approval events to users."""

    async def notify(
        self,
        request_id: str,
        recipient_ids: list[str],
        kind: NotificationKind,
    ) -> None:
        """Deliver an approval event.

        Args:
            request_id: Approval request the event refers to.
            recipient_ids: Users to notify.
            kind: Requested, approved or rejected.
        """
        ...
