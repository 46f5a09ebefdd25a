"""In-memory notification sink for development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from approvalflow.core.domain.enums import NotificationKind
from approvalflow.core.interfaces.notifications import NotificationSinkProtocol
from approvalflow.core.utils.time import utc_now


@dataclass(frozen=True)
class SentNotification:
    """A notification captured by the in-memory sink."""

    request_id: str
    recipient_ids: tuple[str, ...]
    kind: NotificationKind
    sent_at: datetime = field(default_factory=utc_now)


class InMemoryNotificationSink(NotificationSinkProtocol):
    """Keeps every notification in a list."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def notify(
        self,
        request_id: str,
        recipient_ids: list[str],
        kind: NotificationKind,
    ) -> None:
        self.sent.append(
            SentNotification(
                request_id=request_id,
                recipient_ids=tuple(recipient_ids),
                kind=kind,
            )
        )

    def for_kind(self, kind: NotificationKind) -> list[SentNotification]:
        """Return captured notifications of one kind."""
        return [n for n in self.sent if n.kind is kind]
