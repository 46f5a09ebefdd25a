"""
Core Protocol Interfaces

Protocols for the collaborators the approval engine depends on. The
application layer is written against these contracts only; concrete
adapters live in ``approvalflow.infrastructure``.

Available Protocols:
    - TaskStoreProtocol: Task snapshots and approval write-back
    - DirectoryProtocol: User lookups
    - NotificationSinkProtocol: Best-effort event delivery
"""

from approvalflow.core.interfaces.directory import DirectoryProtocol
from approvalflow.core.interfaces.notifications import NotificationSinkProtocol
from approvalflow.core.interfaces.task_store import TaskStoreProtocol

__all__ = [
    "DirectoryProtocol",
    "NotificationSinkProtocol",
    "TaskStoreProtocol",
]
