"""Task Store Protocol.

Defines the contract for reading task snapshots and writing back the
fields the approval engine owns (``approval``, ``status``, ``start_date``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from approvalflow.core.domain.models import Task


class TaskStoreProtocol(Protocol):
    """Protocol for task persistence used by the approval service.

    Implementations must return independent snapshots: mutating a returned
    task must not change the stored record until ``update_task`` is called.
    Transport or storage failures propagate unchanged to the caller.
    """

    async def get_task(self, task_id: str) -> Task | None:
        """Load a task.

        Args:
            task_id: ID of the task.

        Returns:
            The task snapshot, or None if it does not exist.
        """
        ...

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> Task:
        """Apply a partial update to a task.

        Args:
            task_id: ID of the task.
            fields: Attribute names mapped to their new values.

        Returns:
            The updated task snapshot.

        Raises:
            KeyError: If the task does not exist.
        """
        ...

    async def list_tasks(self) -> list[Task]:
        """List all tasks.

        Returns:
            Snapshots of every stored task.
        """
        ...
