"""In-memory task store for development and tests."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from approvalflow.core.domain.models import Task
from approvalflow.core.interfaces.task_store import TaskStoreProtocol


class InMemoryTaskStore(TaskStoreProtocol):
    """Dictionary-backed task store.

    Every read and write goes through a deep copy, so callers never share
    state with the stored records.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        for task in tasks:
            self._tasks[task.task_id] = copy.deepcopy(task)

    async def save_task(self, task: Task) -> Task:
        """Create or replace a task record."""
        self._tasks[task.task_id] = copy.deepcopy(task)
        return copy.deepcopy(task)

    async def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return copy.deepcopy(task) if task is not None else None

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> Task:
        current = self._tasks[task_id]
        updated = replace(current, **copy.deepcopy(fields))
        self._tasks[task_id] = updated
        return copy.deepcopy(updated)

    async def list_tasks(self) -> list[Task]:
        return [copy.deepcopy(task) for task in self._tasks.values()]
