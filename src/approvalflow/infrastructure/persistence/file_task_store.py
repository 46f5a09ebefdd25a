"""
File-Based Task Store

JSON-file implementation of TaskStoreProtocol for development setups
where no database is available:

- One file per task at ``{work_dir}/tasks/{task_id}.json``
- Async file I/O using aiofiles
- Atomic writes (write to temp file, then rename)
- Per-task asyncio locks around read-modify-write
- Task ids restricted to safe file names (no path traversal)

I/O and decoding errors propagate to the caller.
"""

from __future__ import annotations

import asyncio
import json
import re
import weakref
from dataclasses import replace
from pathlib import Path
from typing import Any

import aiofiles
import structlog

from approvalflow.core.domain.models import Task
from approvalflow.core.interfaces.task_store import TaskStoreProtocol

# Task ids become file names; path separators and leading dots are refused
_TASK_ID_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


class FileTaskStore(TaskStoreProtocol):
    """
    File-based task persistence implementing TaskStoreProtocol.

    Example:
        >>> store = FileTaskStore(work_dir=".approvalflow")
        >>> await store.save_task(Task(task_id="t-1", requester_id="u-1"))
        >>> loaded = await store.get_task("t-1")
        >>> assert loaded.requester_id == "u-1"
    """

    def __init__(self, work_dir: str = ".approvalflow") -> None:
        self.work_dir = Path(work_dir)
        self.tasks_dir = self.work_dir / "tasks"
        self.tasks_dir.mkdir(parents=True, exist_ok=True)
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_lock = asyncio.Lock()
        self.logger = structlog.get_logger(__name__).bind(component="file_task_store")

    @staticmethod
    def is_valid_task_id(task_id: str) -> bool:
        """Return True if ``task_id`` can be stored as a file name."""
        return bool(_TASK_ID_PATTERN.fullmatch(task_id))

    def _task_file(self, task_id: str) -> Path:
        if not self.is_valid_task_id(task_id):
            raise ValueError(f"Invalid task id: {task_id!r}")
        return self.tasks_dir / f"{task_id}.json"

    async def _get_lock(self, task_id: str) -> asyncio.Lock:
        """Get or create the lock for a task."""
        async with self._locks_lock:
            lock = self._locks.get(task_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[task_id] = lock
            return lock

    async def _read(self, task_id: str) -> Task | None:
        task_file = self._task_file(task_id)
        if not task_file.exists():
            return None
        async with aiofiles.open(task_file, encoding="utf-8") as f:
            content = await f.read()
        task = Task.from_dict(json.loads(content))
        if task.task_id != task_id:
            raise ValueError(
                f"Task file {task_file.name} holds task {task.task_id!r}, expected {task_id!r}"
            )
        return task

    async def _write(self, task: Task) -> None:
        task_file = self._task_file(task.task_id)
        temp_file = self.tasks_dir / f"{task.task_id}.json.tmp"
        payload = json.dumps(task.to_dict(), indent=2, ensure_ascii=False)
        async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
            await f.write(payload)
        temp_file.replace(task_file)

    async def save_task(self, task: Task) -> Task:
        """Create or replace a task record."""
        async with await self._get_lock(task.task_id):
            await self._write(task)
        self.logger.debug("task_saved", task_id=task.task_id)
        return task

    async def get_task(self, task_id: str) -> Task | None:
        if not self.is_valid_task_id(task_id):
            return None
        return await self._read(task_id)

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> Task:
        if not self.is_valid_task_id(task_id):
            raise KeyError(task_id)
        async with await self._get_lock(task_id):
            current = await self._read(task_id)
            if current is None:
                raise KeyError(task_id)
            updated = replace(current, **fields)
            await self._write(updated)
        self.logger.debug("task_updated", task_id=task_id, fields=sorted(fields))
        return updated

    async def list_tasks(self) -> list[Task]:
        tasks: list[Task] = []
        for task_file in sorted(self.tasks_dir.glob("*.json")):
            task = await self._read(task_file.stem)
            if task is not None:
                tasks.append(task)
        return tasks
