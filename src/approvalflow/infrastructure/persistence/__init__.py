"""Task store adapters."""

from approvalflow.infrastructure.persistence.file_task_store import FileTaskStore
from approvalflow.infrastructure.persistence.in_memory_task_store import InMemoryTaskStore

__all__ = ["FileTaskStore", "InMemoryTaskStore"]
