"""Directory adapters."""

from approvalflow.infrastructure.directory.in_memory_directory import InMemoryDirectory

__all__ = ["InMemoryDirectory"]
