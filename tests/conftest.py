"""Test configuration and shared fixtures."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from approvalflow.application.approval_service import ApprovalService
from approvalflow.application.catalog_loader import load_rule_catalog
from approvalflow.application.vote_signer import VoteSigner
from approvalflow.core.domain.enums import TaskPriority, UserRole
from approvalflow.core.domain.models import Task, User
from approvalflow.infrastructure.directory.in_memory_directory import InMemoryDirectory
from approvalflow.infrastructure.notifications.in_memory_sink import (
    InMemoryNotificationSink,
)
from approvalflow.infrastructure.persistence.in_memory_task_store import InMemoryTaskStore

FIXED_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
SIGNING_SECRET = "test-secret"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def admin() -> User:
    return User(user_id="user-1", role=UserRole.ADMIN)


@pytest.fixture
def manager() -> User:
    return User(user_id="user-2", role=UserRole.MANAGER, department="engineering")


@pytest.fixture
def requester() -> User:
    return User(
        user_id="user-3",
        role=UserRole.MEMBER,
        manager_id="user-2",
        department="engineering",
    )


@pytest.fixture
def orphan() -> User:
    """A user with no manager."""
    return User(user_id="user-4", role=UserRole.VIEWER, department="engineering")


@pytest.fixture
def users(admin: User, manager: User, requester: User, orphan: User) -> list[User]:
    return [admin, manager, requester, orphan]


@pytest.fixture
def directory(users: list[User]) -> InMemoryDirectory:
    return InMemoryDirectory(users)


@pytest.fixture
def tasks() -> list[Task]:
    return [
        Task(task_id="task-critical", requester_id="user-3", priority=TaskPriority.CRITICAL),
        Task(task_id="task-high", requester_id="user-3", priority=TaskPriority.HIGH),
        Task(task_id="task-low", requester_id="user-3", priority=TaskPriority.LOW),
        Task(task_id="task-orphan", requester_id="user-4", priority=TaskPriority.HIGH),
    ]


@pytest.fixture
def task_store(tasks: list[Task]) -> InMemoryTaskStore:
    return InMemoryTaskStore(tasks)


@pytest.fixture
def notifications() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def signer() -> VoteSigner:
    return VoteSigner(SIGNING_SECRET)


@pytest.fixture
def service(task_store, directory, notifications, signer) -> ApprovalService:
    """ApprovalService over the packaged default catalog and in-memory adapters."""
    return ApprovalService(
        task_store=task_store,
        directory=directory,
        notifications=notifications,
        catalog=load_rule_catalog(),
        signer=signer,
        clock=lambda: FIXED_NOW,
    )
