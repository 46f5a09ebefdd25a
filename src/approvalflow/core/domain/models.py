"""
Directory and task snapshots read by the approval engine.

Users belong to the directory service and tasks to the task store; the
engine only reads them, apart from writing back a task's ``approval``
association and flipping its status on terminal transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from approvalflow.core.domain.enums import TaskPriority, TaskStatus, UserRole
from approvalflow.core.utils.time import parse_datetime

if TYPE_CHECKING:
    from approvalflow.core.domain.approval_request import ApprovalRequest


@dataclass(frozen=True)
class User:
    """A directory user.

    Attributes:
        user_id: Unique identifier.
        role: Directory role.
        manager_id: Id of the direct manager (back-reference, not ownership).
        department: Department name, if any.
        approval_limit: Maximum value this user may approve.
        email: Contact address used by notification sinks.
        display_name: Human-readable name.
        active: Inactive users are never resolved from role specs.
    """

    user_id: str
    role: UserRole = UserRole.MEMBER
    manager_id: str | None = None
    department: str | None = None
    approval_limit: float | None = None
    email: str = ""
    display_name: str = ""
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "user_id": self.user_id,
            "role": self.role.value,
            "manager_id": self.manager_id,
            "department": self.department,
            "approval_limit": self.approval_limit,
            "email": self.email,
            "display_name": self.display_name,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        """Deserialize from stored dict."""
        limit = data.get("approval_limit")
        return cls(
            user_id=str(data["user_id"]),
            role=UserRole(data.get("role", UserRole.MEMBER.value)),
            manager_id=data.get("manager_id"),
            department=data.get("department"),
            approval_limit=float(limit) if limit is not None else None,
            email=str(data.get("email", "")),
            display_name=str(data.get("display_name", "")),
            active=bool(data.get("active", True)),
        )


@dataclass
class Task:
    """Snapshot of a task record as held by the task store."""

    task_id: str
    requester_id: str
    priority: TaskPriority = TaskPriority.MEDIUM
    project_id: str = ""
    tags: list[str] = field(default_factory=list)
    estimated_value: float | None = None
    title: str = ""
    department: str | None = None
    status: TaskStatus = TaskStatus.TODO
    start_date: datetime | None = None
    approval: ApprovalRequest | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "task_id": self.task_id,
            "requester_id": self.requester_id,
            "priority": self.priority.value,
            "project_id": self.project_id,
            "tags": list(self.tags),
            "estimated_value": self.estimated_value,
            "title": self.title,
            "department": self.department,
            "status": self.status.value,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "approval": self.approval.to_dict() if self.approval else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Deserialize from stored dict."""
        from approvalflow.core.domain.approval_request import ApprovalRequest

        approval_raw = data.get("approval")
        value = data.get("estimated_value")
        return cls(
            task_id=str(data["task_id"]),
            requester_id=str(data.get("requester_id", "")),
            priority=TaskPriority(data.get("priority", TaskPriority.MEDIUM.value)),
            project_id=str(data.get("project_id", "")),
            tags=[str(tag) for tag in data.get("tags", [])],
            estimated_value=float(value) if value is not None else None,
            title=str(data.get("title", "")),
            department=data.get("department"),
            status=TaskStatus(data.get("status", TaskStatus.TODO.value)),
            start_date=parse_datetime(data.get("start_date")),
            approval=ApprovalRequest.from_dict(approval_raw) if approval_raw else None,
        )
