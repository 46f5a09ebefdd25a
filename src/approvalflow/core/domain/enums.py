"""
Core Domain Enums

Defines all status values, roles and rule vocabulary
to eliminate magic strings throughout the codebase.
"""

from enum import Enum


class UserRole(str, Enum):
    """Directory role of a user."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    VIEWER = "viewer"


class TaskPriority(str, Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(str, Enum):
    """Work status of a task as tracked by the task store."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    DONE = "done"


class ApprovalStatus(str, Enum):
    """Status of an approval request. Non-pending values are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalStatus.PENDING


class ApprovalType(str, Enum):
    """Quorum discipline applied to an approval request."""

    PARALLEL = "parallel"
    ANY_ONE = "any_one"
    SEQUENTIAL = "sequential"


class VoteDecision(str, Enum):
    """Decision carried by a single vote."""

    APPROVED = "approved"
    REJECTED = "rejected"


class ApproverType(str, Enum):
    """How an approver spec is expanded into concrete users."""

    USER = "user"
    ROLE = "role"
    MANAGER = "manager"
    DEPARTMENT_HEAD = "department_head"


class ConditionOperator(str, Enum):
    """Comparison operators supported in rule conditions."""

    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IN = "in"
    CONTAINS = "contains"


class NotificationKind(str, Enum):
    """Kinds of events delivered to the notification sink."""

    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
