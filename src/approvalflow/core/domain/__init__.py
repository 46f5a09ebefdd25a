"""
Domain Models and Business Logic

This package contains the core domain of the approval engine:
- Users and task snapshots
- Approval rules, hierarchies and condition evaluation
- Approval requests, votes and the request state machine
- Configuration schemas
"""

from approvalflow.core.domain.approval_request import ApprovalRequest, Vote
from approvalflow.core.domain.approval_rule import (
    ApprovalHierarchy,
    ApprovalRule,
    ApproverSpec,
)
from approvalflow.core.domain.conditions import Condition, ConditionField, evaluate
from approvalflow.core.domain.models import Task, User

__all__ = [
    "ApprovalHierarchy",
    "ApprovalRequest",
    "ApprovalRule",
    "ApproverSpec",
    "Condition",
    "ConditionField",
    "Task",
    "User",
    "Vote",
    "evaluate",
]
