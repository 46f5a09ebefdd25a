"""Escalation path construction.

The path is advisory metadata on a request: an external scheduler that
watches ``due_date`` decides when and how to escalate along it.
"""

from __future__ import annotations

from collections.abc import Sequence

from approvalflow.application.approver_resolver import find_department_head
from approvalflow.core.domain.enums import UserRole
from approvalflow.core.domain.models import User


def build_escalation_path(requester: User, users: Sequence[User]) -> list[str]:
    """Return manager -> department head -> admins, without duplicates."""
    path: list[str] = []
    if requester.manager_id:
        path.append(requester.manager_id)

    head = find_department_head(requester, users)
    if head is not None and head.user_id not in path:
        path.append(head.user_id)

    for user in users:
        if user.role is UserRole.ADMIN and user.user_id not in path:
            path.append(user.user_id)
    return path
