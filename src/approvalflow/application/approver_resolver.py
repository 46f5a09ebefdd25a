"""Approver resolution.

Expands abstract approver specs into concrete directory users.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from approvalflow.core.domain.approval_rule import ApproverSpec
from approvalflow.core.domain.enums import ApproverType, UserRole
from approvalflow.core.domain.models import User

logger = structlog.get_logger(__name__)


def find_department_head(requester: User, users: Sequence[User]) -> User | None:
    """Return the first manager-role user in the requester's department."""
    if not requester.department:
        return None
    for user in users:
        if user.role is UserRole.MANAGER and user.department == requester.department:
            return user
    return None


def _find_user(user_id: str | None, users: Sequence[User]) -> User | None:
    if not user_id:
        return None
    for user in users:
        if user.user_id == user_id:
            return user
    return None


def _expand(spec: ApproverSpec, requester: User, users: Sequence[User]) -> list[User]:
    if spec.type is ApproverType.USER:
        user = _find_user(spec.identifier, users)
        return [user] if user else []
    if spec.type is ApproverType.ROLE:
        return [u for u in users if u.active and u.role.value == spec.identifier]
    if spec.type is ApproverType.MANAGER:
        manager = _find_user(requester.manager_id, users)
        return [manager] if manager else []
    if spec.type is ApproverType.DEPARTMENT_HEAD:
        head = find_department_head(requester, users)
        return [head] if head else []
    return []


def resolve_approvers(
    specs: Sequence[ApproverSpec],
    requester: User,
    users: Sequence[User],
) -> list[User]:
    """Resolve approver specs into an ordered, duplicate-free list of users.

    Expansions are concatenated in spec order, the requester is removed,
    and duplicates are dropped keeping the first occurrence. The order is
    significant for sequential approval.

    Args:
        specs: Approver specs of the matched rule.
        requester: User asking for approval.
        users: Full directory listing.

    Returns:
        Resolved approvers; may be empty.
    """
    resolved: list[User] = []
    seen: set[str] = {requester.user_id}
    for spec in specs:
        for user in _expand(spec, requester, users):
            if user.user_id in seen:
                continue
            seen.add(user.user_id)
            resolved.append(user)

    logger.debug(
        "approver_resolver.resolved",
        requester_id=requester.user_id,
        approvers=[u.user_id for u in resolved],
    )
    return resolved
