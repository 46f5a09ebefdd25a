"""Domain-specific exception types for the approval engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ApprovalError(Exception):
    """Base exception for approval domain errors."""

    message: str
    code: str = "approval_error"
    details: Dict[str, Any] | None = None
    status_code: int | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}


class TaskNotFoundError(ApprovalError):
    """Error raised when the task store has no record for a task id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            message=f"Task not found: {task_id}",
            code="task_not_found",
            details={"task_id": task_id},
            status_code=404,
        )


class UserNotFoundError(ApprovalError):
    """Error raised when the directory has no record for a user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            message=f"User not found: {user_id}",
            code="user_not_found",
            details={"user_id": user_id},
            status_code=404,
        )


class RequestNotFoundError(ApprovalError):
    """Error raised when no task carries the given approval request."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            message=f"Approval request not found: {request_id}",
            code="request_not_found",
            details={"request_id": request_id},
            status_code=404,
        )


class NoApproversResolvedError(ApprovalError):
    """A rule matched but nobody qualified as approver.

    This is a configuration fault in the rule catalog or the directory,
    and is fatal to request creation.
    """

    def __init__(self, rule_id: str, requester_id: str) -> None:
        super().__init__(
            message=(
                f"Rule '{rule_id}' matched but resolved no eligible approvers "
                f"for requester '{requester_id}'"
            ),
            code="no_approvers_resolved",
            details={"rule_id": rule_id, "requester_id": requester_id},
            status_code=422,
        )


class NotAuthorizedError(ApprovalError):
    """Error raised when a voter may not vote on a request."""

    def __init__(
        self, request_id: str, voter_id: str, *, reason: str = "not_an_approver"
    ) -> None:
        super().__init__(
            message=f"User '{voter_id}' is not authorized to vote on {request_id}",
            code="not_authorized",
            details={"request_id": request_id, "voter_id": voter_id, "reason": reason},
            status_code=403,
        )


class AlreadyVotedError(ApprovalError):
    """Error raised on a second vote by the same approver."""

    def __init__(self, request_id: str, voter_id: str) -> None:
        super().__init__(
            message=f"User '{voter_id}' has already voted on {request_id}",
            code="already_voted",
            details={"request_id": request_id, "voter_id": voter_id},
            status_code=409,
        )


class RequestClosedError(ApprovalError):
    """Error raised when voting on a request that is no longer pending."""

    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(
            message=f"Approval request {request_id} is already {status}",
            code="request_closed",
            details={"request_id": request_id, "status": status},
            status_code=409,
        )


class RequestAlreadyPendingError(ApprovalError):
    """Error raised when a task already carries a live approval request."""

    def __init__(self, task_id: str, request_id: str) -> None:
        super().__init__(
            message=f"Task {task_id} already has a pending approval request {request_id}",
            code="request_already_pending",
            details={"task_id": task_id, "request_id": request_id},
            status_code=409,
        )


class ConfigError(ApprovalError):
    """Error raised for configuration failures."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="config_error", details=details)
