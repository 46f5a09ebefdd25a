"""Approval request and vote domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from approvalflow.core.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    TaskPriority,
    VoteDecision,
)
from approvalflow.core.utils.time import parse_datetime, utc_now


@dataclass(frozen=True)
class Vote:
    """A single approve/reject decision by one approver.

    Attributes:
        voter_id: User who voted.
        decision: Approved or rejected.
        comment: Optional free-text comment.
        timestamp: When the vote was recorded.
        signature: Audit token binding voter, decision, request and time.
    """

    voter_id: str
    decision: VoteDecision
    comment: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    signature: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "voter_id": self.voter_id,
            "decision": self.decision.value,
            "comment": self.comment,
            "timestamp": self.timestamp.isoformat(),
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vote:
        """Deserialize from stored dict."""
        return cls(
            voter_id=str(data["voter_id"]),
            decision=VoteDecision(data["decision"]),
            comment=data.get("comment"),
            timestamp=parse_datetime(data.get("timestamp")) or utc_now(),
            signature=str(data.get("signature", "")),
        )


@dataclass
class ApprovalRequest:
    """A sign-off request attached to a task.

    Attributes:
        request_id: Unique request identifier.
        task_id: Task the request decorates.
        requester_id: User who asked for approval.
        approvers: Resolved approver ids, in resolution order.
        status: Pending until a terminal outcome is reached.
        description: Free-text description from the requester.
        votes: Votes recorded so far, in arrival order.
        created_at: When the request was opened.
        due_date: When escalation should kick in.
        approval_type: Quorum discipline.
        required_approvals: Approvals needed for parallel/sequential quorum.
        escalation_path: Ordered fallback approver ids.
        estimated_value: Monetary value supplied with the request.
        priority: Task priority at creation time.
        current_approver_index: Cursor into ``approvers`` for sequential requests.
        rule_id: Rule that triggered the request.
        resolved_at: When the request reached a terminal status.
    """

    request_id: str
    task_id: str
    requester_id: str
    approvers: list[str] = field(default_factory=list)
    status: ApprovalStatus = ApprovalStatus.PENDING
    description: str = ""
    votes: list[Vote] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    due_date: datetime | None = None
    approval_type: ApprovalType = ApprovalType.PARALLEL
    required_approvals: int = 1
    escalation_path: list[str] = field(default_factory=list)
    estimated_value: float | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    current_approver_index: int = 0
    rule_id: str = ""
    resolved_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is ApprovalStatus.PENDING

    @property
    def approved_count(self) -> int:
        return sum(1 for vote in self.votes if vote.decision is VoteDecision.APPROVED)

    def has_voted(self, user_id: str) -> bool:
        """Return True if ``user_id`` already has a vote on this request."""
        return any(vote.voter_id == user_id for vote in self.votes)

    def awaits(self, user_id: str) -> bool:
        """Return True if the request is live and still needs ``user_id``'s vote."""
        return self.is_pending and user_id in self.approvers and not self.has_voted(user_id)

    @property
    def current_approver(self) -> str | None:
        """Approver whose turn it is in a sequential chain."""
        if 0 <= self.current_approver_index < len(self.approvers):
            return self.approvers[self.current_approver_index]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "request_id": self.request_id,
            "task_id": self.task_id,
            "requester_id": self.requester_id,
            "approvers": list(self.approvers),
            "status": self.status.value,
            "description": self.description,
            "votes": [vote.to_dict() for vote in self.votes],
            "created_at": self.created_at.isoformat(),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "approval_type": self.approval_type.value,
            "required_approvals": self.required_approvals,
            "escalation_path": list(self.escalation_path),
            "estimated_value": self.estimated_value,
            "priority": self.priority.value,
            "current_approver_index": self.current_approver_index,
            "rule_id": self.rule_id,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApprovalRequest:
        """Create from dictionary."""
        value = data.get("estimated_value")
        return cls(
            request_id=str(data["request_id"]),
            task_id=str(data["task_id"]),
            requester_id=str(data["requester_id"]),
            approvers=[str(a) for a in data.get("approvers", [])],
            status=ApprovalStatus(data.get("status", ApprovalStatus.PENDING.value)),
            description=str(data.get("description") or ""),
            votes=[Vote.from_dict(item) for item in data.get("votes", [])],
            created_at=parse_datetime(data.get("created_at")) or utc_now(),
            due_date=parse_datetime(data.get("due_date")),
            approval_type=ApprovalType(data.get("approval_type", ApprovalType.PARALLEL.value)),
            required_approvals=max(1, int(data.get("required_approvals", 1))),
            escalation_path=[str(u) for u in data.get("escalation_path", [])],
            estimated_value=float(value) if value is not None else None,
            priority=TaskPriority(data.get("priority", TaskPriority.MEDIUM.value)),
            current_approver_index=int(data.get("current_approver_index", 0)),
            rule_id=str(data.get("rule_id", "")),
            resolved_at=parse_datetime(data.get("resolved_at")),
        )
