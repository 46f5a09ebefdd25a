"""Unit tests for ApprovalRequest helpers and serialization."""

from datetime import UTC, datetime

from approvalflow.core.domain.approval_request import ApprovalRequest, Vote
from approvalflow.core.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    TaskPriority,
    VoteDecision,
)
from approvalflow.core.domain.models import Task

CREATED = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


def _request() -> ApprovalRequest:
    return ApprovalRequest(
        request_id="approval-1",
        task_id="task-1",
        requester_id="user-3",
        approvers=["user-2", "user-1"],
        created_at=CREATED,
        approval_type=ApprovalType.SEQUENTIAL,
        required_approvals=2,
        escalation_path=["user-2", "user-1"],
        estimated_value=12000.0,
        priority=TaskPriority.CRITICAL,
        rule_id="rule-1",
        votes=[
            Vote(
                voter_id="user-2",
                decision=VoteDecision.APPROVED,
                comment="fine",
                timestamp=CREATED,
                signature="abc",
            )
        ],
        current_approver_index=1,
    )


class TestHelpers:
    def test_awaits_only_approvers_without_votes(self):
        request = _request()
        assert request.awaits("user-1")
        assert not request.awaits("user-2")
        assert not request.awaits("user-3")

    def test_closed_request_awaits_nobody(self):
        request = _request()
        request.status = ApprovalStatus.REJECTED
        assert not request.awaits("user-1")

    def test_current_approver(self):
        assert _request().current_approver == "user-1"

    def test_approved_count(self):
        assert _request().approved_count == 1


class TestSerialization:
    def test_json_record_shape(self):
        data = _request().to_dict()
        assert data["status"] == "pending"
        assert data["approval_type"] == "sequential"
        assert data["priority"] == "critical"
        assert data["created_at"] == "2025-03-01T09:00:00+00:00"
        assert data["votes"][0]["decision"] == "approved"
        assert data["resolved_at"] is None

    def test_task_carries_request_through_dict(self):
        task = Task(task_id="task-1", requester_id="user-3", approval=_request())
        restored = Task.from_dict(task.to_dict())
        assert restored.approval == _request()
