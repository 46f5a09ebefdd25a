"""
Approval API Schemas
====================

Pydantic models for the approval and hierarchy endpoints.

Request bodies validate input before it reaches the service; response
models are built from domain objects via ``from_domain()``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from approvalflow.core.domain.approval_request import ApprovalRequest
from approvalflow.core.domain.approval_rule import ApprovalHierarchy
from approvalflow.core.domain.config_schema import ApprovalRuleSchema
from approvalflow.core.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    TaskPriority,
    VoteDecision,
)


class CreateApprovalRequest(BaseModel):
    """Request schema for opening an approval request."""

    task_id: str = Field(..., min_length=1, description="Task to gate")
    requester_id: str = Field(..., min_length=1, description="User asking for approval")
    description: Optional[str] = Field(None, description="Context for approvers")
    estimated_value: Optional[float] = Field(
        None, description="Monetary value used by estimatedValue conditions"
    )


class VoteRequest(BaseModel):
    """Request schema for casting a vote."""

    voter_id: str = Field(..., min_length=1)
    decision: VoteDecision
    comment: Optional[str] = None


class VoteResponse(BaseModel):
    """A recorded vote."""

    voter_id: str
    decision: VoteDecision
    comment: Optional[str] = None
    timestamp: datetime
    signature: str = ""


class ApprovalRequestResponse(BaseModel):
    """JSON record of an approval request."""

    request_id: str
    task_id: str
    requester_id: str
    approvers: list[str]
    status: ApprovalStatus
    description: str = ""
    votes: list[VoteResponse] = Field(default_factory=list)
    created_at: datetime
    due_date: Optional[datetime] = None
    approval_type: ApprovalType
    required_approvals: int
    escalation_path: list[str] = Field(default_factory=list)
    estimated_value: Optional[float] = None
    priority: TaskPriority
    current_approver_index: int = 0
    rule_id: str = ""
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, request: ApprovalRequest) -> "ApprovalRequestResponse":
        """Create response from a domain request."""
        return cls.model_validate(request.to_dict())


class CreateApprovalResponse(BaseModel):
    """Outcome of opening a request; ``request`` is None when no rule matched."""

    approval_required: bool
    request: Optional[ApprovalRequestResponse] = None


class PendingApprovalsResponse(BaseModel):
    """Live requests awaiting a user's vote."""

    user_id: str
    requests: list[ApprovalRequestResponse]


class HierarchyCreate(BaseModel):
    """Request schema for creating an approval hierarchy."""

    name: str = Field(..., min_length=1)
    description: str = ""
    active: bool = False
    created_by: str = ""
    rules: list[ApprovalRuleSchema] = Field(default_factory=list)


class HierarchyResponse(BaseModel):
    """An approval hierarchy and its rules in evaluation order."""

    hierarchy_id: str
    name: str
    description: str
    active: bool
    created_by: str
    created_at: datetime
    rules: list[dict[str, Any]]

    @classmethod
    def from_domain(cls, hierarchy: ApprovalHierarchy) -> "HierarchyResponse":
        """Create response from a domain hierarchy."""
        return cls.model_validate(hierarchy.to_dict())


class HierarchyListResponse(BaseModel):
    """All registered hierarchies."""

    hierarchies: list[HierarchyResponse]
