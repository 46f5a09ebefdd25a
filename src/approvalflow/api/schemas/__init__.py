"""API Schemas Package."""

from approvalflow.api.schemas.approval_schemas import (
    ApprovalRequestResponse,
    CreateApprovalRequest,
    CreateApprovalResponse,
    HierarchyCreate,
    HierarchyListResponse,
    HierarchyResponse,
    PendingApprovalsResponse,
    VoteRequest,
    VoteResponse,
)
from approvalflow.api.schemas.errors import ErrorResponse

__all__ = [
    "CreateApprovalRequest",
    "CreateApprovalResponse",
    "VoteRequest",
    "VoteResponse",
    "ApprovalRequestResponse",
    "PendingApprovalsResponse",
    "HierarchyCreate",
    "HierarchyResponse",
    "HierarchyListResponse",
    "ErrorResponse",
]
