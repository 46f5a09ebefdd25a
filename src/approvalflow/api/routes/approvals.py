"""
Approval API Routes
===================

HTTP endpoints for opening approval requests and voting on them.

Endpoints:
- POST /api/v1/approvals - Open a request for a task (if a rule applies)
- POST /api/v1/approvals/{request_id}/votes - Cast a vote
- GET /api/v1/approvals/pending?user_id= - Requests awaiting a user's vote
- GET /api/v1/tasks/{task_id}/approval - Current or last request of a task

Domain errors are converted to ``ErrorResponse`` payloads with the status
code carried by the error.
"""

from fastapi import APIRouter, Depends, Query, status

from approvalflow.api.dependencies import get_approval_service
from approvalflow.api.errors import approval_http_exception, http_exception
from approvalflow.api.schemas.approval_schemas import (
    ApprovalRequestResponse,
    CreateApprovalRequest,
    CreateApprovalResponse,
    PendingApprovalsResponse,
    VoteRequest,
)
from approvalflow.application.approval_service import ApprovalService
from approvalflow.core.domain.errors import ApprovalError

router = APIRouter()


@router.post(
    "/approvals",
    response_model=CreateApprovalResponse,
    summary="Open approval request",
    description=(
        "Match the task against the active hierarchy and open a request. "
        "Returns approval_required=false when no rule applies."
    ),
)
async def create_approval(
    body: CreateApprovalRequest,
    service: ApprovalService = Depends(get_approval_service),
) -> CreateApprovalResponse:
    """
    Open an approval request.

    Raises:
        HTTPException 404: Unknown task or requester
        HTTPException 409: Task already has a pending request
        HTTPException 422: A rule matched but no approver could be resolved
    """
    try:
        request = await service.create_approval_request(
            body.task_id,
            body.requester_id,
            description=body.description,
            estimated_value=body.estimated_value,
        )
    except ApprovalError as e:
        raise approval_http_exception(e)

    if request is None:
        return CreateApprovalResponse(approval_required=False)
    return CreateApprovalResponse(
        approval_required=True,
        request=ApprovalRequestResponse.from_domain(request),
    )


@router.post(
    "/approvals/{request_id}/votes",
    response_model=ApprovalRequestResponse,
    summary="Cast vote",
)
async def submit_vote(
    request_id: str,
    body: VoteRequest,
    service: ApprovalService = Depends(get_approval_service),
) -> ApprovalRequestResponse:
    """
    Record an approve/reject vote and return the updated request.

    Raises:
        HTTPException 404: Unknown request
        HTTPException 403: Voter is not an approver (or out of turn)
        HTTPException 409: Voter already voted or request is closed
    """
    try:
        request = await service.submit_approval(
            request_id, body.voter_id, body.decision, body.comment
        )
    except ApprovalError as e:
        raise approval_http_exception(e)
    return ApprovalRequestResponse.from_domain(request)


@router.get(
    "/approvals/pending",
    response_model=PendingApprovalsResponse,
    summary="List pending approvals for a user",
)
async def list_pending(
    user_id: str = Query(..., min_length=1, description="Approver user id"),
    service: ApprovalService = Depends(get_approval_service),
) -> PendingApprovalsResponse:
    """List live requests where ``user_id`` is an approver who has not voted."""
    requests = await service.list_pending_for(user_id)
    return PendingApprovalsResponse(
        user_id=user_id,
        requests=[ApprovalRequestResponse.from_domain(r) for r in requests],
    )


@router.get(
    "/tasks/{task_id}/approval",
    response_model=ApprovalRequestResponse,
    summary="Get approval history of a task",
)
async def get_task_approval(
    task_id: str,
    service: ApprovalService = Depends(get_approval_service),
) -> ApprovalRequestResponse:
    """Return the task's current or last approval request."""
    request = await service.get_history(task_id)
    if request is None:
        raise http_exception(
            status_code=status.HTTP_404_NOT_FOUND,
            code="approval_not_found",
            message=f"No approval request for task: {task_id}",
            details={"task_id": task_id},
        )
    return ApprovalRequestResponse.from_domain(request)
