"""Approval request state machine.

States: ``pending`` (initial) -> ``approved`` | ``rejected`` (terminal).

``submit_vote`` is the only transition. It validates the voter, appends
the vote and recomputes the aggregate status. A single rejection is
final regardless of earlier approvals.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from approvalflow.core.domain.approval_request import ApprovalRequest, Vote
from approvalflow.core.domain.enums import ApprovalStatus, ApprovalType, VoteDecision
from approvalflow.core.domain.errors import (
    AlreadyVotedError,
    NotAuthorizedError,
    RequestClosedError,
)
from approvalflow.core.utils.time import utc_now

# (voter_id, decision, request_id, timestamp) -> signature
SignatureFn = Callable[[str, VoteDecision, str, datetime], str]


def compute_status(request: ApprovalRequest) -> ApprovalStatus:
    """Aggregate the recorded votes into a status under the request's quorum."""
    if any(vote.decision is VoteDecision.REJECTED for vote in request.votes):
        return ApprovalStatus.REJECTED

    approved = request.approved_count
    if request.approval_type is ApprovalType.ANY_ONE:
        return ApprovalStatus.APPROVED if approved >= 1 else ApprovalStatus.PENDING
    if approved >= request.required_approvals:
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING


def submit_vote(
    request: ApprovalRequest,
    voter_id: str,
    decision: VoteDecision,
    comment: str | None = None,
    *,
    sign: SignatureFn | None = None,
    enforce_sequential_order: bool = False,
    now: datetime | None = None,
) -> ApprovalRequest:
    """Record a vote on ``request`` and update its status in place.

    Args:
        request: The request to vote on.
        voter_id: Id of the voting user.
        decision: Approve or reject.
        comment: Optional comment.
        sign: Produces the audit signature for the vote.
        enforce_sequential_order: Refuse sequential votes from anyone but
            the approver at ``current_approver_index``.
        now: Vote timestamp, defaults to the current UTC time.

    Returns:
        The same request, mutated.

    Raises:
        NotAuthorizedError: Voter is not an approver (or out of turn in strict mode).
        AlreadyVotedError: Voter already voted on this request.
        RequestClosedError: The request is already terminal.
    """
    if voter_id not in request.approvers:
        raise NotAuthorizedError(request.request_id, voter_id)
    if request.status.is_terminal:
        raise RequestClosedError(request.request_id, request.status.value)
    if request.has_voted(voter_id):
        raise AlreadyVotedError(request.request_id, voter_id)
    if (
        enforce_sequential_order
        and request.approval_type is ApprovalType.SEQUENTIAL
        and request.current_approver != voter_id
    ):
        raise NotAuthorizedError(request.request_id, voter_id, reason="out_of_turn")

    timestamp = now or utc_now()
    signature = sign(voter_id, decision, request.request_id, timestamp) if sign else ""
    request.votes.append(
        Vote(
            voter_id=voter_id,
            decision=decision,
            comment=comment,
            timestamp=timestamp,
            signature=signature,
        )
    )

    status = compute_status(request)
    request.status = status
    if status.is_terminal:
        request.resolved_at = timestamp
    elif request.approval_type is ApprovalType.SEQUENTIAL:
        request.current_approver_index += 1

    return request
