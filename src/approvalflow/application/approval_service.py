"""
Approval Service
================

Orchestrates the approval workflow for tasks:

- ``create_approval_request``: rule matching -> approver resolution ->
  escalation path -> persist on the task -> notify approvers
- ``submit_approval``: state machine transition under a per-request lock
  -> persist -> terminal side effects (task status, requester notification)
- ``list_pending_for`` / ``get_history``: read-side queries

Collaborator failures propagate unchanged; the service never retries.
Notifications are dispatched in the background and failures are only
logged.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from uuid import uuid4

import structlog

from approvalflow.application.approver_resolver import resolve_approvers
from approvalflow.application.escalation import build_escalation_path
from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.application.vote_signer import VoteSigner
from approvalflow.core.domain.approval_request import ApprovalRequest
from approvalflow.core.domain.enums import (
    ApprovalStatus,
    NotificationKind,
    TaskStatus,
    VoteDecision,
)
from approvalflow.core.domain.errors import (
    NoApproversResolvedError,
    RequestAlreadyPendingError,
    RequestNotFoundError,
    TaskNotFoundError,
    UserNotFoundError,
)
from approvalflow.core.domain.models import Task
from approvalflow.core.domain.state_machine import submit_vote
from approvalflow.core.interfaces.directory import DirectoryProtocol
from approvalflow.core.interfaces.notifications import NotificationSinkProtocol
from approvalflow.core.interfaces.task_store import TaskStoreProtocol
from approvalflow.core.utils.time import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_ESCALATION_HOURS = 24.0


def _new_request_id() -> str:
    return f"approval-{uuid4().hex}"


class ApprovalService:
    """Approval workflow orchestrator.

    Args:
        task_store: Task persistence; holds each task's current request.
        directory: User directory.
        notifications: Best-effort notification sink.
        catalog: Rule catalog consulted when opening requests.
        signer: Vote signer; a signer with an ephemeral secret is created
            when omitted.
        default_escalation_hours: Due-date offset for rules without a timeout.
        enforce_sequential_order: Refuse out-of-turn votes on sequential requests.
        clock: Source of the current UTC time.
        id_factory: Generates request ids.
    """

    def __init__(
        self,
        task_store: TaskStoreProtocol,
        directory: DirectoryProtocol,
        notifications: NotificationSinkProtocol,
        catalog: RuleCatalog,
        *,
        signer: VoteSigner | None = None,
        default_escalation_hours: float = DEFAULT_ESCALATION_HOURS,
        enforce_sequential_order: bool = False,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._task_store = task_store
        self._directory = directory
        self._notifications = notifications
        self._catalog = catalog
        self._signer = signer or VoteSigner()
        self._default_escalation_hours = default_escalation_hours
        self._enforce_sequential_order = enforce_sequential_order
        self._clock = clock or utc_now
        self._id_factory = id_factory or _new_request_id

        # Entries vanish once no coroutine holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_lock = asyncio.Lock()
        self._dispatches: set[asyncio.Task[None]] = set()
        self._logger = logger.bind(component="approval_service")

    @property
    def catalog(self) -> RuleCatalog:
        return self._catalog

    @property
    def signer(self) -> VoteSigner:
        return self._signer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_approval_request(
        self,
        task_id: str,
        requester_id: str,
        description: str | None = None,
        estimated_value: float | None = None,
    ) -> ApprovalRequest | None:
        """Open an approval request for a task if a rule calls for one.

        Args:
            task_id: Task to gate.
            requester_id: User asking for approval.
            description: Free-text description for approvers.
            estimated_value: Monetary value used by ``estimatedValue`` conditions.

        Returns:
            The new request, or None if no rule matched (no approval required).

        Raises:
            TaskNotFoundError: Unknown task.
            UserNotFoundError: Unknown requester.
            RequestAlreadyPendingError: The task already has a live request.
            NoApproversResolvedError: A rule matched but nobody qualifies.
        """
        async with await self._get_lock(f"task:{task_id}"):
            task = await self._task_store.get_task(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)

            requester = await self._directory.get_user(requester_id)
            if requester is None:
                raise UserNotFoundError(requester_id)

            if task.approval is not None and task.approval.is_pending:
                raise RequestAlreadyPendingError(task_id, task.approval.request_id)

            snapshot = task
            if snapshot.department is None and requester.department:
                snapshot = replace(task, department=requester.department)

            rule = self._catalog.match(snapshot, estimated_value)
            if rule is None:
                self._logger.info(
                    "approval.not_required", task_id=task_id, requester_id=requester_id
                )
                return None

            users = await self._directory.get_users()
            approvers = resolve_approvers(rule.approvers, requester, users)
            if not approvers:
                self._logger.error(
                    "approval.no_approvers_resolved",
                    task_id=task_id,
                    rule_id=rule.rule_id,
                    requester_id=requester_id,
                )
                raise NoApproversResolvedError(rule.rule_id, requester_id)

            created_at = self._clock()
            hours = rule.escalation_timeout_hours or self._default_escalation_hours
            request = ApprovalRequest(
                request_id=self._id_factory(),
                task_id=task_id,
                requester_id=requester_id,
                approvers=[user.user_id for user in approvers],
                description=description or "",
                created_at=created_at,
                due_date=created_at + timedelta(hours=hours),
                approval_type=rule.approval_type,
                required_approvals=rule.required_approvals,
                escalation_path=build_escalation_path(requester, users),
                estimated_value=estimated_value,
                priority=task.priority,
                rule_id=rule.rule_id,
            )

            # Requester exclusion can leave fewer approvers than the quorum; such
            # a request only resolves through a rejection or external escalation
            if len(request.approvers) < request.required_approvals:
                self._logger.warning(
                    "approval.quorum_unreachable",
                    task_id=task_id,
                    rule_id=rule.rule_id,
                    approvers=request.approvers,
                    required_approvals=request.required_approvals,
                )

            await self._task_store.update_task(task_id, {"approval": request})

        self._logger.info(
            "approval.request_created",
            request_id=request.request_id,
            task_id=task_id,
            rule_id=rule.rule_id,
            approval_type=request.approval_type.value,
            required_approvals=request.required_approvals,
            approvers=request.approvers,
        )
        self._dispatch(request.request_id, request.approvers, NotificationKind.REQUESTED)
        return request

    async def submit_approval(
        self,
        request_id: str,
        voter_id: str,
        decision: VoteDecision | str,
        comment: str | None = None,
    ) -> ApprovalRequest:
        """Record a vote and apply the resulting transition.

        The read-vote-write sequence runs under a per-request lock so that
        concurrent votes on the same request cannot overwrite each other.

        Raises:
            RequestNotFoundError: No task carries this request.
            NotAuthorizedError: Voter is not an approver.
            AlreadyVotedError: Voter already voted.
            RequestClosedError: Request is already terminal.
        """
        decision = VoteDecision(decision)
        async with await self._get_lock(f"request:{request_id}"):
            task, request = await self._find_request(request_id)

            submit_vote(
                request,
                voter_id,
                decision,
                comment,
                sign=self._signer.sign,
                enforce_sequential_order=self._enforce_sequential_order,
                now=self._clock(),
            )
            await self._task_store.update_task(task.task_id, {"approval": request})

            self._logger.info(
                "approval.vote_recorded",
                request_id=request_id,
                voter_id=voter_id,
                decision=decision.value,
                status=request.status.value,
                current_approver_index=request.current_approver_index,
            )

            if request.status.is_terminal:
                await self._on_resolved(task, request)

        return request

    async def list_pending_for(self, user_id: str) -> list[ApprovalRequest]:
        """Return live requests where ``user_id`` is an approver and has not voted."""
        tasks = await self._task_store.list_tasks()
        return [
            task.approval
            for task in tasks
            if task.approval is not None and task.approval.awaits(user_id)
        ]

    async def get_history(self, task_id: str) -> ApprovalRequest | None:
        """Return the task's current or last approval request."""
        task = await self._task_store.get_task(task_id)
        if task is None:
            return None
        return task.approval

    def verify_signatures(self, request: ApprovalRequest) -> bool:
        """Return True if every vote on ``request`` carries a valid signature."""
        return all(self._signer.verify(vote, request.request_id) for vote in request.votes)

    async def drain_notifications(self) -> None:
        """Wait for all in-flight notification dispatches to finish."""
        while self._dispatches:
            await asyncio.gather(*list(self._dispatches), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _get_lock(self, key: str) -> asyncio.Lock:
        """Get or create the lock guarding ``key``."""
        async with self._locks_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            return lock

    async def _find_request(self, request_id: str) -> tuple[Task, ApprovalRequest]:
        for task in await self._task_store.list_tasks():
            if task.approval is not None and task.approval.request_id == request_id:
                return task, task.approval
        raise RequestNotFoundError(request_id)

    async def _on_resolved(self, task: Task, request: ApprovalRequest) -> None:
        if request.status is ApprovalStatus.APPROVED:
            await self._task_store.update_task(
                task.task_id,
                {"status": TaskStatus.IN_PROGRESS, "start_date": request.resolved_at},
            )
            kind = NotificationKind.APPROVED
        else:
            await self._task_store.update_task(task.task_id, {"status": TaskStatus.ON_HOLD})
            kind = NotificationKind.REJECTED

        self._logger.info(
            "approval.request_resolved",
            request_id=request.request_id,
            task_id=task.task_id,
            status=request.status.value,
        )
        self._dispatch(request.request_id, [request.requester_id], kind)

    def _dispatch(
        self, request_id: str, recipient_ids: list[str], kind: NotificationKind
    ) -> None:
        """Deliver a notification without blocking the caller."""
        dispatch = asyncio.create_task(self._deliver(request_id, list(recipient_ids), kind))
        self._dispatches.add(dispatch)
        dispatch.add_done_callback(self._dispatches.discard)

    async def _deliver(
        self, request_id: str, recipient_ids: list[str], kind: NotificationKind
    ) -> None:
        try:
            await self._notifications.notify(request_id, recipient_ids, kind)
        except Exception as exc:
            self._logger.warning(
                "approval.notification_failed",
                request_id=request_id,
                kind=kind.value,
                recipients=recipient_ids,
                error=str(exc),
            )
