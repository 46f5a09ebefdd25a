"""
Unit tests for ApprovalService

Tests verify:
- Request creation (rule match, approver resolution, due date, escalation)
- The critical-task sequential scenario and the rejection scenario
- Task status side effects and requester notifications
- Error paths (unknown task/user, no approvers, duplicate live request)
- Concurrent votes on one request
- Read-side queries
"""

import asyncio
import gc
from datetime import timedelta

import pytest
from structlog.testing import capture_logs

from approvalflow.application.approval_service import ApprovalService
from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.core.domain.approval_rule import (
    ApprovalHierarchy,
    ApprovalRule,
    ApproverSpec,
)
from approvalflow.core.domain.conditions import Condition
from approvalflow.core.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    ApproverType,
    NotificationKind,
    TaskPriority,
    TaskStatus,
    UserRole,
    VoteDecision,
)
from approvalflow.core.domain.errors import (
    AlreadyVotedError,
    NoApproversResolvedError,
    NotAuthorizedError,
    RequestAlreadyPendingError,
    RequestClosedError,
    RequestNotFoundError,
    TaskNotFoundError,
    UserNotFoundError,
)
from approvalflow.core.domain.models import Task, User
from approvalflow.infrastructure.directory.in_memory_directory import InMemoryDirectory
from approvalflow.infrastructure.persistence.in_memory_task_store import InMemoryTaskStore

APPROVE = VoteDecision.APPROVED
REJECT = VoteDecision.REJECTED


class FailingNotificationSink:
    """Sink whose delivery always fails."""

    async def notify(self, request_id, recipient_ids, kind):
        raise ConnectionError("smtp down")


class YieldingTaskStore(InMemoryTaskStore):
    """In-memory store that hands control to the event loop on every call,
    like a store backed by real I/O."""

    async def get_task(self, task_id):
        await asyncio.sleep(0)
        return await super().get_task(task_id)

    async def update_task(self, task_id, fields):
        await asyncio.sleep(0)
        return await super().update_task(task_id, fields)

    async def list_tasks(self):
        await asyncio.sleep(0)
        return await super().list_tasks()


def _parallel_catalog(*approver_ids: str) -> RuleCatalog:
    return RuleCatalog(
        [
            ApprovalHierarchy(
                hierarchy_id="parallel",
                rules=[
                    ApprovalRule(
                        rule_id="board",
                        condition=Condition("priority", "in", ["low", "medium"]),
                        approvers=[ApproverSpec(ApproverType.USER, uid) for uid in approver_ids],
                    )
                ],
            )
        ]
    )


class TestCreateApprovalRequest:
    async def test_critical_task_opens_sequential_request(self, service, task_store, fixed_now):
        request = await service.create_approval_request(
            "task-critical", "user-3", description="Prod database migration"
        )

        assert request.request_id.startswith("approval-")
        assert request.approvers == ["user-2", "user-1"]
        assert request.approval_type is ApprovalType.SEQUENTIAL
        assert request.required_approvals == 2
        assert request.status is ApprovalStatus.PENDING
        assert request.rule_id == "rule-1"
        assert request.created_at == fixed_now
        assert request.due_date == fixed_now + timedelta(hours=4)
        assert request.escalation_path == ["user-2", "user-1"]
        assert request.description == "Prod database migration"

        task = await task_store.get_task("task-critical")
        assert task.approval == request

    async def test_estimated_value_rule(self, service, fixed_now):
        request = await service.create_approval_request(
            "task-low", "user-3", estimated_value=25000
        )
        assert request.rule_id == "rule-3"
        assert request.estimated_value == 25000
        assert request.due_date == fixed_now + timedelta(hours=12)

    async def test_no_matching_rule_returns_none(self, service, task_store):
        assert await service.create_approval_request("task-low", "user-3") is None
        assert (await task_store.get_task("task-low")).approval is None

    async def test_no_active_hierarchy_returns_none(self, task_store, directory, notifications):
        service = ApprovalService(task_store, directory, notifications, RuleCatalog())
        assert await service.create_approval_request("task-critical", "user-3") is None
        await service.drain_notifications()
        assert notifications.sent == []

    async def test_default_escalation_hours(self, task_store, directory, notifications, fixed_now):
        service = ApprovalService(
            task_store,
            directory,
            notifications,
            _parallel_catalog("user-1"),
            default_escalation_hours=48,
            clock=lambda: fixed_now,
        )
        request = await service.create_approval_request("task-low", "user-3")
        assert request.due_date == fixed_now + timedelta(hours=48)

    async def test_unknown_task(self, service):
        with pytest.raises(TaskNotFoundError):
            await service.create_approval_request("task-missing", "user-3")

    async def test_unknown_requester(self, service):
        with pytest.raises(UserNotFoundError):
            await service.create_approval_request("task-critical", "ghost")

    async def test_no_approvers_resolved(self, service, task_store):
        with pytest.raises(NoApproversResolvedError) as exc_info:
            await service.create_approval_request("task-orphan", "user-4")

        assert exc_info.value.details["rule_id"] == "rule-2"
        assert (await task_store.get_task("task-orphan")).approval is None

    async def test_second_live_request_refused(self, service):
        first = await service.create_approval_request("task-high", "user-3")
        with pytest.raises(RequestAlreadyPendingError) as exc_info:
            await service.create_approval_request("task-high", "user-3")
        assert exc_info.value.details["request_id"] == first.request_id

    async def test_new_request_allowed_after_resolution(self, service):
        first = await service.create_approval_request("task-high", "user-3")
        await service.submit_approval(first.request_id, "user-2", REJECT)

        second = await service.create_approval_request("task-high", "user-3")

        assert second.request_id != first.request_id
        assert second.status is ApprovalStatus.PENDING

    async def test_department_rule_uses_requester_department(
        self, task_store, directory, notifications
    ):
        catalog = RuleCatalog(
            [
                ApprovalHierarchy(
                    rules=[
                        ApprovalRule(
                            rule_id="eng",
                            condition=Condition("department", "equals", "engineering"),
                            approvers=[ApproverSpec(ApproverType.DEPARTMENT_HEAD)],
                        )
                    ]
                )
            ]
        )
        service = ApprovalService(task_store, directory, notifications, catalog)

        request = await service.create_approval_request("task-low", "user-3")

        assert request.rule_id == "eng"
        assert request.approvers == ["user-2"]

    async def test_approvers_notified(self, service, notifications):
        request = await service.create_approval_request("task-critical", "user-3")
        await service.drain_notifications()

        [sent] = notifications.for_kind(NotificationKind.REQUESTED)
        assert sent.request_id == request.request_id
        assert sent.recipient_ids == ("user-2", "user-1")


class TestCriticalSequentialScenario:
    """Manager then admin approve a critical task."""

    async def test_full_approval(self, service, task_store, notifications, fixed_now):
        request = await service.create_approval_request("task-critical", "user-3")

        after_manager = await service.submit_approval(request.request_id, "user-2", APPROVE)
        assert after_manager.status is ApprovalStatus.PENDING
        assert after_manager.current_approver_index == 1

        after_admin = await service.submit_approval(
            request.request_id, "user-1", APPROVE, "ship it"
        )
        assert after_admin.status is ApprovalStatus.APPROVED
        assert after_admin.resolved_at == fixed_now
        assert [v.voter_id for v in after_admin.votes] == ["user-2", "user-1"]

        task = await task_store.get_task("task-critical")
        assert task.status is TaskStatus.IN_PROGRESS
        assert task.start_date == fixed_now
        assert task.approval.status is ApprovalStatus.APPROVED

        await service.drain_notifications()
        [approved] = notifications.for_kind(NotificationKind.APPROVED)
        assert approved.recipient_ids == ("user-3",)

    async def test_votes_are_signed(self, service):
        request = await service.create_approval_request("task-critical", "user-3")
        updated = await service.submit_approval(request.request_id, "user-2", APPROVE)

        assert updated.votes[0].signature
        assert service.verify_signatures(updated)

    async def test_manager_rejects_then_admin_is_refused(self, service, task_store, notifications):
        request = await service.create_approval_request("task-critical", "user-3")

        rejected = await service.submit_approval(request.request_id, "user-2", REJECT, "not now")
        assert rejected.status is ApprovalStatus.REJECTED

        with pytest.raises(RequestClosedError):
            await service.submit_approval(request.request_id, "user-1", APPROVE)

        task = await task_store.get_task("task-critical")
        assert task.status is TaskStatus.ON_HOLD
        assert task.start_date is None
        assert len(task.approval.votes) == 1

        await service.drain_notifications()
        [sent] = notifications.for_kind(NotificationKind.REJECTED)
        assert sent.recipient_ids == ("user-3",)

    async def test_strict_order_refuses_admin_first(
        self, task_store, directory, notifications, signer, service
    ):
        strict = ApprovalService(
            task_store,
            directory,
            notifications,
            service.catalog,
            signer=signer,
            enforce_sequential_order=True,
        )
        request = await strict.create_approval_request("task-critical", "user-3")

        with pytest.raises(NotAuthorizedError):
            await strict.submit_approval(request.request_id, "user-1", APPROVE)

        await strict.submit_approval(request.request_id, "user-2", APPROVE)
        final = await strict.submit_approval(request.request_id, "user-1", APPROVE)
        assert final.status is ApprovalStatus.APPROVED

    async def test_sole_admin_requester_leaves_quorum_unreachable(self, notifications, service):
        boss = User(user_id="boss", role=UserRole.ADMIN, manager_id="user-2")
        manager = User(user_id="user-2", role=UserRole.MANAGER)
        store = InMemoryTaskStore(
            [Task(task_id="task-board", requester_id="boss", priority=TaskPriority.CRITICAL)]
        )
        board_service = ApprovalService(
            store, InMemoryDirectory([boss, manager]), notifications, service.catalog
        )

        with capture_logs() as logs:
            request = await board_service.create_approval_request("task-board", "boss")

        assert request.approvers == ["user-2"]
        assert request.required_approvals == 2
        [warning] = [e for e in logs if e["event"] == "approval.quorum_unreachable"]
        assert warning["log_level"] == "warning"
        assert warning["required_approvals"] == 2

        updated = await board_service.submit_approval(request.request_id, "user-2", APPROVE)
        assert updated.status is ApprovalStatus.PENDING
        assert updated.current_approver is None
        assert updated.awaits("user-2") is False


class TestSubmitApprovalErrors:
    async def test_unknown_request(self, service):
        with pytest.raises(RequestNotFoundError):
            await service.submit_approval("approval-missing", "user-2", APPROVE)

    async def test_non_approver(self, service):
        request = await service.create_approval_request("task-critical", "user-3")
        with pytest.raises(NotAuthorizedError):
            await service.submit_approval(request.request_id, "user-4", APPROVE)

    async def test_requester_cannot_vote(self, service):
        request = await service.create_approval_request("task-critical", "user-3")
        with pytest.raises(NotAuthorizedError):
            await service.submit_approval(request.request_id, "user-3", APPROVE)

    async def test_double_vote_leaves_stored_request_unchanged(self, service, task_store):
        request = await service.create_approval_request("task-critical", "user-3")
        await service.submit_approval(request.request_id, "user-2", APPROVE)
        before = (await task_store.get_task("task-critical")).approval

        with pytest.raises(AlreadyVotedError):
            await service.submit_approval(request.request_id, "user-2", REJECT)

        assert (await task_store.get_task("task-critical")).approval == before

    async def test_decision_accepts_wire_value(self, service):
        request = await service.create_approval_request("task-high", "user-3")
        updated = await service.submit_approval(request.request_id, "user-2", "approved")
        assert updated.status is ApprovalStatus.APPROVED


class TestConcurrency:
    async def test_concurrent_votes_are_all_recorded(self, tasks, notifications):
        task_store = YieldingTaskStore(tasks)
        board = [User(user_id=f"board-{i}", role=UserRole.MANAGER) for i in range(5)]
        directory_users = [User(user_id="user-3"), *board]
        service = ApprovalService(
            task_store,
            InMemoryDirectory(directory_users),
            notifications,
            _parallel_catalog(*(u.user_id for u in board)),
        )
        request = await service.create_approval_request("task-low", "user-3")
        assert request.approval_type is ApprovalType.PARALLEL
        assert request.required_approvals == 5

        results = await asyncio.gather(
            *(service.submit_approval(request.request_id, u.user_id, APPROVE) for u in board)
        )

        final = (await task_store.get_task("task-low")).approval
        assert len(final.votes) == 5
        assert final.status is ApprovalStatus.APPROVED
        assert sum(r.status is ApprovalStatus.APPROVED for r in results) == 1

    async def test_concurrent_creation_yields_one_request(
        self, tasks, directory, notifications, service
    ):
        service = ApprovalService(
            YieldingTaskStore(tasks), directory, notifications, service.catalog
        )
        results = await asyncio.gather(
            service.create_approval_request("task-high", "user-3"),
            service.create_approval_request("task-high", "user-3"),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, Exception)]
        refused = [r for r in results if isinstance(r, RequestAlreadyPendingError)]
        assert len(created) == 1
        assert len(refused) == 1


class TestLockRegistry:
    async def test_unknown_request_ids_leave_no_locks(self, service):
        for i in range(1000):
            with pytest.raises(RequestNotFoundError):
                await service.submit_approval(f"approval-unknown-{i}", "user-2", APPROVE)

        gc.collect()
        assert len(service._locks) == 0

    async def test_locks_released_after_resolution(self, service):
        request = await service.create_approval_request("task-high", "user-3")
        await service.submit_approval(request.request_id, "user-2", APPROVE)

        gc.collect()
        assert len(service._locks) == 0


class TestNotifications:
    async def test_failed_delivery_is_logged_not_raised(self, task_store, directory, service):
        with capture_logs() as logs:
            failing = ApprovalService(
                task_store, directory, FailingNotificationSink(), service.catalog
            )
            request = await failing.create_approval_request("task-high", "user-3")
            await failing.drain_notifications()

        assert request.status is ApprovalStatus.PENDING
        failures = [e for e in logs if e["event"] == "approval.notification_failed"]
        assert len(failures) == 1
        assert failures[0]["error"] == "smtp down"
        assert failures[0]["kind"] == "requested"


class TestQueries:
    async def test_list_pending_for(self, service):
        critical = await service.create_approval_request("task-critical", "user-3")
        high = await service.create_approval_request("task-high", "user-3")

        pending = await service.list_pending_for("user-2")
        assert {r.request_id for r in pending} == {critical.request_id, high.request_id}
        assert [r.request_id for r in await service.list_pending_for("user-1")] == [
            critical.request_id
        ]

        await service.submit_approval(high.request_id, "user-2", APPROVE)
        assert [r.request_id for r in await service.list_pending_for("user-2")] == [
            critical.request_id
        ]

    async def test_list_pending_for_non_approver(self, service):
        await service.create_approval_request("task-critical", "user-3")
        assert await service.list_pending_for("user-4") == []

    async def test_get_history(self, service):
        assert await service.get_history("task-critical") is None
        assert await service.get_history("task-missing") is None

        request = await service.create_approval_request("task-critical", "user-3")
        await service.submit_approval(request.request_id, "user-2", REJECT)

        history = await service.get_history("task-critical")
        assert history.request_id == request.request_id
        assert history.status is ApprovalStatus.REJECTED
