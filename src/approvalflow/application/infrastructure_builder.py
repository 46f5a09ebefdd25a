"""
Infrastructure Builder

Creates the collaborator adapters and the ApprovalService from engine
settings:
- Task store (in-memory or JSON files)
- Directory (in-memory, optionally seeded from a YAML fixture)
- Notification sink (structured log)
- Rule catalog (YAML, packaged default when unset)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from approvalflow.application.approval_service import ApprovalService
from approvalflow.application.catalog_loader import load_rule_catalog, load_users
from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.application.vote_signer import VoteSigner
from approvalflow.core.domain.config_schema import EngineSettings

if TYPE_CHECKING:
    from approvalflow.core.interfaces.directory import DirectoryProtocol
    from approvalflow.core.interfaces.notifications import NotificationSinkProtocol
    from approvalflow.core.interfaces.task_store import TaskStoreProtocol

logger = structlog.get_logger(__name__)


class InfrastructureBuilder:
    """
    Builder for infrastructure components.

    Infrastructure imports are deferred to the build methods so that the
    application layer has no import-time dependency on adapters.

    Args:
        settings: Engine settings; defaults apply when omitted.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()
        self._logger = logger.bind(component="InfrastructureBuilder")

    def build_task_store(self) -> TaskStoreProtocol:
        """Create the task store selected by ``settings.persistence``."""
        if self.settings.persistence == "file":
            from approvalflow.infrastructure.persistence.file_task_store import FileTaskStore

            self._logger.info("task_store.file", work_dir=self.settings.work_dir)
            return FileTaskStore(work_dir=self.settings.work_dir)

        from approvalflow.infrastructure.persistence.in_memory_task_store import (
            InMemoryTaskStore,
        )

        return InMemoryTaskStore()

    def build_directory(self) -> DirectoryProtocol:
        """Create the directory, seeded from ``settings.directory_path`` if set."""
        from approvalflow.infrastructure.directory.in_memory_directory import (
            InMemoryDirectory,
        )

        if self.settings.directory_path:
            return InMemoryDirectory(load_users(self.settings.directory_path))
        return InMemoryDirectory()

    def build_notification_sink(self) -> NotificationSinkProtocol:
        """Create the notification sink."""
        from approvalflow.infrastructure.notifications.logging_sink import (
            LoggingNotificationSink,
        )

        return LoggingNotificationSink()

    def build_catalog(self) -> RuleCatalog:
        """Load the rule catalog from ``settings.rules_path`` or the packaged default."""
        return load_rule_catalog(self.settings.rules_path)

    def build_approval_service(
        self,
        *,
        task_store: TaskStoreProtocol | None = None,
        directory: DirectoryProtocol | None = None,
        notifications: NotificationSinkProtocol | None = None,
        catalog: RuleCatalog | None = None,
    ) -> ApprovalService:
        """Wire an ApprovalService, building any collaborator not supplied."""
        return ApprovalService(
            task_store=task_store or self.build_task_store(),
            directory=directory or self.build_directory(),
            notifications=notifications or self.build_notification_sink(),
            catalog=catalog or self.build_catalog(),
            signer=VoteSigner(self.settings.signing_secret),
            default_escalation_hours=self.settings.default_escalation_hours,
            enforce_sequential_order=self.settings.enforce_sequential_order,
        )
