"""Rule catalog for approval hierarchies.

Holds approval hierarchies and selects the first matching rule for a
task. The catalog is an ordinary object passed to whoever needs it, so
several independent catalogs can coexist (one per tenant, one per test).
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from approvalflow.core.domain.approval_rule import ApprovalHierarchy, ApprovalRule
from approvalflow.core.domain.conditions import evaluate
from approvalflow.core.domain.errors import ConfigError
from approvalflow.core.domain.models import Task

logger = structlog.get_logger(__name__)


def find_matching_rule(
    hierarchy: ApprovalHierarchy,
    task: Task,
    estimated_value: float | None = None,
) -> ApprovalRule | None:
    """Return the first rule of ``hierarchy`` whose condition holds for ``task``.

    Rules are scanned in list order; there is no specificity ranking.
    """
    for rule in hierarchy.rules:
        if evaluate(rule.condition, task, estimated_value):
            return rule
    return None


class RuleCatalog:
    """Ordered collection of approval hierarchies with at most one active.

    Args:
        hierarchies: Initial hierarchies, in registration order.
    """

    def __init__(self, hierarchies: Iterable[ApprovalHierarchy] = ()) -> None:
        self._hierarchies: dict[str, ApprovalHierarchy] = {}
        self._logger = logger.bind(component="rule_catalog")
        for hierarchy in hierarchies:
            self.add(hierarchy)

    def hierarchies(self) -> list[ApprovalHierarchy]:
        """List all hierarchies in registration order."""
        return list(self._hierarchies.values())

    def get(self, hierarchy_id: str) -> ApprovalHierarchy | None:
        """Retrieve a hierarchy by ID."""
        return self._hierarchies.get(hierarchy_id)

    def active_hierarchy(self) -> ApprovalHierarchy | None:
        """Return the active hierarchy, if any."""
        for hierarchy in self._hierarchies.values():
            if hierarchy.active:
                return hierarchy
        return None

    def add(self, hierarchy: ApprovalHierarchy) -> ApprovalHierarchy:
        """Register a hierarchy.

        Adding an active hierarchy deactivates every other one.

        Raises:
            ConfigError: If the hierarchy id is already registered.
        """
        if hierarchy.hierarchy_id in self._hierarchies:
            raise ConfigError(
                f"Hierarchy already registered: {hierarchy.hierarchy_id}",
                details={"hierarchy_id": hierarchy.hierarchy_id},
            )
        self._hierarchies[hierarchy.hierarchy_id] = hierarchy
        if hierarchy.active:
            self._deactivate_others(hierarchy.hierarchy_id)
        self._logger.info(
            "rule_catalog.hierarchy_added",
            hierarchy_id=hierarchy.hierarchy_id,
            rules=len(hierarchy.rules),
            active=hierarchy.active,
        )
        return hierarchy

    def create_hierarchy(
        self,
        name: str,
        rules: Iterable[ApprovalRule] = (),
        *,
        description: str = "",
        active: bool = True,
        created_by: str = "",
    ) -> ApprovalHierarchy:
        """Build and register a new hierarchy with a generated id."""
        hierarchy = ApprovalHierarchy(
            rules=list(rules),
            active=active,
            name=name,
            description=description,
            created_by=created_by,
        )
        return self.add(hierarchy)

    def activate(self, hierarchy_id: str) -> ApprovalHierarchy:
        """Make ``hierarchy_id`` the single active hierarchy.

        Raises:
            KeyError: If the hierarchy is unknown.
        """
        hierarchy = self._hierarchies[hierarchy_id]
        hierarchy.active = True
        self._deactivate_others(hierarchy_id)
        self._logger.info("rule_catalog.hierarchy_activated", hierarchy_id=hierarchy_id)
        return hierarchy

    def deactivate(self, hierarchy_id: str) -> ApprovalHierarchy:
        """Deactivate a hierarchy. Raises KeyError if unknown."""
        hierarchy = self._hierarchies[hierarchy_id]
        hierarchy.active = False
        self._logger.info("rule_catalog.hierarchy_deactivated", hierarchy_id=hierarchy_id)
        return hierarchy

    def remove(self, hierarchy_id: str) -> bool:
        """Remove a hierarchy. Returns True if it was registered."""
        if self._hierarchies.pop(hierarchy_id, None) is None:
            return False
        self._logger.info("rule_catalog.hierarchy_removed", hierarchy_id=hierarchy_id)
        return True

    def match(self, task: Task, estimated_value: float | None = None) -> ApprovalRule | None:
        """Find the rule of the active hierarchy that applies to ``task``.

        Returns None when no hierarchy is active or no rule matches; both
        mean that no approval is required.
        """
        hierarchy = self.active_hierarchy()
        if hierarchy is None:
            self._logger.debug("rule_catalog.no_active_hierarchy", task_id=task.task_id)
            return None

        rule = find_matching_rule(hierarchy, task, estimated_value)
        if rule is not None:
            self._logger.info(
                "rule_catalog.rule_matched",
                hierarchy_id=hierarchy.hierarchy_id,
                rule_id=rule.rule_id,
                task_id=task.task_id,
            )
        return rule

    def _deactivate_others(self, hierarchy_id: str) -> None:
        for other in self._hierarchies.values():
            if other.hierarchy_id != hierarchy_id and other.active:
                other.active = False
