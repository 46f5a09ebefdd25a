"""
Condition evaluation for approval rules.

A condition compares one task field against a literal value. Fields form
a closed set: each ``ConditionField`` member carries its own accessor, so
adding a field means adding a member and its accessor together. Anything
outside the supported vocabulary is a silent non-match, never an error.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from approvalflow.core.domain.enums import ConditionOperator
from approvalflow.core.domain.models import Task

logger = structlog.get_logger(__name__)


class ConditionField(str, Enum):
    """Task fields that rule conditions may inspect."""

    PRIORITY = "priority"
    ESTIMATED_VALUE = "estimatedValue"
    TASK_TYPE = "taskType"
    PROJECT_ID = "projectId"
    DEPARTMENT = "department"

    def read(self, task: Task, estimated_value: float | None) -> Any:
        """Return this field's value for ``task``."""
        return _FIELD_ACCESSORS[self](task, estimated_value)


def _read_estimated_value(task: Task, estimated_value: float | None) -> float:
    if estimated_value is not None:
        return estimated_value
    return task.estimated_value or 0


_FIELD_ACCESSORS: dict[ConditionField, Callable[[Task, float | None], Any]] = {
    ConditionField.PRIORITY: lambda task, _: task.priority.value,
    ConditionField.ESTIMATED_VALUE: _read_estimated_value,
    ConditionField.TASK_TYPE: lambda task, _: ",".join(task.tags),
    ConditionField.PROJECT_ID: lambda task, _: task.project_id,
    ConditionField.DEPARTMENT: lambda task, _: task.department,
}


@dataclass(frozen=True)
class Condition:
    """A single ``field operator value`` predicate.

    Strings are coerced to the field/operator enums when they name a
    supported member; unsupported names are kept verbatim so that the
    condition simply never matches.
    """

    field: ConditionField | str
    operator: ConditionOperator | str
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.field, ConditionField):
            try:
                object.__setattr__(self, "field", ConditionField(self.field))
            except ValueError:
                pass
        if not isinstance(self.operator, ConditionOperator):
            try:
                object.__setattr__(self, "operator", ConditionOperator(self.operator))
            except ValueError:
                pass

    @property
    def is_supported(self) -> bool:
        return isinstance(self.field, ConditionField) and isinstance(
            self.operator, ConditionOperator
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        value = self.value
        if isinstance(value, (set, frozenset, tuple)):
            value = list(value)
        return {
            "field": getattr(self.field, "value", self.field),
            "operator": getattr(self.operator, "value", self.operator),
            "value": value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        """Deserialize from stored dict."""
        return cls(
            field=str(data.get("field", "")),
            operator=str(data.get("operator", "")),
            value=data.get("value"),
        )


def _compare(operator: ConditionOperator, actual: Any, expected: Any) -> bool:
    if operator is ConditionOperator.EQUALS:
        return actual == expected
    if operator is ConditionOperator.IN:
        if not isinstance(expected, (list, tuple, set, frozenset)):
            return False
        return actual in expected
    if operator is ConditionOperator.CONTAINS:
        if actual is None or expected is None:
            return False
        return str(expected).lower() in str(actual).lower()
    try:
        if operator is ConditionOperator.GREATER_THAN:
            return bool(actual > expected)
        if operator is ConditionOperator.LESS_THAN:
            return bool(actual < expected)
    except TypeError:
        return False
    return False


def evaluate(condition: Condition, task: Task, estimated_value: float | None = None) -> bool:
    """Evaluate ``condition`` against a task snapshot.

    Args:
        condition: The rule condition.
        task: Task snapshot being considered for approval.
        estimated_value: Monetary value supplied with the request; takes
            precedence over the value stored on the task.

    Returns:
        True if the condition holds. Unsupported fields or operators and
        incomparable operands evaluate to False.
    """
    if not condition.is_supported:
        logger.debug(
            "condition.unsupported",
            field=str(condition.field),
            operator=str(condition.operator),
        )
        return False

    actual = condition.field.read(task, estimated_value)  # type: ignore[union-attr]
    return _compare(condition.operator, actual, condition.value)  # type: ignore[arg-type]
