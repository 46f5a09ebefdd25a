"""Approval rule domain models.

A hierarchy is an ordered list of rules; each rule pairs one condition
with the approver specs that must sign off when it matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from approvalflow.core.domain.conditions import Condition
from approvalflow.core.domain.enums import ApprovalType, ApproverType
from approvalflow.core.utils.time import parse_datetime, utc_now


@dataclass(frozen=True)
class ApproverSpec:
    """Abstract description of who must approve.

    Attributes:
        type: How the spec is expanded into users.
        identifier: User id for ``user``, role name for ``role``; informational
            for relationship-derived types.
        required: Whether this approver counts towards the required quorum.
        order: Position in a sequential chain. Any spec with an order makes
            the whole rule sequential.
    """

    type: ApproverType
    identifier: str = ""
    required: bool = True
    order: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        result: dict[str, Any] = {
            "type": self.type.value,
            "identifier": self.identifier,
            "required": self.required,
        }
        if self.order is not None:
            result["order"] = self.order
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApproverSpec:
        """Deserialize from stored dict."""
        order = data.get("order")
        return cls(
            type=ApproverType(data["type"]),
            identifier=str(data.get("identifier", "")),
            required=bool(data.get("required", True)),
            order=int(order) if order is not None else None,
        )


@dataclass
class ApprovalRule:
    """A condition and the approvers it calls for."""

    rule_id: str
    condition: Condition
    approvers: list[ApproverSpec] = field(default_factory=list)
    escalation_timeout_hours: float | None = None

    @property
    def approval_type(self) -> ApprovalType:
        """Quorum discipline derived from the approver specs."""
        if any(spec.order is not None for spec in self.approvers):
            return ApprovalType.SEQUENTIAL
        if all(spec.required for spec in self.approvers):
            return ApprovalType.PARALLEL
        return ApprovalType.ANY_ONE

    @property
    def required_approvals(self) -> int:
        """Number of required specs, never less than one."""
        return max(1, sum(1 for spec in self.approvers if spec.required))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "rule_id": self.rule_id,
            "condition": self.condition.to_dict(),
            "approvers": [spec.to_dict() for spec in self.approvers],
            "escalation_timeout_hours": self.escalation_timeout_hours,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApprovalRule:
        """Deserialize from stored dict."""
        timeout = data.get("escalation_timeout_hours")
        return cls(
            rule_id=str(data.get("rule_id", uuid4().hex)),
            condition=Condition.from_dict(data.get("condition", {})),
            approvers=[ApproverSpec.from_dict(item) for item in data.get("approvers", [])],
            escalation_timeout_hours=float(timeout) if timeout is not None else None,
        )


@dataclass
class ApprovalHierarchy:
    """An ordered set of approval rules.

    Attributes:
        hierarchy_id: Unique identifier.
        rules: Rules in evaluation order; the first match wins.
        active: Only an active hierarchy is consulted.
        name: Human-readable name.
        description: What this hierarchy governs.
        created_by: User id of the author.
        created_at: When the hierarchy was created.
    """

    hierarchy_id: str = field(default_factory=lambda: f"hierarchy-{uuid4().hex[:12]}")
    rules: list[ApprovalRule] = field(default_factory=list)
    active: bool = True
    name: str = ""
    description: str = ""
    created_by: str = ""
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "hierarchy_id": self.hierarchy_id,
            "name": self.name,
            "description": self.description,
            "rules": [rule.to_dict() for rule in self.rules],
            "active": self.active,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApprovalHierarchy:
        """Deserialize from stored dict."""
        return cls(
            hierarchy_id=str(data.get("hierarchy_id") or f"hierarchy-{uuid4().hex[:12]}"),
            rules=[ApprovalRule.from_dict(item) for item in data.get("rules", [])],
            active=bool(data.get("active", True)),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            created_by=str(data.get("created_by", "")),
            created_at=parse_datetime(data.get("created_at")) or utc_now(),
        )
