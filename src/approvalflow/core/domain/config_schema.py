"""
Configuration Schema Validation

Pydantic models for validating rule catalogs, directory fixtures and
engine settings loaded from YAML. Provides clear error messages with file
and field context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from approvalflow.core.domain.conditions import ConditionField
from approvalflow.core.domain.enums import ApproverType, ConditionOperator, UserRole


class ConditionSchema(BaseModel):
    """Schema for a rule condition."""

    model_config = ConfigDict(extra="forbid")

    field: ConditionField
    operator: ConditionOperator
    value: Any = None

    @model_validator(mode="after")
    def validate_operand(self) -> "ConditionSchema":
        """``in`` takes a list; ordering operators take a number."""
        if self.operator is ConditionOperator.IN and not isinstance(self.value, list):
            raise ValueError("operator 'in' requires a list value")
        if self.operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
                raise ValueError(f"operator '{self.operator.value}' requires a numeric value")
        return self


class ApproverSpecSchema(BaseModel):
    """Schema for an approver spec."""

    model_config = ConfigDict(extra="forbid")

    type: ApproverType
    identifier: str = ""
    required: bool = True
    order: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_identifier(self) -> "ApproverSpecSchema":
        """``user`` and ``role`` specs must name their target."""
        if self.type in (ApproverType.USER, ApproverType.ROLE) and not self.identifier:
            raise ValueError(f"approver of type '{self.type.value}' requires 'identifier'")
        return self


class ApprovalRuleSchema(BaseModel):
    """Schema for an approval rule."""

    model_config = ConfigDict(extra="forbid")

    rule_id: str = Field(..., min_length=1)
    condition: ConditionSchema
    approvers: list[ApproverSpecSchema] = Field(..., min_length=1)
    escalation_timeout_hours: Optional[float] = Field(None, gt=0)


class ApprovalHierarchySchema(BaseModel):
    """Schema for an approval hierarchy."""

    model_config = ConfigDict(extra="forbid")

    hierarchy_id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    active: bool = True
    created_by: str = ""
    rules: list[ApprovalRuleSchema] = Field(default_factory=list)

    @field_validator("rules")
    @classmethod
    def validate_unique_rule_ids(
        cls, rules: list[ApprovalRuleSchema]
    ) -> list[ApprovalRuleSchema]:
        """Rule ids must be unique within a hierarchy."""
        seen: set[str] = set()
        for rule in rules:
            if rule.rule_id in seen:
                raise ValueError(f"duplicate rule_id: {rule.rule_id}")
            seen.add(rule.rule_id)
        return rules


class RuleCatalogSchema(BaseModel):
    """Schema for a rule catalog file."""

    model_config = ConfigDict(extra="forbid")

    hierarchies: list[ApprovalHierarchySchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_single_active(self) -> "RuleCatalogSchema":
        """At most one hierarchy may be active."""
        active = [h.hierarchy_id for h in self.hierarchies if h.active]
        if len(active) > 1:
            raise ValueError(f"more than one active hierarchy: {', '.join(active)}")
        return self


class UserSchema(BaseModel):
    """Schema for a directory user fixture."""

    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(..., min_length=1)
    role: UserRole = UserRole.MEMBER
    manager_id: Optional[str] = None
    department: Optional[str] = None
    approval_limit: Optional[float] = None
    email: str = ""
    display_name: str = ""
    active: bool = True


class DirectorySchema(BaseModel):
    """Schema for a directory fixture file."""

    model_config = ConfigDict(extra="forbid")

    users: list[UserSchema] = Field(default_factory=list)


class EngineSettings(BaseModel):
    """Schema for engine settings."""

    model_config = ConfigDict(extra="forbid")

    default_escalation_hours: float = Field(24.0, gt=0)
    signing_secret: Optional[str] = None
    enforce_sequential_order: bool = False
    rules_path: Optional[str] = None
    directory_path: Optional[str] = None
    persistence: Literal["memory", "file"] = "memory"
    work_dir: str = ".approvalflow"
    log_level: str = "INFO"


class ConfigValidationError(Exception):
    """
    Error raised when configuration validation fails.

    Includes file path and detailed error message.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        field_path: Optional[str] = None,
    ):
        self.file_path = file_path
        self.field_path = field_path

        parts = []
        if file_path:
            parts.append(f"File: {file_path}")
        if field_path:
            parts.append(f"Field: {field_path}")
        parts.append(message)

        super().__init__(" | ".join(parts))


def validate_rule_catalog(
    data: dict[str, Any],
    file_path: Optional[Path] = None,
) -> RuleCatalogSchema:
    """
    Validate rule catalog data.

    Args:
        data: Catalog dictionary
        file_path: Optional file path for error messages

    Returns:
        Validated RuleCatalogSchema

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        return RuleCatalogSchema(**data)
    except Exception as e:
        raise ConfigValidationError(str(e), file_path=file_path) from e


def validate_directory(
    data: dict[str, Any],
    file_path: Optional[Path] = None,
) -> DirectorySchema:
    """Validate a directory fixture. Raises ConfigValidationError on failure."""
    try:
        return DirectorySchema(**data)
    except Exception as e:
        raise ConfigValidationError(str(e), file_path=file_path) from e


def validate_engine_settings(
    data: dict[str, Any],
    file_path: Optional[Path] = None,
) -> EngineSettings:
    """Validate engine settings. Raises ConfigValidationError on failure."""
    try:
        return EngineSettings(**data)
    except Exception as e:
        raise ConfigValidationError(str(e), file_path=file_path) from e
