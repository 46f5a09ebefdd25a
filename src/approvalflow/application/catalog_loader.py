"""
Catalog Loader
==============

Loads approval hierarchies and directory fixtures from YAML files.

Responsibilities:
- Read YAML from an explicit path or the packaged ``configs`` directory
- Validate against the Pydantic schemas before building domain objects
- Report invalid files as ``ConfigError`` with the offending path
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.core.domain.approval_rule import (
    ApprovalHierarchy,
    ApprovalRule,
    ApproverSpec,
)
from approvalflow.core.domain.conditions import Condition
from approvalflow.core.domain.config_schema import (
    ApprovalHierarchySchema,
    ApprovalRuleSchema,
    ConfigValidationError,
    validate_directory,
    validate_rule_catalog,
)
from approvalflow.core.domain.errors import ConfigError
from approvalflow.core.domain.models import User
from approvalflow.core.utils.paths import get_configs_dir

logger = structlog.get_logger(__name__)

DEFAULT_RULES_FILE = "default_rules.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}", details={"path": str(path)})
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", details={"path": str(path)}) from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a mapping at the top of {path}", details={"path": str(path)}
        )
    return data


def rule_from_schema(rule: ApprovalRuleSchema) -> ApprovalRule:
    """Build a domain rule from its validated schema."""
    return ApprovalRule(
        rule_id=rule.rule_id,
        condition=Condition(
            field=rule.condition.field,
            operator=rule.condition.operator,
            value=rule.condition.value,
        ),
        approvers=[
            ApproverSpec(
                type=spec.type,
                identifier=spec.identifier,
                required=spec.required,
                order=spec.order,
            )
            for spec in rule.approvers
        ],
        escalation_timeout_hours=rule.escalation_timeout_hours,
    )


def hierarchy_from_schema(schema: ApprovalHierarchySchema) -> ApprovalHierarchy:
    """Build a domain hierarchy from its validated schema."""
    return ApprovalHierarchy(
        hierarchy_id=schema.hierarchy_id,
        rules=[rule_from_schema(rule) for rule in schema.rules],
        active=schema.active,
        name=schema.name,
        description=schema.description,
        created_by=schema.created_by,
    )


def parse_hierarchies(
    data: dict[str, Any], file_path: Path | None = None
) -> list[ApprovalHierarchy]:
    """Validate catalog data and build its hierarchies.

    Raises:
        ConfigError: If the data does not match the catalog schema.
    """
    try:
        catalog = validate_rule_catalog(data, file_path=file_path)
    except ConfigValidationError as e:
        raise ConfigError(
            str(e), details={"path": str(file_path) if file_path else None}
        ) from e
    return [hierarchy_from_schema(item) for item in catalog.hierarchies]


def load_rule_catalog(path: str | Path | None = None) -> RuleCatalog:
    """Load a rule catalog from YAML.

    Args:
        path: Catalog file. Defaults to the packaged ``default_rules.yaml``.

    Returns:
        A populated RuleCatalog.
    """
    file_path = Path(path) if path else get_configs_dir() / DEFAULT_RULES_FILE
    hierarchies = parse_hierarchies(_read_yaml(file_path), file_path)
    logger.info(
        "catalog_loader.rules_loaded",
        path=str(file_path),
        hierarchies=len(hierarchies),
    )
    return RuleCatalog(hierarchies)


def load_users(path: str | Path) -> list[User]:
    """Load directory users from a YAML fixture.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    file_path = Path(path)
    try:
        directory = validate_directory(_read_yaml(file_path), file_path=file_path)
    except ConfigValidationError as e:
        raise ConfigError(str(e), details={"path": str(file_path)}) from e
    users = [User.from_dict(item.model_dump(mode="json")) for item in directory.users]
    logger.info("catalog_loader.users_loaded", path=str(file_path), users=len(users))
    return users
