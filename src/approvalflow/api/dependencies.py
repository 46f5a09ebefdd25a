"""FastAPI dependency injection providers.

Settings and the approval service are created lazily and cached so that
all requests share one service (and therefore one lock registry and one
rule catalog). Tests replace them through ``app.dependency_overrides`` or
reset them with ``cache_clear()``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from approvalflow.application.approval_service import ApprovalService
from approvalflow.application.infrastructure_builder import InfrastructureBuilder
from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.application.settings import load_settings
from approvalflow.core.domain.config_schema import EngineSettings


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Provide engine settings from ``APPROVALFLOW_CONFIG`` and the environment."""
    return load_settings()


@lru_cache(maxsize=1)
def get_approval_service() -> ApprovalService:
    """Provide the shared ApprovalService."""
    return InfrastructureBuilder(get_settings()).build_approval_service()


def get_rule_catalog(
    service: ApprovalService = Depends(get_approval_service),
) -> RuleCatalog:
    """Provide the rule catalog of the shared service."""
    return service.catalog
