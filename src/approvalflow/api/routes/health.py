from fastapi import APIRouter, status
from pydantic import BaseModel

from approvalflow import __version__
from approvalflow.api.dependencies import get_approval_service
from approvalflow.api.errors import http_exception
from approvalflow.core.domain.errors import ApprovalError

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    checks: dict[str, str] | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe - is the service running?"""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check() -> HealthResponse:
    """Readiness probe - can the service handle requests?

    Verifies that settings and the rule catalog load, and reports which
    hierarchy is active.
    """
    checks: dict[str, str] = {}

    try:
        service = get_approval_service()
    except ApprovalError as e:
        checks["catalog"] = f"failed: {e.message}"
        raise http_exception(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="not_ready",
            message="Approval service unavailable",
            details=checks,
        )

    catalog = service.catalog
    checks["catalog"] = f"ok ({len(catalog.hierarchies())} hierarchies)"
    active = catalog.active_hierarchy()
    checks["active_hierarchy"] = active.hierarchy_id if active else "none"

    return HealthResponse(status="ready", version=__version__, checks=checks)
