"""
Hierarchy API Routes
====================

Endpoints:
- GET /api/v1/hierarchies - List hierarchies
- POST /api/v1/hierarchies - Create a hierarchy
- POST /api/v1/hierarchies/{hierarchy_id}/activate - Make it the active one
"""

from fastapi import APIRouter, Depends, status

from approvalflow.api.dependencies import get_rule_catalog
from approvalflow.api.errors import http_exception
from approvalflow.api.schemas.approval_schemas import (
    HierarchyCreate,
    HierarchyListResponse,
    HierarchyResponse,
)
from approvalflow.application.catalog_loader import rule_from_schema
from approvalflow.application.rule_catalog import RuleCatalog

router = APIRouter()


@router.get("/hierarchies", response_model=HierarchyListResponse)
def list_hierarchies(
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> HierarchyListResponse:
    """List all hierarchies with their rules."""
    return HierarchyListResponse(
        hierarchies=[HierarchyResponse.from_domain(h) for h in catalog.hierarchies()]
    )


@router.post(
    "/hierarchies",
    response_model=HierarchyResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_hierarchy(
    body: HierarchyCreate,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> HierarchyResponse:
    """
    Create a hierarchy.

    Creating it as active deactivates the current active hierarchy.
    """
    hierarchy = catalog.create_hierarchy(
        body.name,
        [rule_from_schema(rule) for rule in body.rules],
        description=body.description,
        active=body.active,
        created_by=body.created_by,
    )
    return HierarchyResponse.from_domain(hierarchy)


@router.post(
    "/hierarchies/{hierarchy_id}/activate",
    response_model=HierarchyResponse,
)
def activate_hierarchy(
    hierarchy_id: str,
    catalog: RuleCatalog = Depends(get_rule_catalog),
) -> HierarchyResponse:
    """Activate a hierarchy; every other hierarchy is deactivated."""
    try:
        hierarchy = catalog.activate(hierarchy_id)
    except KeyError:
        raise http_exception(
            status_code=status.HTTP_404_NOT_FOUND,
            code="hierarchy_not_found",
            message=f"Hierarchy not found: {hierarchy_id}",
            details={"hierarchy_id": hierarchy_id},
        )
    return HierarchyResponse.from_domain(hierarchy)
