"""Shared error-handling utilities for API routes.

Every route module produces the same standardized ``ErrorResponse``
payload with the ``X-Approvalflow-Error: 1`` header, either through
``http_exception`` directly or by converting a domain error with
``approval_http_exception``.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from approvalflow.api.schemas.errors import ErrorResponse
from approvalflow.core.domain.errors import ApprovalError

ERROR_HEADER = "X-Approvalflow-Error"


def http_exception(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> HTTPException:
    """Build a standardized HTTPException with ErrorResponse payload.

    Args:
        status_code: HTTP status code.
        code: Machine-readable error code (e.g. ``"task_not_found"``).
        message: Human-readable error description.
        details: Optional structured error details.

    Returns:
        HTTPException ready to be raised from a route handler.
    """
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            code=code, message=message, details=details, detail=message
        ).model_dump(exclude_none=True),
        headers={ERROR_HEADER: "1"},
    )


def approval_http_exception(error: ApprovalError) -> HTTPException:
    """Map a domain error onto its HTTP status and error payload."""
    return http_exception(
        status_code=error.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=error.code,
        message=error.message,
        details=error.details or None,
    )
