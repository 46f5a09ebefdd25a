import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from approvalflow import __version__
from approvalflow.api.dependencies import get_approval_service
from approvalflow.api.errors import ERROR_HEADER
from approvalflow.api.routes import approvals, health, hierarchies
from approvalflow.application.settings import configure_logging

# Configure logging based on LOGLEVEL environment variable
configure_logging(os.getenv("LOGLEVEL", "INFO"))

logger = structlog.get_logger()


async def approvalflow_http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Return standardized error responses for approval errors."""
    if (
        exc.headers
        and exc.headers.get(ERROR_HEADER) == "1"
        and isinstance(exc.detail, dict)
    ):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers={ERROR_HEADER: "1"},
        )
    return await http_exception_handler(request, exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI startup/shutdown events."""
    await logger.ainfo("fastapi.startup", message="Approvalflow API starting...")
    yield
    # Only drain if a service was actually built during this process
    if get_approval_service.cache_info().currsize:
        await get_approval_service().drain_notifications()
    await logger.ainfo("fastapi.shutdown", message="Approvalflow API shutting down...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Approvalflow API",
        description="Rule-driven approval workflows for tasks",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(HTTPException, approvalflow_http_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(approvals.router, prefix="/api/v1", tags=["approvals"])
    app.include_router(hierarchies.router, prefix="/api/v1", tags=["hierarchies"])
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8070)
