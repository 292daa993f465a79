"""Application entrypoint for the Power BI Workspace Service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api.routes import router as api_router
from .clients.powerbi import PowerBIClient
from .config import AppConfig, get_settings
from .errors import (
    AmbiguousRemoteStateError,
    CapacityNotFoundError,
    RemoteUnavailableError,
    ReplacementRequiredError,
    WorkspaceNotFoundError,
    WorkspaceServiceError,
)
from .services.capacity_resolver import CapacityResolver
from .services.workspace_reconciler import WorkspaceReconciler

LOGGER = logging.getLogger(__name__)

ERROR_STATUS = {
    RemoteUnavailableError: 502,
    CapacityNotFoundError: 422,
    AmbiguousRemoteStateError: 409,
    WorkspaceNotFoundError: 404,
    ReplacementRequiredError: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: AppConfig = app.state.settings
    client: PowerBIClient = app.state.client
    LOGGER.info("Starting Power BI Workspace Service", extra={"service": settings.service_name})
    yield
    LOGGER.info("Shutting down Power BI Workspace Service")
    client.close()


async def handle_service_error(request: Request, exc: WorkspaceServiceError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    LOGGER.warning(
        "Workspace operation failed",
        extra={"error": type(exc).__name__, "step": exc.step, "workspace_id": exc.workspace_id},
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "error": type(exc).__name__,
            "step": exc.step,
            "workspace_id": exc.workspace_id,
        },
    )


def create_app(settings: Optional[AppConfig] = None, client: Optional[PowerBIClient] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    logging.basicConfig(level=settings.logging.level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    client = client or PowerBIClient.from_config(settings.powerbi)
    resolver = CapacityResolver(client)
    reconciler = WorkspaceReconciler(client, resolver)

    app = FastAPI(
        title="Power BI Workspace Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(api_router, prefix=settings.api_prefix)
    app.add_exception_handler(WorkspaceServiceError, handle_service_error)

    app.state.settings = settings
    app.state.client = client
    app.state.resolver = resolver
    app.state.reconciler = reconciler

    return app


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("pbi_workspaces.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=False)
