"""FastAPI entry point for the approvals service.

Start with:
    PYTHONPATH=src uvicorn pmo_approvals.app:app --host 0.0.0.0 --port 8060

Serves:
- /api/change-requests/*            - review queue, decisions, resubmission
- /api/projects/{id}/change-requests - per-project listing and submission
- /api/{entity}/{id}/comments       - comment threads (incl. audit comments)
- /api/notifications/*              - per-user notifications
- /api/permissions                  - the caller's permission flags
- /health
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from . import _bootstrap as bs
from .api_models import ErrorResponse
from .activity import routes as activity_routes
from .change_requests import routes as change_request_routes
from .errors import WorkflowError
from .permissions import routes as permission_routes

logger = logging.getLogger(__name__)


def _wire(app: FastAPI, services: bs.Services) -> None:
    """Hand each sub-router its runtime dependencies."""
    app.state.services = services
    app.state.config = services.config

    change_request_routes.configure(
        engine=services.engine,
        directory=services.directory,
        cache=services.cache,
        yaml_path=services.requests_yaml_path,
    )
    activity_routes.configure(
        activity=services.activity,
        directory=services.directory,
        engine=services.engine,
        cache=services.cache,
    )
    permission_routes.configure(directory=services.directory)


def create_app(services: bs.Services | None = None) -> FastAPI:
    """
    Build the application.

    With no services, config is loaded and everything is built at startup;
    tests pass prebuilt services instead.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is None:
            config, config_path = bs.load_config()
            bs.configure_logging(config)
            logger.info("Starting approvals service...")
            _wire(app, bs.build_services(config, config_path))
        else:
            _wire(app, services)
        logger.info("Approvals service started")
        yield
        logger.info("Approvals service stopped")

    app = FastAPI(
        title="PMO Approvals",
        description="Change request submission, two-tier review and audit trail.",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Change Requests", "description": "Change request approval workflow"},
            {"name": "Activity", "description": "Comments and notifications"},
            {"name": "Permissions", "description": "Role-based permission flags"},
            {"name": "Health", "description": "Service health"},
        ],
    )

    app.include_router(change_request_routes.router)
    app.include_router(permission_routes.router)
    app.include_router(activity_routes.router)

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.title, message=str(exc)).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(p) for p in first.get("loc", ()))
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Invalid request",
                message=f"{location}: {first.get('msg', 'invalid value')}",
            ).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error="HTTP error", message=str(exc.detail)).model_dump(),
        )

    @app.get("/health", tags=["Health"])
    async def health(request: Request) -> dict[str, Any]:
        svc: bs.Services = request.app.state.services
        return {
            "status": "healthy",
            "project": svc.config.project_name,
            "change_requests": svc.requests.count_by_status(),
            "cache": svc.cache.stats,
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn

    config, _ = bs.load_config()
    bs.configure_logging(config)
    uvicorn.run(
        "pmo_approvals.app:app",
        host=config.server.host,
        port=config.server.port,
        workers=config.server.workers,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    main()
