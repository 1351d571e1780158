"""FastAPI routes for the Change Request approval workflow."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from fastapi import APIRouter, HTTPException, Request

from ..cache import keys
from ..cache.memory import QueryCache
from ..directory.registry import DirectoryRegistry
from ..directory.types import User
from ..errors import AuthorizationError, ValidationError
from ..identity.extractor import resolve_user
from .engine import WorkflowEngine, parse_enum
from .loader import load_requests_from_yaml, save_requests_to_yaml
from .models import (
    ChangeRequestListResponse,
    ChangeRequestModel,
    CreateChangeRequestBody,
    UpdateChangeRequestBody,
)
from .registry import ChangeRequestRegistry
from .types import ChangeRequest, ChangeRequestStatus, ProjectUpdate

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["Change Requests"])

# Configuration - set during app startup
_engine: WorkflowEngine | None = None
_directory: DirectoryRegistry | None = None
_cache: QueryCache | None = None
_yaml_path: str | None = None


def configure(
    engine: WorkflowEngine,
    directory: DirectoryRegistry | None = None,
    cache: QueryCache | None = None,
    yaml_path: str | None = None,
) -> None:
    """Configure the change request routes with their collaborators."""
    global _engine, _directory, _cache, _yaml_path
    _engine = engine
    _directory = directory
    _cache = cache
    _yaml_path = yaml_path


def _get_engine() -> WorkflowEngine:
    """Get the engine, raising if not configured."""
    if _engine is None:
        raise HTTPException(status_code=503, detail="Change request module not initialized")
    return _engine


def _current_user(request: Request) -> User | None:
    return resolve_user(request, _directory)


def _to_model(req: ChangeRequest) -> ChangeRequestModel:
    """Convert a ChangeRequest to its Pydantic response model."""
    return ChangeRequestModel(
        id=req.id,
        project_id=req.project_id,
        type=req.type.value,
        status=req.status.value,
        details=req.details,
        details_ar=req.details_ar,
        rejection_reason=req.rejection_reason,
        requested_by_user_id=req.requested_by_user_id,
        reviewed_by_user_id=req.reviewed_by_user_id,
        reviewed_at=req.reviewed_at,
        created_at=req.created_at,
        updated_at=req.updated_at,
    )


def _cached(key: str, load):
    if _cache is None:
        return load()
    return _cache.get_or_load(key, load)


# =============================================================================
# Review queue
# =============================================================================

@router.get("/change-requests/pending", response_model=list[ChangeRequestModel])
async def list_pending(request: Request):
    """Change requests awaiting the current user's review."""
    engine = _get_engine()
    user = _current_user(request)

    def load() -> list[ChangeRequestModel]:
        return [_to_model(r) for r in engine.pending_for(user)]

    if user is None:
        return load()  # raises AuthorizationError
    return _cached(keys.pending_key(user.id), load)


@router.get("/change-requests", response_model=ChangeRequestListResponse)
async def list_change_requests(request: Request, status: str | None = None):
    """List all change requests (optionally by status) with counts. Global viewers only."""
    engine = _get_engine()
    user = _current_user(request)
    if user is None or not user.permissions.can_view_all_departments:
        raise AuthorizationError("Listing all change requests requires cross-department access")

    if status:
        requests = engine.store.find_by_status(parse_enum(ChangeRequestStatus, status, "status"))
    else:
        requests = engine.store.list_all()

    # Newest first
    requests.sort(key=lambda r: r.created_at or "", reverse=True)

    return ChangeRequestListResponse(
        requests=[_to_model(r) for r in requests],
        total=len(requests),
        by_status=engine.store.count_by_status(),
    )


# =============================================================================
# Save / Reload
# =============================================================================

def _require_admin(request: Request) -> None:
    user = _current_user(request)
    if user is None or not user.permissions.can_access_admin_settings:
        raise AuthorizationError("Administrator access required")


@router.post("/change-requests/save")
async def save_change_requests(request: Request):
    """Manually save change requests to YAML."""
    _require_admin(request)
    engine = _get_engine()

    if not _yaml_path or not isinstance(engine.store, ChangeRequestRegistry):
        raise HTTPException(status_code=400, detail="No YAML path configured for change requests")

    count = save_requests_to_yaml(_yaml_path, engine.store)
    return {"success": True, "count": count, "message": f"Saved {count} change requests"}


@router.post("/change-requests/reload")
async def reload_change_requests(request: Request):
    """Reload change requests from YAML, replacing the in-memory state."""
    _require_admin(request)
    engine = _get_engine()

    if not _yaml_path or not isinstance(engine.store, ChangeRequestRegistry):
        raise HTTPException(status_code=400, detail="No YAML path configured for change requests")

    if not Path(_yaml_path).exists():
        raise HTTPException(status_code=404, detail=f"Change requests file not found: {_yaml_path}")

    # Parse into a scratch registry; the live one is untouched unless the whole file loads
    staged = ChangeRequestRegistry()
    try:
        load_requests_from_yaml(_yaml_path, staged)
    except (yaml.YAMLError, AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Reload of {_yaml_path} failed, keeping current change requests: {e}")
        raise ValidationError(f"Change requests file is invalid: {e}") from e

    count = engine.store.replace_all(staged.list_all())
    if _cache is not None:
        _cache.invalidate_prefix(keys.CHANGE_REQUESTS_PREFIX)
    return {"success": True, "count": count, "message": f"Reloaded {count} change requests"}


# =============================================================================
# Get / Update
# =============================================================================

@router.get("/change-requests/{request_id}", response_model=ChangeRequestModel)
async def get_change_request(request_id: int, request: Request):
    """Get a single change request by ID."""
    engine = _get_engine()
    return _to_model(engine.get_visible(request_id, _current_user(request)))


@router.put("/change-requests/{request_id}", response_model=ChangeRequestModel)
async def update_change_request(request_id: int, body: UpdateChangeRequestBody, request: Request):
    """
    Apply a review decision.

    `status` is the requested outcome:
    - Approved: approve (a Sub PMO approval escalates to PendingMainPMO)
    - Rejected / ReturnedTo*: reject with rejectionReason, routed by returnTo
    - Pending: resubmit a returned request, optionally with revised details
    """
    engine = _get_engine()
    user = _current_user(request)

    project_update = None
    if body.new_status is not None or body.new_budget is not None:
        project_update = ProjectUpdate(status=body.new_status, budget=body.new_budget)

    updated = engine.apply_update(
        request_id,
        user,
        body.status,
        rejection_reason=body.rejection_reason,
        return_to=body.return_to,
        details=body.details,
        project_update=project_update,
    )
    return _to_model(updated)


# =============================================================================
# Project-scoped
# =============================================================================

@router.get("/projects/{project_id}/change-requests", response_model=list[ChangeRequestModel])
async def list_project_change_requests(project_id: int, request: Request):
    """List the change requests of one project."""
    engine = _get_engine()
    user = _current_user(request)

    def load() -> list[ChangeRequestModel]:
        return [_to_model(r) for r in engine.for_project(project_id, user)]

    if user is None:
        return load()  # raises AuthorizationError
    return _cached(keys.project_requests_key(project_id, user.id), load)


@router.post(
    "/projects/{project_id}/change-requests",
    response_model=ChangeRequestModel,
    status_code=201,
)
async def submit_change_request(project_id: int, body: CreateChangeRequestBody, request: Request):
    """Submit a new change request for a project. It starts in Pending."""
    engine = _get_engine()
    user = _current_user(request)

    created = engine.submit(
        user,
        project_id,
        body.type,
        body.details,
        details_ar=body.details_ar,
    )
    return _to_model(created)
