"""FastAPI routes exposing the permission gate to the UI."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Request
from pydantic.alias_generators import to_camel

from ..directory.registry import DirectoryRegistry
from ..identity.extractor import resolve_user
from .policy import permissions_for
from .types import PermissionSet

router = APIRouter(prefix="/api", tags=["Permissions"])

_directory: DirectoryRegistry | None = None


def configure(directory: DirectoryRegistry | None) -> None:
    """Configure the permission routes with the user directory."""
    global _directory
    _directory = directory


def permission_flags(permissions: PermissionSet) -> dict[str, bool]:
    """camelCase flag map, as the UI consumes it."""
    return {to_camel(name): value for name, value in asdict(permissions).items()}


@router.get("/permissions", response_model=dict[str, bool])
async def my_permissions(request: Request):
    """Permission flags for the calling user (all false when anonymous)."""
    user = resolve_user(request, _directory)
    return permission_flags(permissions_for(user.role if user else None))
