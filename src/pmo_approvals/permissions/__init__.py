"""
Permission Gate

Maps a user role to a fixed, immutable set of capability flags.
Consulted by the workflow engine and exposed to the UI via /api/permissions.
"""

from .types import PermissionSet, Role
from .policy import NO_PERMISSIONS, ROLE_PERMISSIONS, permissions_for

__all__ = [
    "PermissionSet",
    "Role",
    "NO_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "permissions_for",
]
