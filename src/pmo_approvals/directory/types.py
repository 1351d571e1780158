"""Directory types - users and projects referenced by change requests."""

from __future__ import annotations

from dataclasses import dataclass

from ..permissions.types import PermissionSet, Role
from ..permissions.policy import permissions_for


@dataclass(frozen=True, slots=True)
class User:
    """A user as seen by the workflow; the role drives every permission check."""
    id: int
    username: str
    name: str = ""
    role: Role | None = Role.USER
    department_id: int | None = None

    @property
    def permissions(self) -> PermissionSet:
        return permissions_for(self.role)


@dataclass(slots=True)
class Project:
    """The project a change request targets. Only the fields the workflow reads or updates."""
    id: int
    title: str = ""
    department_id: int | None = None
    manager_user_id: int | None = None
    status: str = "Planning"
    budget: float | None = None
