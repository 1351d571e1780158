"""Permission types - roles and the capability set derived from them."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum


class Role(str, Enum):
    """User role; the sole input to permission decisions."""
    USER = "User"
    PROJECT_MANAGER = "ProjectManager"
    SUB_PMO = "SubPMO"
    MAIN_PMO = "MainPMO"
    DEPARTMENT_DIRECTOR = "DepartmentDirector"
    EXECUTIVE = "Executive"
    ADMINISTRATOR = "Administrator"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role | None":
        """Return the matching role, or None for missing/unknown values."""
        if value is None or isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class PermissionSet:
    """Immutable set of capability flags for a role."""
    can_create_project: bool = False
    can_edit_project: bool = False
    can_delete_project: bool = False
    can_approve_project: bool = False
    can_manage_departments: bool = False
    can_manage_users: bool = False
    can_submit_change_request: bool = False
    can_approve_change_request: bool = False
    can_create_task: bool = False
    can_assign_task: bool = False
    can_view_all_departments: bool = False
    can_view_reports: bool = False
    can_view_analytics: bool = False
    can_access_admin_settings: bool = False

    # Owned-project permissions
    can_edit_own_project: bool = False
    can_manage_own_project_tasks: bool = False
    can_update_own_project_costs: bool = False

    # Goals, assignments, risks/issues
    can_create_goal: bool = False
    can_create_assignment: bool = False
    can_create_risk_issue: bool = False

    @classmethod
    def flag_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def granting(cls, *names: str) -> PermissionSet:
        """Build a set with exactly the named flags enabled."""
        unknown = set(names) - set(cls.flag_names())
        if unknown:
            raise ValueError(f"Unknown permission flags: {sorted(unknown)}")
        return cls(**{name: True for name in names})

    @classmethod
    def all_granted(cls) -> PermissionSet:
        return cls.granting(*cls.flag_names())

    def granted(self) -> frozenset[str]:
        """Names of the enabled flags."""
        return frozenset(name for name, value in asdict(self).items() if value)
