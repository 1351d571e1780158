"""Role -> permission policy table."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .types import PermissionSet, Role

NO_PERMISSIONS = PermissionSet()

_OWN_PROJECT = (
    "can_edit_own_project",
    "can_manage_own_project_tasks",
    "can_update_own_project_costs",
)

_REVIEWER = (
    "can_create_project",
    "can_edit_project",
    "can_approve_project",
    "can_submit_change_request",
    "can_approve_change_request",
    "can_create_task",
    "can_assign_task",
    "can_view_reports",
    "can_view_analytics",
    *_OWN_PROJECT,
    "can_create_goal",
    "can_create_assignment",
    "can_create_risk_issue",
)

ROLE_PERMISSIONS: Mapping[Role, PermissionSet] = MappingProxyType({
    Role.ADMINISTRATOR: PermissionSet.all_granted(),
    # Main PMO is equivalent to Administrator
    Role.MAIN_PMO: PermissionSet.all_granted(),
    Role.SUB_PMO: PermissionSet.granting(*_REVIEWER),
    Role.DEPARTMENT_DIRECTOR: PermissionSet.granting(*_REVIEWER),
    Role.PROJECT_MANAGER: PermissionSet.granting(
        "can_create_project",
        "can_edit_project",
        "can_submit_change_request",
        "can_create_task",
        "can_assign_task",
        *_OWN_PROJECT,
        "can_create_goal",
        "can_create_assignment",
        "can_create_risk_issue",
    ),
    Role.EXECUTIVE: PermissionSet.granting(
        "can_approve_project",
        "can_view_all_departments",
        "can_view_reports",
        "can_view_analytics",
        "can_create_goal",
        "can_create_assignment",
        "can_create_risk_issue",
    ),
    Role.USER: PermissionSet.granting(
        "can_submit_change_request",
        "can_create_assignment",
        "can_create_risk_issue",
    ),
})


def permissions_for(role: Role | str | None) -> PermissionSet:
    """
    Return the permission set for a role.

    Total: a missing or unrecognised role gets no permissions.
    """
    parsed = Role.parse(role)
    if parsed is None:
        return NO_PERMISSIONS
    return ROLE_PERMISSIONS[parsed]
