"""Tests for the role -> permission table."""

import dataclasses

import pytest

from pmo_approvals.permissions import NO_PERMISSIONS, ROLE_PERMISSIONS, PermissionSet, Role, permissions_for
from pmo_approvals.permissions.routes import permission_flags


CORE_FLAGS = (
    "can_create_project",
    "can_edit_project",
    "can_delete_project",
    "can_approve_project",
    "can_manage_departments",
    "can_manage_users",
    "can_submit_change_request",
    "can_approve_change_request",
    "can_create_task",
    "can_assign_task",
    "can_view_all_departments",
    "can_view_reports",
    "can_view_analytics",
    "can_access_admin_settings",
)

# Expected core flags per role
EXPECTED = {
    Role.ADMINISTRATOR: set(CORE_FLAGS),
    Role.MAIN_PMO: set(CORE_FLAGS),
    Role.SUB_PMO: {
        "can_create_project", "can_edit_project", "can_approve_project",
        "can_submit_change_request", "can_approve_change_request",
        "can_create_task", "can_assign_task", "can_view_reports", "can_view_analytics",
    },
    Role.DEPARTMENT_DIRECTOR: {
        "can_create_project", "can_edit_project", "can_approve_project",
        "can_submit_change_request", "can_approve_change_request",
        "can_create_task", "can_assign_task", "can_view_reports", "can_view_analytics",
    },
    Role.PROJECT_MANAGER: {
        "can_create_project", "can_edit_project", "can_submit_change_request",
        "can_create_task", "can_assign_task",
    },
    Role.EXECUTIVE: {
        "can_approve_project", "can_view_all_departments", "can_view_reports", "can_view_analytics",
    },
    Role.USER: {"can_submit_change_request"},
}


class TestRolePermissions:
    @pytest.mark.parametrize("role", list(Role))
    def test_core_flags_match_table(self, role):
        granted = permissions_for(role).granted() & set(CORE_FLAGS)
        assert granted == EXPECTED[role]

    def test_every_role_has_an_entry(self):
        assert set(ROLE_PERMISSIONS) == set(Role)

    @pytest.mark.parametrize("role", list(Role))
    def test_deterministic(self, role):
        assert permissions_for(role) == permissions_for(role)
        assert permissions_for(role.value) == permissions_for(role)

    def test_main_pmo_equivalent_to_administrator(self):
        assert permissions_for(Role.MAIN_PMO) == permissions_for(Role.ADMINISTRATOR)

    def test_only_global_roles_delete_or_administer(self):
        for role in Role:
            perms = permissions_for(role)
            is_global = role in (Role.ADMINISTRATOR, Role.MAIN_PMO)
            assert perms.can_delete_project is is_global
            assert perms.can_manage_users is is_global
            assert perms.can_access_admin_settings is is_global

    def test_project_manager_owned_project_extras(self):
        perms = permissions_for(Role.PROJECT_MANAGER)
        assert perms.can_edit_own_project
        assert perms.can_manage_own_project_tasks
        assert perms.can_update_own_project_costs
        assert not perms.can_approve_change_request


class TestUnknownRoles:
    def test_none_has_no_permissions(self):
        assert permissions_for(None) == NO_PERMISSIONS

    def test_unrecognised_string_has_no_permissions(self):
        assert permissions_for("SuperUser") == NO_PERMISSIONS
        assert not NO_PERMISSIONS.granted()

    def test_parse(self):
        assert Role.parse("SubPMO") is Role.SUB_PMO
        assert Role.parse("subpmo") is None
        assert Role.parse(None) is None


class TestPermissionSet:
    def test_immutable(self):
        perms = permissions_for(Role.USER)
        with pytest.raises(dataclasses.FrozenInstanceError):
            perms.can_manage_users = True

    def test_granting_rejects_unknown_flags(self):
        with pytest.raises(ValueError):
            PermissionSet.granting("can_fly")

    def test_flags_serialize_camel_case(self):
        flags = permission_flags(permissions_for(Role.SUB_PMO))
        assert flags["canApproveChangeRequest"] is True
        assert flags["canViewAllDepartments"] is False
        assert len(flags) == len(PermissionSet.flag_names())
