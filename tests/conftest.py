"""Shared test fixtures for the approvals service.

The directory holds one user per role plus two departments:

    department 10: project 100 (managed by pm), sub_pmo, director, staff
    department 20: project 101 (managed by pm), other_sub_pmo
"""

import pytest

from pmo_approvals.activity.audit import AuditTrail
from pmo_approvals.activity.registry import ActivityRegistry
from pmo_approvals.cache.memory import QueryCache
from pmo_approvals.change_requests.engine import WorkflowEngine
from pmo_approvals.change_requests.registry import ChangeRequestRegistry
from pmo_approvals.change_requests.types import (
    ChangeRequest,
    ChangeRequestStatus,
    ChangeRequestType,
)
from pmo_approvals.directory.registry import DirectoryRegistry
from pmo_approvals.directory.types import Project, User
from pmo_approvals.permissions.types import Role


IT_DEPARTMENT = 10
FINANCE_DEPARTMENT = 20


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def admin() -> User:
    return User(id=1, username="admin", role=Role.ADMINISTRATOR)


@pytest.fixture
def main_pmo() -> User:
    return User(id=2, username="main.pmo", role=Role.MAIN_PMO)


@pytest.fixture
def sub_pmo() -> User:
    return User(id=3, username="it.pmo", role=Role.SUB_PMO, department_id=IT_DEPARTMENT)


@pytest.fixture
def other_sub_pmo() -> User:
    return User(id=4, username="fin.pmo", role=Role.SUB_PMO, department_id=FINANCE_DEPARTMENT)


@pytest.fixture
def pm() -> User:
    return User(id=5, username="pm", role=Role.PROJECT_MANAGER, department_id=IT_DEPARTMENT)


@pytest.fixture
def director() -> User:
    return User(id=6, username="it.director", role=Role.DEPARTMENT_DIRECTOR, department_id=IT_DEPARTMENT)


@pytest.fixture
def executive() -> User:
    return User(id=7, username="exec", role=Role.EXECUTIVE)


@pytest.fixture
def staff() -> User:
    return User(id=8, username="staff", role=Role.USER, department_id=IT_DEPARTMENT)


@pytest.fixture
def roleless() -> User:
    return User(id=9, username="ghost", role=None)


@pytest.fixture
def directory(admin, main_pmo, sub_pmo, other_sub_pmo, pm, director, executive, staff, roleless):
    registry = DirectoryRegistry()
    for user in (admin, main_pmo, sub_pmo, other_sub_pmo, pm, director, executive, staff, roleless):
        registry.add_user(user)
    registry.add_project(Project(
        id=100, title="Student Portal", department_id=IT_DEPARTMENT,
        manager_user_id=pm.id, status="InProgress", budget=250000.0,
    ))
    registry.add_project(Project(
        id=101, title="Finance ERP", department_id=FINANCE_DEPARTMENT,
        manager_user_id=pm.id, status="Planning", budget=900000.0,
    ))
    return registry


# =============================================================================
# Workflow Fixtures
# =============================================================================

@pytest.fixture
def registry() -> ChangeRequestRegistry:
    return ChangeRequestRegistry()


@pytest.fixture
def activity() -> ActivityRegistry:
    return ActivityRegistry()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache(max_size=100, default_ttl_seconds=60)


@pytest.fixture
def audit(activity, cache) -> AuditTrail:
    return AuditTrail(activity=activity, cache=cache)


@pytest.fixture
def engine(registry, audit, directory, cache) -> WorkflowEngine:
    return WorkflowEngine(store=registry, audit=audit, directory=directory, cache=cache)


@pytest.fixture
def make_request(registry, pm):
    """Create a stored change request, optionally forcing its status."""

    def _make(
        request_type: ChangeRequestType = ChangeRequestType.BUDGET,
        project_id: int = 100,
        status: ChangeRequestStatus = ChangeRequestStatus.PENDING,
        requested_by: int = pm.id,
        details: str = "Increase budget by 10%",
    ) -> ChangeRequest:
        created = registry.create(ChangeRequest(
            id=0,
            project_id=project_id,
            type=request_type,
            details=details,
            requested_by_user_id=requested_by,
        ))
        if status is not ChangeRequestStatus.PENDING:
            created = registry.compare_and_set(created.id, ChangeRequestStatus.PENDING, status=status)
        return created

    return _make
