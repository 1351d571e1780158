"""
Change Request Approval Workflow

Project managers submit change requests (schedule, budget, scope, ...).
Sub PMO reviewers approve - escalating to Main PMO for a second sign-off -
or return them for revision; Faculty changes need a single approval.
"""

from .types import (
    ChangeRequest,
    ChangeRequestStatus,
    ChangeRequestType,
    ProjectUpdate,
    ReturnTarget,
    ReviewAction,
)
from .workflow import Transition, next_transition
from .store import ChangeRequestStore
from .registry import ChangeRequestRegistry
from .engine import WorkflowEngine
from .loader import load_requests_from_yaml, save_requests_to_yaml

__all__ = [
    "ChangeRequest",
    "ChangeRequestStatus",
    "ChangeRequestType",
    "ProjectUpdate",
    "ReturnTarget",
    "ReviewAction",
    "Transition",
    "next_transition",
    "ChangeRequestStore",
    "ChangeRequestRegistry",
    "WorkflowEngine",
    "load_requests_from_yaml",
    "save_requests_to_yaml",
]
