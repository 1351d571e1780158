"""Change request types - domain types for the approval workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChangeRequestType(str, Enum):
    """What a change request proposes to change. Immutable after creation."""
    SCHEDULE = "Schedule"
    BUDGET = "Budget"
    SCOPE = "Scope"
    DELEGATION = "Delegation"
    STATUS = "Status"
    CLOSURE = "Closure"
    ADJUST_TEAM = "AdjustTeam"
    FACULTY = "Faculty"


class ChangeRequestStatus(str, Enum):
    """Status of a change request through the approval workflow."""
    PENDING = "Pending"
    PENDING_MAIN_PMO = "PendingMainPMO"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    RETURNED_TO_PROJECT_MANAGER = "ReturnedToProjectManager"
    RETURNED_TO_SUB_PMO = "ReturnedToSubPMO"

    @property
    def is_active(self) -> bool:
        """Awaiting a reviewer decision."""
        return self in ACTIVE_STATUSES

    @property
    def is_returned(self) -> bool:
        """Sent back for revision."""
        return self in RETURNED_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


ACTIVE_STATUSES = frozenset({ChangeRequestStatus.PENDING, ChangeRequestStatus.PENDING_MAIN_PMO})
RETURNED_STATUSES = frozenset({
    ChangeRequestStatus.RETURNED_TO_PROJECT_MANAGER,
    ChangeRequestStatus.RETURNED_TO_SUB_PMO,
})
TERMINAL_STATUSES = frozenset({ChangeRequestStatus.APPROVED, ChangeRequestStatus.REJECTED})


class ReturnTarget(str, Enum):
    """Role a rejected request is routed back to for revision."""
    PROJECT_MANAGER = "ProjectManager"
    SUB_PMO = "SubPMO"

    @property
    def returned_status(self) -> ChangeRequestStatus:
        if self is ReturnTarget.SUB_PMO:
            return ChangeRequestStatus.RETURNED_TO_SUB_PMO
        return ChangeRequestStatus.RETURNED_TO_PROJECT_MANAGER


class ReviewAction(str, Enum):
    """Workflow event applied to a change request."""
    APPROVE = "approve"
    REJECT = "reject"
    RESUBMIT = "resubmit"


@dataclass(frozen=True, slots=True)
class ProjectUpdate:
    """Project fields applied when a Status or Budget request is approved."""
    status: str | None = None
    budget: float | None = None


@dataclass(slots=True)
class ChangeRequest:
    """
    A proposed modification to a project, tracked through review.

    `type` and `requested_by_user_id` never change after creation;
    `status` is only ever changed by the workflow engine.
    """
    id: int
    project_id: int
    type: ChangeRequestType
    details: str
    requested_by_user_id: int
    details_ar: str | None = None

    # Workflow state
    status: ChangeRequestStatus = ChangeRequestStatus.PENDING
    rejection_reason: str | None = None

    # Review
    reviewed_by_user_id: int | None = None
    reviewed_at: str | None = None

    # Timestamps
    created_at: str | None = None
    updated_at: str | None = None
