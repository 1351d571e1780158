"""Workflow engine - authorizes, commits and records change request transitions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TypeVar

from ..activity.audit import AuditTrail
from ..cache import keys
from ..cache.memory import QueryCache
from ..directory.registry import DirectoryRegistry
from ..directory.types import Project, User
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..permissions.types import Role
from .registry import utc_now
from .store import ChangeRequestStore
from .types import (
    ChangeRequest,
    ChangeRequestStatus,
    ChangeRequestType,
    ProjectUpdate,
    ReturnTarget,
    ReviewAction,
)
from .workflow import Transition, next_transition

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# Reviewers who see and act on every department's requests.
GLOBAL_REVIEWER_ROLES = frozenset({Role.ADMINISTRATOR, Role.MAIN_PMO})

# Reviewers limited to projects in their own department.
DEPARTMENT_SCOPED_ROLES = frozenset({Role.SUB_PMO, Role.DEPARTMENT_DIRECTOR})


def parse_enum(enum_cls: type[E], value: E | str, label: str) -> E:
    """Coerce a wire value to an enum member, raising ValidationError if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {label}: {value!r} (expected one of: {allowed})")


class WorkflowEngine:
    """
    Applies the approval workflow to stored change requests.

    Every transition goes: load snapshot -> authorize -> compute the next
    status (pure) -> compare-and-set on the store. Side effects run only
    after a successful commit and never undo it:

    - an auto-comment "Status changed from X to Y" plus a notification
      to the requester
    - invalidation of cached change request listings
    - on approval of Status/Budget requests, the project update
    """

    def __init__(
        self,
        store: ChangeRequestStore,
        audit: AuditTrail | None = None,
        directory: DirectoryRegistry | None = None,
        cache: QueryCache | None = None,
    ) -> None:
        self._store = store
        self._audit = audit
        self._directory = directory
        self._cache = cache

    @property
    def store(self) -> ChangeRequestStore:
        return self._store

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, request_id: int) -> ChangeRequest:
        """Get a change request, raising NotFoundError if missing."""
        request = self._store.get(request_id)
        if request is None:
            raise NotFoundError(f"Change request not found: {request_id}")
        return request

    def pending_for(self, actor: User | None) -> list[ChangeRequest]:
        """
        Change requests awaiting the actor's decision.

        Administrators and Main PMO see Pending and PendingMainPMO across all
        departments; other approvers see Pending requests of their department.
        """
        actor = self._require_actor(actor)
        if not actor.permissions.can_approve_change_request:
            raise AuthorizationError("You are not allowed to review change requests")

        if actor.role in GLOBAL_REVIEWER_ROLES:
            return self._store.find_by_status(
                ChangeRequestStatus.PENDING,
                ChangeRequestStatus.PENDING_MAIN_PMO,
            )

        pending = self._store.find_by_status(ChangeRequestStatus.PENDING)
        return [r for r in pending if self._in_scope(r, actor, listing=True)]

    def for_project(self, project_id: int, actor: User | None) -> list[ChangeRequest]:
        """Change requests of one project, if the actor may see that project."""
        actor = self._require_actor(actor)
        self._check_project_visible(project_id, actor)
        return self._store.find_by_project(project_id)

    def get_visible(self, request_id: int, actor: User | None) -> ChangeRequest:
        """
        Get a change request the actor may see: their own, or one whose
        project they may list. Also guards the request's comment thread.
        """
        request = self.get(request_id)
        actor = self._require_actor(actor)
        if actor.id != request.requested_by_user_id:
            self._check_project_visible(request.project_id, actor)
        return request

    # =========================================================================
    # Commands
    # =========================================================================

    def submit(
        self,
        actor: User | None,
        project_id: int,
        request_type: ChangeRequestType | str,
        details: str,
        details_ar: str | None = None,
    ) -> ChangeRequest:
        """Create a new change request in Pending."""
        actor = self._require_actor(actor)
        request_type = parse_enum(ChangeRequestType, request_type, "change request type")

        details = (details or "").strip()
        if not details:
            raise ValidationError("Change request details are required")

        project = self._lookup_project(project_id)
        is_manager = project is not None and project.manager_user_id == actor.id
        if not (actor.permissions.can_submit_change_request or is_manager):
            raise AuthorizationError("Insufficient permissions to create change requests")

        created = self._store.create(ChangeRequest(
            id=0,  # assigned by the store
            project_id=project_id,
            type=request_type,
            details=details,
            details_ar=details_ar,
            requested_by_user_id=actor.id,
        ))
        self._invalidate_listings()
        return created

    def approve(
        self,
        request_id: int,
        actor: User | None,
        project_update: ProjectUpdate | None = None,
    ) -> ChangeRequest:
        """Approve (or escalate to Main PMO)."""
        return self._apply(request_id, actor, ReviewAction.APPROVE, project_update=project_update)

    def reject(
        self,
        request_id: int,
        actor: User | None,
        reason: str | None,
        return_to: ReturnTarget | str | None = None,
    ) -> ChangeRequest:
        """Reject, routing back to return_to for revision, or terminally if None."""
        if return_to is not None:
            return_to = parse_enum(ReturnTarget, return_to, "return target")
        return self._apply(
            request_id, actor, ReviewAction.REJECT,
            rejection_reason=reason,
            return_to=return_to,
        )

    def resubmit(
        self,
        request_id: int,
        actor: User | None,
        details: str | None = None,
    ) -> ChangeRequest:
        """Send a returned request back to Pending, optionally with revised details."""
        return self._apply(request_id, actor, ReviewAction.RESUBMIT, details=details)

    def apply_update(
        self,
        request_id: int,
        actor: User | None,
        status: ChangeRequestStatus | str,
        rejection_reason: str | None = None,
        return_to: ReturnTarget | str | None = None,
        details: str | None = None,
        project_update: ProjectUpdate | None = None,
    ) -> ChangeRequest:
        """
        Apply a requested status from the update endpoint.

        The requested status names the reviewer's intent; the workflow decides
        the actual next status (e.g. "Approved" from a Sub PMO escalates).
        """
        status = parse_enum(ChangeRequestStatus, status, "status")
        if return_to is not None:
            return_to = parse_enum(ReturnTarget, return_to, "return target")

        if status in (ChangeRequestStatus.APPROVED, ChangeRequestStatus.PENDING_MAIN_PMO):
            return self.approve(request_id, actor, project_update=project_update)

        if status is ChangeRequestStatus.REJECTED:
            return self.reject(request_id, actor, rejection_reason, return_to)

        if status is ChangeRequestStatus.RETURNED_TO_PROJECT_MANAGER:
            return self.reject(request_id, actor, rejection_reason, return_to or ReturnTarget.PROJECT_MANAGER)

        if status is ChangeRequestStatus.RETURNED_TO_SUB_PMO:
            return self.reject(request_id, actor, rejection_reason, return_to or ReturnTarget.SUB_PMO)

        return self.resubmit(request_id, actor, details=details)

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(
        self,
        request_id: int,
        actor: User | None,
        action: ReviewAction,
        *,
        rejection_reason: str | None = None,
        return_to: ReturnTarget | None = None,
        details: str | None = None,
        project_update: ProjectUpdate | None = None,
    ) -> ChangeRequest:
        request = self.get(request_id)
        actor = self._authorize(request, actor, action)

        transition = next_transition(
            request.status,
            request.type,
            action,
            actor.role,
            rejection_reason=rejection_reason,
            return_to=return_to,
        )

        changes: dict = {"status": transition.new_status}
        if action is ReviewAction.RESUBMIT:
            changes["rejection_reason"] = None
            if details is not None:
                details = details.strip()
                if not details:
                    raise ValidationError("Change request details cannot be empty")
                changes["details"] = details
        else:
            changes["rejection_reason"] = transition.rejection_reason
            changes["reviewed_by_user_id"] = actor.id
            changes["reviewed_at"] = utc_now()

        updated = self._store.compare_and_set(request.id, transition.old_status, **changes)

        role = actor.role.value if actor.role else "none"
        logger.info(
            f"Change request {updated.id}: {action.value} by user {actor.id} ({role}) "
            f"{transition.old_status.value} -> {transition.new_status.value}"
        )

        self._after_commit(updated, transition, actor, project_update)
        return updated

    def _authorize(self, request: ChangeRequest, actor: User | None, action: ReviewAction) -> User:
        actor = self._require_actor(actor)
        can_review = actor.permissions.can_approve_change_request

        if action is ReviewAction.RESUBMIT and actor.id == request.requested_by_user_id:
            return actor

        if not can_review:
            raise AuthorizationError(
                f"You are not allowed to {action.value} change request {request.id}"
            )

        if not self._in_scope(request, actor):
            raise AuthorizationError(
                f"Change request {request.id} is for a project outside your department"
            )
        return actor

    def _check_project_visible(self, project_id: int, actor: User) -> None:
        project = self._lookup_project(project_id)
        allowed = actor.permissions.can_view_all_departments or (
            project is not None
            and (
                project.department_id == actor.department_id
                or project.manager_user_id == actor.id
            )
        )
        if not allowed:
            raise AuthorizationError(
                "Cannot view change requests of a project outside your department"
            )

    def _in_scope(self, request: ChangeRequest, actor: User, listing: bool = False) -> bool:
        """
        Department-scoped reviewers only reach projects of their own department.

        An unknown project is in scope for acting on a request by ID, but
        left out of listings.
        """
        if actor.role not in DEPARTMENT_SCOPED_ROLES:
            return True
        project = self._lookup_project(request.project_id, required=False)
        if project is None:
            return not (listing and self._directory is not None)
        return project.department_id == actor.department_id

    def _lookup_project(self, project_id: int, required: bool = True) -> Project | None:
        if self._directory is None:
            return None
        project = self._directory.get_project(project_id)
        if project is None and required:
            raise NotFoundError(f"Project not found: {project_id}")
        return project

    @staticmethod
    def _require_actor(actor: User | None) -> User:
        if actor is None:
            raise AuthorizationError("Authentication required")
        return actor

    def _after_commit(
        self,
        updated: ChangeRequest,
        transition: Transition,
        actor: User,
        project_update: ProjectUpdate | None,
    ) -> None:
        """Best-effort side effects; failures are logged, the commit stands."""
        if transition.changed and self._audit is not None:
            notify = updated.requested_by_user_id if updated.requested_by_user_id != actor.id else None
            message = (
                f"Status changed from {transition.old_status.value} "
                f"to {transition.new_status.value}"
            )
            try:
                self._audit.record(updated.id, actor.id, message, notify_user_id=notify)
            except Exception:
                logger.exception(f"Failed to record audit comment for change request {updated.id}")

        self._invalidate_listings()

        if updated.status is ChangeRequestStatus.APPROVED and project_update is not None:
            try:
                self._apply_project_update(updated, project_update)
            except Exception:
                logger.exception(f"Failed to update project {updated.project_id} after approval")

    def _apply_project_update(self, request: ChangeRequest, update: ProjectUpdate) -> None:
        if self._directory is None:
            return
        if request.type is ChangeRequestType.STATUS and update.status:
            self._directory.update_project(request.project_id, status=update.status)
        elif request.type is ChangeRequestType.BUDGET and update.budget is not None:
            self._directory.update_project(request.project_id, budget=update.budget)

    def _invalidate_listings(self) -> None:
        if self._cache is None:
            return
        try:
            self._cache.invalidate_prefix(keys.CHANGE_REQUESTS_PREFIX)
        except Exception:
            logger.exception("Failed to invalidate change request listings")
