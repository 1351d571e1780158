"""Approval state machine - pure transition rules for change requests.

    Pending ──approve (SubPMO)──> PendingMainPMO ──approve──> Approved
       │  └───approve (other / Faculty)───────────────────────> Approved
       │
       └─reject──> ReturnedToProjectManager | ReturnedToSubPMO ──resubmit──> Pending
              └──> Rejected (no return target)

Nothing here touches storage; the engine commits the result.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidTransitionError, ValidationError
from ..permissions.types import Role
from .types import (
    ChangeRequestStatus,
    ChangeRequestType,
    ReturnTarget,
    ReviewAction,
)


@dataclass(frozen=True, slots=True)
class Transition:
    """Outcome of applying an action to a change request."""
    old_status: ChangeRequestStatus
    new_status: ChangeRequestStatus
    rejection_reason: str | None = None

    @property
    def changed(self) -> bool:
        return self.old_status != self.new_status


def next_transition(
    status: ChangeRequestStatus,
    request_type: ChangeRequestType,
    action: ReviewAction,
    actor_role: Role | None,
    *,
    rejection_reason: str | None = None,
    return_to: ReturnTarget | None = None,
) -> Transition:
    """
    Compute where a change request goes next.

    Args:
        status: Current status
        request_type: The request's (immutable) type
        action: Approve, reject or resubmit
        actor_role: Role of the user acting
        rejection_reason: Required for reject
        return_to: Who a rejection routes back to; None means terminal Rejected

    Raises:
        InvalidTransitionError: If the action is not allowed from status
        ValidationError: If a rejection has no reason
    """
    if status.is_terminal:
        raise InvalidTransitionError(status.value, action.value)

    if action is ReviewAction.APPROVE:
        return _approve(status, request_type, actor_role)
    if action is ReviewAction.REJECT:
        return _reject(status, actor_role, rejection_reason, return_to)
    if action is ReviewAction.RESUBMIT:
        return _resubmit(status)

    raise ValidationError(f"Unknown action: {action}")


def _approve(
    status: ChangeRequestStatus,
    request_type: ChangeRequestType,
    actor_role: Role | None,
) -> Transition:
    if not status.is_active:
        raise InvalidTransitionError(status.value, ReviewAction.APPROVE.value)

    # Faculty changes need only Sub PMO sign-off and skip Main PMO.
    if request_type is ChangeRequestType.FACULTY:
        new_status = ChangeRequestStatus.APPROVED
    elif actor_role is Role.SUB_PMO and status is ChangeRequestStatus.PENDING:
        new_status = ChangeRequestStatus.PENDING_MAIN_PMO
    else:
        new_status = ChangeRequestStatus.APPROVED

    return Transition(old_status=status, new_status=new_status)


def _reject(
    status: ChangeRequestStatus,
    actor_role: Role | None,
    rejection_reason: str | None,
    return_to: ReturnTarget | None,
) -> Transition:
    if not status.is_active:
        raise InvalidTransitionError(status.value, ReviewAction.REJECT.value)

    reason = (rejection_reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required")

    # A Sub PMO cannot return a request to itself.
    if actor_role is Role.SUB_PMO:
        return_to = ReturnTarget.PROJECT_MANAGER

    if return_to is None:
        new_status = ChangeRequestStatus.REJECTED
    else:
        new_status = return_to.returned_status

    return Transition(old_status=status, new_status=new_status, rejection_reason=reason)


def _resubmit(status: ChangeRequestStatus) -> Transition:
    if not status.is_returned:
        raise InvalidTransitionError(status.value, ReviewAction.RESUBMIT.value)
    return Transition(old_status=status, new_status=ChangeRequestStatus.PENDING)
