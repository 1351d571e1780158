"""Workflow error taxonomy shared by the engine, the store and the HTTP layer."""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for all change-request workflow failures."""

    status_code: int = 500
    title: str = "Workflow error"


class ValidationError(WorkflowError):
    """Raised for malformed input (missing rejection reason, unknown status)."""

    status_code = 400
    title = "Invalid request"


class InvalidTransitionError(ValidationError):
    """Raised when the current status does not allow the requested action."""

    def __init__(self, current_status: str, action: str):
        super().__init__(f"Cannot {action} a change request in status {current_status}")
        self.current_status = current_status
        self.action = action


class AuthorizationError(WorkflowError):
    """Raised when the actor lacks the permission or ownership required."""

    status_code = 403
    title = "Access denied"


class NotFoundError(WorkflowError):
    """Raised when a change request or project does not exist."""

    status_code = 404
    title = "Not found"


class ConflictError(WorkflowError):
    """Raised when a concurrent transition changed the request first."""

    status_code = 409
    title = "Conflict"

    def __init__(self, request_id: int, expected_status: str, actual_status: str):
        super().__init__(
            f"Change request {request_id} is {actual_status}, expected {expected_status}; "
            "re-fetch and retry"
        )
        self.request_id = request_id
        self.expected_status = expected_status
        self.actual_status = actual_status


class DependencyError(WorkflowError):
    """Raised when the store or another collaborator fails."""

    status_code = 503
    title = "Dependency failure"
