"""Pydantic models for the Change Request API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from pydantic import Field

from ..api_models import CamelModel


# =============================================================================
# Request Body Models
# =============================================================================

class CreateChangeRequestBody(CamelModel):
    """Body for submitting a new change request against a project."""
    type: str
    details: str
    details_ar: str | None = None


class UpdateChangeRequestBody(CamelModel):
    """Body for PUT /api/change-requests/{id}."""
    status: str
    rejection_reason: str | None = None
    return_to: str | None = None

    # Revised details, only used when resubmitting
    details: str | None = None

    # Applied to the project when a Status / Budget request is approved
    new_status: str | None = None
    new_budget: float | None = None


# =============================================================================
# Response Models
# =============================================================================

class ChangeRequestModel(CamelModel):
    """Full representation of a change request."""
    id: int
    project_id: int
    type: str
    status: str = "Pending"
    details: str = ""
    details_ar: str | None = None
    rejection_reason: str | None = None
    requested_by_user_id: int
    reviewed_by_user_id: int | None = None
    reviewed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ChangeRequestListResponse(CamelModel):
    """Response for listing change requests with status counts."""
    requests: list[ChangeRequestModel]
    total: int
    by_status: dict[str, int] = Field(default_factory=dict)
