"""Base change request store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .types import ChangeRequest, ChangeRequestStatus


class ChangeRequestStore(ABC):
    """
    Abstract persistence for change requests.

    Implementations must make compare_and_set atomic: of two concurrent
    updates expecting the same status, exactly one succeeds and the
    other raises ConflictError.
    """

    @abstractmethod
    def create(self, request: ChangeRequest) -> ChangeRequest:
        """Persist a new request, assigning its ID and timestamps."""
        ...

    @abstractmethod
    def get(self, request_id: int) -> ChangeRequest | None:
        """Get a snapshot of a request by ID."""
        ...

    @abstractmethod
    def compare_and_set(
        self,
        request_id: int,
        expected_status: ChangeRequestStatus,
        **changes: Any,
    ) -> ChangeRequest:
        """
        Apply changes only if the stored status still equals expected_status.

        Raises:
            NotFoundError: If the request does not exist
            ConflictError: If the status moved on since it was read
            DependencyError: If the backing storage fails
        """
        ...

    @abstractmethod
    def list_all(self) -> list[ChangeRequest]:
        ...

    def find_by_status(self, *statuses: ChangeRequestStatus) -> list[ChangeRequest]:
        """Get all requests in any of the given statuses."""
        wanted = set(statuses)
        return [r for r in self.list_all() if r.status in wanted]

    def find_by_project(self, project_id: int) -> list[ChangeRequest]:
        """Get all requests targeting a project."""
        return [r for r in self.list_all() if r.project_id == project_id]

    def count_by_status(self) -> dict[str, int]:
        """Get counts of requests grouped by status."""
        counts: dict[str, int] = {}
        requests = self.list_all()
        for req in requests:
            key = req.status.value
            counts[key] = counts.get(key, 0) + 1
        counts["total"] = len(requests)
        return counts
