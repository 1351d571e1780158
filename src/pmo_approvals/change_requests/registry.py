"""Change request registry - thread-safe in-memory store."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable

from ..errors import ConflictError, DependencyError, NotFoundError
from .store import ChangeRequestStore
from .types import ChangeRequest, ChangeRequestStatus

logger = logging.getLogger(__name__)

# Fields the workflow may change; everything else is fixed at creation.
MUTABLE_FIELDS = frozenset({
    "status",
    "details",
    "details_ar",
    "rejection_reason",
    "reviewed_by_user_id",
    "reviewed_at",
})


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChangeRequestRegistry(ChangeRequestStore):
    """
    Thread-safe in-memory registry of change requests.

    All reads return copies, so callers hold snapshots and only
    compare_and_set can move a request forward.

    An optional on_commit hook runs after every mutation while the lock
    is held (used for YAML write-through). If it raises, the mutation is
    rolled back and DependencyError is raised.
    """

    def __init__(self, on_commit: Callable[[], None] | None = None) -> None:
        self._requests: dict[int, ChangeRequest] = {}
        self._lock = threading.RLock()
        self._counter = 0
        self._on_commit = on_commit

    def set_commit_hook(self, on_commit: Callable[[], None] | None) -> None:
        with self._lock:
            self._on_commit = on_commit

    def _next_id(self) -> int:
        """Generate the next request ID."""
        self._counter += 1
        return self._counter

    def _commit(self, request_id: int, previous: ChangeRequest | None) -> None:
        """Run the commit hook, restoring previous state if it fails (caller holds lock)."""
        if self._on_commit is None:
            return
        try:
            self._on_commit()
        except Exception as e:
            if previous is None:
                self._requests.pop(request_id, None)
            else:
                self._requests[request_id] = previous
            logger.error(f"Persisting change request {request_id} failed, rolled back: {e}")
            raise DependencyError(f"Failed to persist change request {request_id}") from e

    def create(self, request: ChangeRequest) -> ChangeRequest:
        """Persist a new request with a fresh ID in Pending."""
        with self._lock:
            now = utc_now()
            stored = replace(
                request,
                id=self._next_id(),
                status=ChangeRequestStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._requests[stored.id] = stored
            self._commit(stored.id, None)
            logger.info(
                f"Change request {stored.id} created: {stored.type.value} for project {stored.project_id}"
            )
            return replace(stored)

    def restore(self, request: ChangeRequest) -> ChangeRequest:
        """Load a previously persisted request as-is (no commit hook)."""
        with self._lock:
            self._requests[request.id] = replace(request)
            self._counter = max(self._counter, request.id)
            return replace(request)

    def get(self, request_id: int) -> ChangeRequest | None:
        """Get a request by ID."""
        with self._lock:
            request = self._requests.get(request_id)
            return replace(request) if request else None

    def compare_and_set(
        self,
        request_id: int,
        expected_status: ChangeRequestStatus,
        **changes: Any,
    ) -> ChangeRequest:
        """Atomically update a request if its status is still expected_status."""
        illegal = set(changes) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Immutable change request fields: {sorted(illegal)}")

        with self._lock:
            current = self._requests.get(request_id)
            if current is None:
                raise NotFoundError(f"Change request not found: {request_id}")

            if current.status != expected_status:
                raise ConflictError(request_id, expected_status.value, current.status.value)

            updated = replace(current, updated_at=utc_now(), **changes)
            self._requests[request_id] = updated
            self._commit(request_id, current)

            if updated.status != current.status:
                logger.info(
                    f"Change request {request_id} status {current.status.value} -> {updated.status.value}"
                )
            return replace(updated)

    def list_all(self) -> list[ChangeRequest]:
        """Get all requests, ordered by ID."""
        with self._lock:
            return [replace(r) for _, r in sorted(self._requests.items())]

    def replace_all(self, requests: list[ChangeRequest]) -> int:
        """Swap in a complete set of requests (no commit hook). Returns the count."""
        with self._lock:
            self._requests = {r.id: replace(r) for r in requests}
            self._counter = max(self._requests, default=0)
            return len(self._requests)

    def clear(self) -> None:
        """Clear all requests."""
        with self._lock:
            self._requests.clear()
            self._counter = 0
