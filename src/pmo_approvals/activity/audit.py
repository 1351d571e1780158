"""Audit trail - records workflow side effects as comments and notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..cache import keys
from ..cache.memory import QueryCache
from .registry import ActivityRegistry
from .types import Comment, CommentEntity

logger = logging.getLogger(__name__)


@dataclass
class AuditTrail:
    """
    Records what the workflow did to a change request.

    Each record becomes a system comment on the request's thread and,
    optionally, a notification for the affected user. Cached reads of
    both are invalidated so the next fetch sees the new entries.
    """
    activity: ActivityRegistry
    cache: QueryCache | None = None

    def record(
        self,
        change_request_id: int,
        actor_id: int | None,
        message: str,
        notify_user_id: int | None = None,
    ) -> Comment:
        """Persist an audit comment (and notification) for a change request."""
        comment = self.activity.add_comment(
            CommentEntity.CHANGE_REQUESTS,
            change_request_id,
            actor_id,
            message,
            system=True,
        )

        if notify_user_id is not None:
            self.activity.notify(
                notify_user_id,
                f"Change request #{change_request_id}: {message}",
                related_entity=CommentEntity.CHANGE_REQUESTS.value,
                related_entity_id=change_request_id,
            )

        if self.cache is not None:
            self.cache.invalidate(keys.comments_key(CommentEntity.CHANGE_REQUESTS.value, change_request_id))
            if notify_user_id is not None:
                self.cache.invalidate(keys.notifications_key(notify_user_id))

        logger.debug(f"Audit comment {comment.id} on change request {change_request_id}: {message}")
        return comment
