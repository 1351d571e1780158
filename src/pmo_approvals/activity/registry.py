"""Activity registry - thread-safe in-memory store for comments and notifications."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone

from .types import Comment, CommentEntity, Notification

logger = logging.getLogger(__name__)


class ActivityRegistry:
    """Comment threads keyed by (entity, id) plus per-user notifications."""

    def __init__(self) -> None:
        self._comments: dict[tuple[CommentEntity, int], list[Comment]] = {}
        self._notifications: dict[int, list[Notification]] = {}
        self._comment_ids = itertools.count(1)
        self._notification_ids = itertools.count(1)
        self._lock = threading.RLock()

    def add_comment(
        self,
        entity: CommentEntity,
        entity_id: int,
        author_user_id: int | None,
        content: str,
        system: bool = False,
    ) -> Comment:
        """Append a comment to an entity's thread."""
        with self._lock:
            comment = Comment(
                id=next(self._comment_ids),
                entity=entity,
                entity_id=entity_id,
                author_user_id=author_user_id,
                content=content,
                created_at=datetime.now(timezone.utc).isoformat(),
                system=system,
            )
            self._comments.setdefault((entity, entity_id), []).append(comment)
            return comment

    def comments_for(self, entity: CommentEntity, entity_id: int) -> list[Comment]:
        """Get an entity's comments in insertion order."""
        with self._lock:
            return list(self._comments.get((entity, entity_id), []))

    def notify(
        self,
        user_id: int,
        message: str,
        related_entity: str | None = None,
        related_entity_id: int | None = None,
    ) -> Notification:
        """Queue a notification for a user."""
        with self._lock:
            notification = Notification(
                id=next(self._notification_ids),
                user_id=user_id,
                message=message,
                created_at=datetime.now(timezone.utc).isoformat(),
                related_entity=related_entity,
                related_entity_id=related_entity_id,
            )
            self._notifications.setdefault(user_id, []).append(notification)
            return notification

    def notifications_for(self, user_id: int, unread_only: bool = False) -> list[Notification]:
        """Get a user's notifications, newest first."""
        with self._lock:
            items = self._notifications.get(user_id, [])
            if unread_only:
                items = [n for n in items if not n.is_read]
            return list(reversed(items))

    def mark_read(self, user_id: int, notification_id: int) -> Notification | None:
        """Mark one of a user's notifications as read."""
        with self._lock:
            items = self._notifications.get(user_id, [])
            for i, n in enumerate(items):
                if n.id == notification_id:
                    items[i] = replace(n, is_read=True)
                    return items[i]
            return None

    def clear(self) -> None:
        with self._lock:
            self._comments.clear()
            self._notifications.clear()
