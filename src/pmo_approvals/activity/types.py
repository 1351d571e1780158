"""Activity types - comment threads and user notifications."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommentEntity(str, Enum):
    """Entities that carry a comment thread."""
    TASKS = "tasks"
    ASSIGNMENTS = "assignments"
    CHANGE_REQUESTS = "change-requests"


@dataclass(frozen=True, slots=True)
class Comment:
    """A comment on a task, assignment or change request."""
    id: int
    entity: CommentEntity
    entity_id: int
    author_user_id: int | None
    content: str
    created_at: str
    system: bool = False   # True for workflow-generated comments


@dataclass(frozen=True, slots=True)
class Notification:
    """A message shown to a user until they mark it read."""
    id: int
    user_id: int
    message: str
    created_at: str
    related_entity: str | None = None
    related_entity_id: int | None = None
    is_read: bool = False
