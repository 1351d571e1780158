"""Pydantic models for comments and notifications."""

from __future__ import annotations

from ..api_models import CamelModel


class CommentBody(CamelModel):
    """Body for posting a comment."""
    content: str


class CommentModel(CamelModel):
    """A comment in an entity's thread."""
    id: int
    entity: str
    entity_id: int
    author_user_id: int | None = None
    content: str
    created_at: str
    system: bool = False


class NotificationModel(CamelModel):
    """A user notification."""
    id: int
    message: str
    created_at: str
    related_entity: str | None = None
    related_entity_id: int | None = None
    is_read: bool = False
