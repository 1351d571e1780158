"""FastAPI routes for comment threads and notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from ..cache import keys
from ..cache.memory import QueryCache
from ..change_requests.engine import WorkflowEngine
from ..directory.registry import DirectoryRegistry
from ..directory.types import User
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..identity.extractor import resolve_user
from .models import CommentBody, CommentModel, NotificationModel
from .registry import ActivityRegistry
from .types import Comment, CommentEntity, Notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Activity"])

# Configuration - set during app startup
_activity: ActivityRegistry | None = None
_directory: DirectoryRegistry | None = None
_engine: WorkflowEngine | None = None
_cache: QueryCache | None = None


def configure(
    activity: ActivityRegistry,
    directory: DirectoryRegistry | None = None,
    engine: WorkflowEngine | None = None,
    cache: QueryCache | None = None,
) -> None:
    """Configure the activity routes."""
    global _activity, _directory, _engine, _cache
    _activity = activity
    _directory = directory
    _engine = engine
    _cache = cache


def _get_activity() -> ActivityRegistry:
    if _activity is None:
        raise HTTPException(status_code=503, detail="Activity module not initialized")
    return _activity


def _require_user(request: Request) -> User:
    user = resolve_user(request, _directory)
    if user is None:
        raise AuthorizationError("Authentication required")
    return user


def _comment_to_model(c: Comment) -> CommentModel:
    return CommentModel(
        id=c.id,
        entity=c.entity.value,
        entity_id=c.entity_id,
        author_user_id=c.author_user_id,
        content=c.content,
        created_at=c.created_at,
        system=c.system,
    )


def _notification_to_model(n: Notification) -> NotificationModel:
    return NotificationModel(
        id=n.id,
        message=n.message,
        created_at=n.created_at,
        related_entity=n.related_entity,
        related_entity_id=n.related_entity_id,
        is_read=n.is_read,
    )


def _check_entity(entity: CommentEntity, entity_id: int, user: User) -> None:
    """
    A change request thread is readable and writable by whoever may see the
    request itself. Tasks and assignments are owned elsewhere and trusted by ID.
    """
    if entity is CommentEntity.CHANGE_REQUESTS and _engine is not None:
        _engine.get_visible(entity_id, user)


# =============================================================================
# Comments
# =============================================================================

@router.get("/{entity}/{entity_id}/comments", response_model=list[CommentModel])
async def list_comments(entity: CommentEntity, entity_id: int, request: Request):
    """Get the comment thread of a task, assignment or change request."""
    activity = _get_activity()
    user = _require_user(request)
    _check_entity(entity, entity_id, user)

    def load() -> list[CommentModel]:
        return [_comment_to_model(c) for c in activity.comments_for(entity, entity_id)]

    if _cache is None:
        return load()
    return _cache.get_or_load(keys.comments_key(entity.value, entity_id), load)


@router.post("/{entity}/{entity_id}/comments", response_model=CommentModel, status_code=201)
async def add_comment(entity: CommentEntity, entity_id: int, body: CommentBody, request: Request):
    """Post a user comment."""
    activity = _get_activity()
    user = _require_user(request)
    _check_entity(entity, entity_id, user)

    content = body.content.strip()
    if not content:
        raise ValidationError("Comment content cannot be empty")

    comment = activity.add_comment(entity, entity_id, user.id, content)
    if _cache is not None:
        _cache.invalidate(keys.comments_key(entity.value, entity_id))
    return _comment_to_model(comment)


# =============================================================================
# Notifications
# =============================================================================

@router.get("/notifications", response_model=list[NotificationModel])
async def list_notifications(request: Request, unread_only: bool = False):
    """The current user's notifications, newest first."""
    activity = _get_activity()
    user = _require_user(request)

    if unread_only:
        return [_notification_to_model(n) for n in activity.notifications_for(user.id, unread_only=True)]

    def load() -> list[NotificationModel]:
        return [_notification_to_model(n) for n in activity.notifications_for(user.id)]

    if _cache is None:
        return load()
    return _cache.get_or_load(keys.notifications_key(user.id), load)


@router.post("/notifications/{notification_id}/read", response_model=NotificationModel)
async def mark_notification_read(notification_id: int, request: Request):
    """Mark one of the current user's notifications as read."""
    activity = _get_activity()
    user = _require_user(request)

    notification = activity.mark_read(user.id, notification_id)
    if notification is None:
        raise NotFoundError(f"Notification not found: {notification_id}")

    if _cache is not None:
        _cache.invalidate(keys.notifications_key(user.id))
    return _notification_to_model(notification)
