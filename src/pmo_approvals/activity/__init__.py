"""
Activity - comment threads, notifications and the workflow audit trail.
"""

from .types import Comment, CommentEntity, Notification
from .registry import ActivityRegistry
from .audit import AuditTrail

__all__ = [
    "Comment",
    "CommentEntity",
    "Notification",
    "ActivityRegistry",
    "AuditTrail",
]
