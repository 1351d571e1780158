"""Cache key layout shared by the routes that fill the cache and the code that invalidates it."""

from __future__ import annotations

CHANGE_REQUESTS_PREFIX = "change-requests:"


def pending_key(user_id: int) -> str:
    return f"{CHANGE_REQUESTS_PREFIX}pending:{user_id}"


def project_requests_key(project_id: int, user_id: int) -> str:
    return f"{CHANGE_REQUESTS_PREFIX}project:{project_id}:{user_id}"


def comments_key(entity: str, entity_id: int) -> str:
    return f"comments:{entity}:{entity_id}"


def notifications_key(user_id: int) -> str:
    return f"notifications:{user_id}"
