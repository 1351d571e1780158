"""Directory seeding - load users and projects from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..permissions.types import Role
from .registry import DirectoryRegistry
from .types import Project, User

logger = logging.getLogger(__name__)


def load_directory_from_yaml(
    path: str | Path,
    registry: DirectoryRegistry,
) -> tuple[int, int]:
    """
    Load users and projects from a YAML file into the registry.

    Expected layout::

        users:
          - {id: 1, username: admin, role: Administrator}
        projects:
          - {id: 10, title: Portal, department_id: 2, manager_user_id: 4}

    Returns (user_count, project_count).
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"Directory file not found: {path}")
        return 0, 0

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    users = [_parse_user(u) for u in data.get("users", [])]
    projects = [_parse_project(p) for p in data.get("projects", [])]

    for user in users:
        registry.add_user(user)
    for project in projects:
        registry.add_project(project)

    logger.info(f"Loaded {len(users)} users and {len(projects)} projects from {path}")
    return len(users), len(projects)


def _parse_user(data: dict[str, Any]) -> User:
    role = Role.parse(data.get("role", Role.USER.value))
    if role is None and data.get("role") is not None:
        logger.warning(f"Unknown role {data['role']!r} for user {data.get('id')}; no permissions granted")

    return User(
        id=int(data["id"]),
        username=data.get("username", ""),
        name=data.get("name", ""),
        role=role,
        department_id=data.get("department_id"),
    )


def _parse_project(data: dict[str, Any]) -> Project:
    budget = data.get("budget")
    return Project(
        id=int(data["id"]),
        title=data.get("title", ""),
        department_id=data.get("department_id"),
        manager_user_id=data.get("manager_user_id"),
        status=data.get("status", "Planning"),
        budget=float(budget) if budget is not None else None,
    )
