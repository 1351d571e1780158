"""Directory registry - thread-safe in-memory lookup of users and projects."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace

from .types import Project, User

logger = logging.getLogger(__name__)


class DirectoryRegistry:
    """
    Thread-safe registry of users and projects.

    Stands in for the relational tables owned by the wider application;
    the workflow only looks entries up and, on approval, patches a
    project's status or budget.
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._projects: dict[int, Project] = {}
        self._lock = threading.RLock()

    def add_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
            return user

    def add_project(self, project: Project) -> Project:
        with self._lock:
            self._projects[project.id] = replace(project)
            return project

    def get_user(self, user_id: int | None) -> User | None:
        """Get a user by ID (None for unknown or missing IDs)."""
        if user_id is None:
            return None
        with self._lock:
            return self._users.get(user_id)

    def get_project(self, project_id: int) -> Project | None:
        """Get a copy of a project by ID."""
        with self._lock:
            project = self._projects.get(project_id)
            return replace(project) if project else None

    def update_project(
        self,
        project_id: int,
        status: str | None = None,
        budget: float | None = None,
    ) -> Project | None:
        """Patch a project's status and/or budget."""
        with self._lock:
            project = self._projects.get(project_id)
            if project is None:
                return None
            if status is not None:
                project.status = status
            if budget is not None:
                project.budget = budget
            logger.info(f"Project {project_id} updated (status={project.status}, budget={project.budget})")
            return replace(project)

    def all_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def all_projects(self) -> list[Project]:
        with self._lock:
            return [replace(p) for p in self._projects.values()]

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._projects.clear()
