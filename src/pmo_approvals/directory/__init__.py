"""Directory of users and projects referenced by change requests."""

from .types import Project, User
from .registry import DirectoryRegistry
from .loader import load_directory_from_yaml

__all__ = [
    "Project",
    "User",
    "DirectoryRegistry",
    "load_directory_from_yaml",
]
