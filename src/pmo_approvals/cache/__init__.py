"""Query caching for the approvals API."""

from .memory import CacheEntry, QueryCache
from . import keys

__all__ = [
    "CacheEntry",
    "QueryCache",
    "keys",
]
