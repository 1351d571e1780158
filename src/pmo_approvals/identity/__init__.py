"""Identity extraction for caller tracking."""

from .extractor import IdentityExtractor, extract_user_id, resolve_user

__all__ = [
    "IdentityExtractor",
    "extract_user_id",
    "resolve_user",
]
