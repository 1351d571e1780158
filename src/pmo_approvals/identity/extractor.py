"""Identity extraction from requests."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from starlette.requests import Request

from ..directory.registry import DirectoryRegistry
from ..directory.types import User


logger = logging.getLogger(__name__)


@dataclass
class IdentityExtractor:
    """
    Extracts the calling user's ID from HTTP requests.

    Session handling lives in front of this service; it forwards the
    authenticated user either as:
    - a JWT (Authorization: Bearer ...), whose subject claim is the user ID
    - a plain X-User-ID header

    Tokens are decoded, not verified - verification is the gateway's job.
    """
    jwt_header: str = "Authorization"
    user_id_header: str = "X-User-ID"

    # JWT claim holding the user ID
    jwt_user_claim: str = "sub"

    # Custom extractor function (for complex scenarios)
    custom_extractor: Callable[[Request], int | None] | None = None

    def extract(self, request: Request) -> int | None:
        """
        Extract the caller's user ID, or None for anonymous callers.

        Tries, in order: custom extractor, JWT, user header.
        """
        if self.custom_extractor:
            user_id = self.custom_extractor(request)
            if user_id is not None:
                return user_id

        user_id = self._extract_jwt(request)
        if user_id is not None:
            return user_id

        return _to_int(request.headers.get(self.user_id_header))

    def resolve(self, request: Request, directory: DirectoryRegistry | None) -> User | None:
        """Extract the caller and look them up; unknown users are anonymous."""
        user_id = self.extract(request)
        if user_id is None or directory is None:
            return None

        user = directory.get_user(user_id)
        if user is None:
            logger.debug(f"Unknown user id {user_id}; treating caller as anonymous")
        return user

    def _extract_jwt(self, request: Request) -> int | None:
        """Extract the user ID from a JWT Bearer token."""
        auth_header = request.headers.get(self.jwt_header, "")
        if not auth_header.startswith("Bearer "):
            return None

        token = auth_header[7:]

        # JWT format: header.payload.signature
        parts = token.split(".")
        if len(parts) != 3:
            return None

        # Decode payload (add padding if needed)
        payload_b64 = parts[1]
        padding = 4 - len(payload_b64) % 4
        if padding != 4:
            payload_b64 += "=" * padding

        try:
            payload = json.loads(base64.urlsafe_b64decode(payload_b64))
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Failed to decode JWT payload: {e}")
            return None

        if not isinstance(payload, dict):
            return None
        return _to_int(payload.get(self.jwt_user_claim))


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# Default extractor instance
_default_extractor = IdentityExtractor()


def extract_user_id(request: Request) -> int | None:
    """Extract the caller's user ID using the default extractor."""
    return _default_extractor.extract(request)


def resolve_user(request: Request, directory: DirectoryRegistry | None) -> User | None:
    """Resolve the calling user using the default extractor."""
    return _default_extractor.resolve(request, directory)
