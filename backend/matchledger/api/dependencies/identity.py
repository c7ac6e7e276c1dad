"""Authenticated actor from the Authorization header."""

import uuid
from typing import Optional

from fastapi import Header

from matchledger.platform.errors import AuthenticationError
from matchledger.platform.identity import decode_actor_id


def get_current_actor_id(authorization: Optional[str] = Header(None)) -> uuid.UUID:
    """
    FastAPI dependency returning the caller's actor id.

    Raises:
        AuthenticationError: Missing or non-Bearer header, or invalid token
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must be a Bearer token")
    return decode_actor_id(token.strip())
