"""
Bearer token identity.

The actor id is taken from the `user_id` claim of an HS256 JWT signed with
JWT_SECRET. Tokens are issued by the upstream auth service; the encoder here
exists for local tooling and tests.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from matchledger.config.settings import get_jwt_secret
from matchledger.platform.errors import AuthenticationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
ACTOR_CLAIM = "user_id"


def decode_actor_id(token: str, secret: Optional[str] = None) -> uuid.UUID:
    """
    Validate token and return the actor id it carries.

    Raises:
        AuthenticationError: Expired, malformed or unsigned token, or a
            user_id claim that is not a UUID
    """
    try:
        payload = jwt.decode(
            token,
            secret or get_jwt_secret(),
            algorithms=[JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token", extra={"error": str(e)})
        raise AuthenticationError("Invalid token")

    raw = payload.get(ACTOR_CLAIM)
    if raw is None:
        raise AuthenticationError("Token has no user_id claim")
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise AuthenticationError("Token user_id is not a valid id")


def encode_actor_token(
    actor_id: uuid.UUID,
    ttl: timedelta = timedelta(hours=1),
    secret: Optional[str] = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        ACTOR_CLAIM: str(actor_id),
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret or get_jwt_secret(), algorithm=JWT_ALGORITHM)
