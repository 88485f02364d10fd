"""Access Tokens — issue and decode the bearer JWTs that identify the remote user.

Invariants:
    - Tokens carry sub = user id (string) and exp
    - decode_access_token never raises: invalid or expired tokens return None
    - Token extraction accepts "Authorization: Bearer <jwt>" or the accessToken cookie

Design Decisions:
    - PyJWT with a shared secret (HS256): the API is the only issuer and verifier
    - Anonymous access is not an error here; resolvers decide whether a user is required
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from fundhost.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"


def issue_access_token(user_id: int, expires_in: timedelta | None = None) -> str:
    """Sign a token for the given user id."""
    settings = get_settings()
    expires_in = expires_in or timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {
        "sub": str(user_id),
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int | None:
    """Return the user id carried by the token, or None if it is not valid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Access token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid access token: {e}")
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Access token without a usable subject")
        return None


def extract_token(authorization: str | None, cookie: str | None = None) -> str | None:
    """Pick the bearer token from the Authorization header, falling back to the cookie."""
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return cookie or None
