"""
Authentication utilities.

Staff identify themselves with HS256 JWT access tokens. The rest of the
application only sees the decoded identity:

    {"sub": "<user id>", "email": ..., "role": "MANAGER", "branch_id": 3}
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header, HTTPException, status

from food_shared.config.constants import Roles
from food_shared.config.logging import get_logger
from food_shared.config.settings import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET, settings

logger = get_logger(__name__)


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign an access token with the given claims.

    Args:
        payload: Claims to include (sub, email, role, branch_id).
        ttl_seconds: Token lifetime in seconds. Defaults to the configured expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Decode an access token and check the identity claims.

    Raises:
        HTTPException: 401 when the signature, audience, issuer or expiry
            is wrong, or when ``sub``/``role`` are missing or malformed.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("JWT validation failed", error=str(e))
        raise _unauthorized("Invalid token")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")
    if not str(payload["sub"]).isdigit():
        raise _unauthorized("Invalid token: malformed subject claim")
    if payload.get("role") not in Roles.ALL:
        raise _unauthorized("Invalid token: unknown role")
    return payload


def get_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise _unauthorized("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Expected: Authorization: Bearer <token>")
    return token.strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency returning the caller's decoded identity.

    Usage:
        @router.get("/me")
        def me(user: dict = Depends(current_user_context)):
            user_id = get_user_id(user)
    """
    return verify_jwt(get_bearer_token(authorization))


def get_user_id(user: dict[str, Any]) -> int:
    return int(user["sub"])
