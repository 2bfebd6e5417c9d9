from __future__ import annotations

import time
from typing import Annotated, Any

import jwt
from fastapi import Header, HTTPException, status

from backend.config import get_settings


class AuthError(Exception):
    pass


MIN_SECRET_LENGTH = 32


def _signing_secret() -> str:
    secret = get_settings().jwt_secret
    if len(secret) < MIN_SECRET_LENGTH:
        raise AuthError(f"JWT_SECRET must be set to at least {MIN_SECRET_LENGTH} characters")
    return secret


def issue_token(user_id: str, ttl_seconds: int | None = None) -> str:
    settings = get_settings()
    issued_at = int(time.time())
    payload = {
        "user": {"id": user_id},
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + (ttl_seconds or settings.jwt_ttl_seconds),
    }
    return jwt.encode(payload, _signing_secret(), algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> str:
    """Return the caller id carried by ``token``."""
    settings = get_settings()
    secret = _signing_secret()
    try:
        claims: dict[str, Any] = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise AuthError("Token is not valid") from exc

    user = claims.get("user")
    user_id = user.get("id") if isinstance(user, dict) else None
    user_id = user_id or claims.get("sub")
    if not user_id:
        raise AuthError("Token carries no user")
    return str(user_id)


def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
    x_auth_token: Annotated[str | None, Header(alias="x-auth-token")] = None,
) -> str:
    token: str | None = None
    if x_auth_token:
        token = x_auth_token.strip()
    elif authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token, authorization denied")
    try:
        return verify_token(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
