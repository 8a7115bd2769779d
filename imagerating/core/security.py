#!/usr/bin/env python
#
#
# ----------------------------------------------------------------------------
"""
Security utilities
==================
- JWT verification of host-issued access tokens (Bearer header or cookie)
- CSRF tokens for the write API
- Rights resolution from group permissions
- FastAPI dependencies for extracting the current user
"""
# ----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession


# -----------------------------------------------------------------------------

from .config import get_settings
from .database import get_db

# ----------------------------------------------------------------------------
# JWT tokens
# ----------------------------------------------------------------------------

_oauth2_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

# Anonymous visitors share one CSRF subject.
_ANON_SUBJECT = "anon"


# ----------------------------------------------------------------------------

def _settings():
    return get_settings()


# ----------------------------------------------------------------------------

def create_access_token(subject: str | int, extra: dict | None = None) -> str:
    s = _settings()
    expire = datetime.now(tz=timezone.utc) + timedelta(minutes=s.access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": str(subject),
        "exp": expire,
        "type": "access",
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, s.secret_key, algorithm=s.algorithm)


# ----------------------------------------------------------------------------

def decode_token(token: str) -> dict[str, Any]:
    s = _settings()
    try:
        payload = jwt.decode(token, s.secret_key, algorithms=[s.algorithm])
        if payload.get("sub") is None:
            raise _credentials_error()
        return payload
    except JWTError:
        raise _credentials_error()


# -----------------------------------------------------------------------------

def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


# ----------------------------------------------------------------------------
# CSRF tokens
# ----------------------------------------------------------------------------

def create_csrf_token(user_id: str | None) -> str:
    s = _settings()
    expire = datetime.now(tz=timezone.utc) + timedelta(minutes=s.csrf_token_expire_minutes)
    return jwt.encode(
        {"sub": user_id or _ANON_SUBJECT, "exp": expire, "type": "csrf"},
        s.secret_key,
        algorithm=s.algorithm,
    )


# ----------------------------------------------------------------------------

def verify_csrf_token(token: str | None, user_id: str | None) -> bool:
    if not token:
        return False
    try:
        payload = decode_token(token)
    except HTTPException:
        return False
    return payload.get("type") == "csrf" and payload["sub"] == (user_id or _ANON_SUBJECT)


# ----------------------------------------------------------------------------
# Rights
# ----------------------------------------------------------------------------

def user_rights(user) -> set[str]:
    """Union of the rights granted to every group *user* belongs to."""
    perms = _settings().group_permissions
    groups = user.groups if user is not None else ["*"]
    rights: set[str] = set()
    for group in groups:
        rights.update(perms.get(group, []))
    return rights


# ----------------------------------------------------------------------------

def is_allowed(user, right: str) -> bool:
    return right in user_rights(user)


# ----------------------------------------------------------------------------

def is_blocked(user) -> bool:
    return user is not None and not user.is_active


# ----------------------------------------------------------------------------
# FastAPI dependencies — Bearer token OR cookie
# ----------------------------------------------------------------------------

async def get_optional_user_id(
    request: Request,
    token: str | None = Depends(_oauth2_optional),
) -> str | None:
    """Accept a Bearer token (API clients) or an access_token cookie (browser UI)."""
    for candidate in (token, request.cookies.get("access_token")):
        if not candidate:
            continue
        try:
            payload = decode_token(candidate)
        except HTTPException:
            continue
        if payload.get("type") == "access":
            return payload["sub"]
    return None


# ----------------------------------------------------------------------------

async def get_current_user(
    user_id: str | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The logged-in ``User``, or ``None`` for anonymous requests."""
    if not user_id:
        return None
    from imagerating.models import User
    return await db.get(User, user_id)


# ----------------------------------------------------------------------------
