"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

from fastapi import Cookie, Depends, Header, HTTPException, Response, status
from sqlalchemy.orm import Session

from church_directory.config import get_settings
from church_directory.db.session import get_db  # re-export
from church_directory.models.user import User
from church_directory.services.auth import get_user_from_token, token_lifetime
from church_directory.services.kv_store import KVStore, get_kv_store
from church_directory.services.settings_cache import SettingsCache, SettingsProvider

__all__ = [
    "get_db",
    "get_current_user",
    "get_kv",
    "get_settings_cache",
    "clear_auth_cookie",
    "set_auth_cookie",
    "require_admin",
    "require_auth",
    "require_ui_admin",
]


# Cookie name for browser sessions
AUTH_COOKIE = "access_token"


def set_auth_cookie(response: Response, token: str) -> None:
    """Store *token* in an httponly cookie that expires with the token."""
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=int(token_lifetime().total_seconds()),
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=AUTH_COOKIE, path="/")


def get_kv() -> KVStore:
    """Dependency returning the process-wide KV store."""
    return get_kv_store()


def get_settings_cache(
    db: Session = Depends(get_db),
    kv: KVStore = Depends(get_kv),
) -> SettingsProvider:
    """Dependency providing the request's settings cache.

    Override this in tests to inject a fake provider.
    """
    return SettingsCache(kv, db, ttl=get_settings().settings_cache_ttl)


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None),
) -> User | None:
    """Return the authenticated user or None.

    Checks (in order):
    1. Authorization: Bearer <token> header
    2. access_token cookie
    """
    token: str | None = None

    # Check Authorization header
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer ") :]

    # Fall back to cookie
    if token is None and access_token:
        token = access_token

    if token is None:
        return None

    return get_user_from_token(db, token)


def require_auth(
    user: User | None = Depends(get_current_user),
) -> User:
    """Dependency that requires authentication. Returns 401 when missing."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """Dependency that requires an admin user. 401 unauthenticated, 403 non-admin."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_ui_admin(
    user: User | None = Depends(get_current_user),
) -> User:
    """Dependency for admin browser/UI routes.

    Redirects to /login instead of returning a 401 JSON response.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Not authenticated",
            headers={"Location": "/login"},
        )
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
