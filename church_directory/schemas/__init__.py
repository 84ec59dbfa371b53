"""Pydantic schemas for request/response validation."""

from church_directory.schemas.auth import LoginRequest, TokenResponse, UserRead
from church_directory.schemas.settings import (
    CacheInvalidateResponse,
    SettingsRead,
    SettingsSnapshotRead,
    SettingsUpdate,
    SiteSettingsRead,
)

__all__ = [
    "CacheInvalidateResponse",
    "LoginRequest",
    "SettingsRead",
    "SettingsSnapshotRead",
    "SettingsUpdate",
    "SiteSettingsRead",
    "TokenResponse",
    "UserRead",
]
