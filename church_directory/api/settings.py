"""Site settings API: public read, admin write and cache control."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from church_directory.api.deps import get_db, get_settings_cache, require_admin
from church_directory.models.user import User
from church_directory.schemas.settings import (
    CacheInvalidateResponse,
    SettingsRead,
    SettingsSnapshotRead,
    SettingsUpdate,
    SiteSettingsRead,
)
from church_directory.services.settings_cache import SettingsProvider
from church_directory.services.settings_service import delete_setting, update_settings
from church_directory.services.site_settings import resolve_site_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings", response_model=SiteSettingsRead)
def read_site_settings(
    cache: SettingsProvider = Depends(get_settings_cache),
) -> SiteSettingsRead:
    """Public site settings with defaults applied."""
    return SiteSettingsRead.model_validate(resolve_site_settings(cache))


@router.get("/admin/settings", response_model=SettingsSnapshotRead)
def read_raw_settings(
    cache: SettingsProvider = Depends(get_settings_cache),
    user: User = Depends(require_admin),
) -> SettingsSnapshotRead:
    """Raw settings snapshot and the cache path that served it."""
    result = cache.load()
    return SettingsSnapshotRead(settings=result.snapshot, cache_outcome=result.outcome)


@router.put("/admin/settings", response_model=SettingsRead)
def write_settings(
    body: SettingsUpdate,
    db: Session = Depends(get_db),
    cache: SettingsProvider = Depends(get_settings_cache),
    user: User = Depends(require_admin),
) -> SettingsRead:
    """Upsert settings and invalidate the cache."""
    updated = update_settings(db, body.to_updates(), cache=cache)
    logger.info("Settings updated by %s", user.username)
    return SettingsRead(settings=updated)


@router.delete("/admin/settings/{key}", status_code=status.HTTP_204_NO_CONTENT)
def remove_setting(
    key: str,
    db: Session = Depends(get_db),
    cache: SettingsProvider = Depends(get_settings_cache),
    user: User = Depends(require_admin),
) -> None:
    """Delete one setting row."""
    if not delete_setting(db, key, cache=cache):
        raise HTTPException(status_code=404, detail=f"Setting {key!r} not found")


@router.post("/admin/cache/invalidate", response_model=CacheInvalidateResponse)
def invalidate_settings_cache(
    cache: SettingsProvider = Depends(get_settings_cache),
    user: User = Depends(require_admin),
) -> CacheInvalidateResponse:
    """Best-effort invalidation of the cached settings snapshot."""
    cache.invalidate()
    logger.info("Settings cache invalidated by %s", user.username)
    return CacheInvalidateResponse()
