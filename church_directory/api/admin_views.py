"""Admin HTML routes: settings form and cache management."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from church_directory.api.deps import get_db, get_settings_cache, require_ui_admin
from church_directory.api.views import templates
from church_directory.config import get_settings
from church_directory.models.user import User
from church_directory.schemas.settings import SettingsUpdate
from church_directory.services.settings_cache import SettingsProvider
from church_directory.services.settings_service import update_settings
from church_directory.services.site_settings import (
    SettingKey,
    SiteSettings,
    resolve_site_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/settings", response_class=HTMLResponse)
def settings_page(
    request: Request,
    user: User = Depends(require_ui_admin),
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Render settings form with current values."""
    settings = cache.get_all_settings()
    flash_message = request.query_params.get("success")
    error = request.query_params.get("error")
    return templates.TemplateResponse(
        request,
        "admin/settings.html",
        {
            "site": SiteSettings.from_snapshot(settings),
            "settings": settings,
            "setting_keys": [k.value for k in SettingKey],
            "user": user,
            "flash_message": flash_message or error,
            "flash_type": "error" if error else "success" if flash_message else None,
        },
    )


@router.post("/admin/settings")
async def settings_save(
    request: Request,
    user: User = Depends(require_ui_admin),
    db: Session = Depends(get_db),
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Save settings from form and redirect back.

    Recognized keys present in the form are written (blank clears the value); keys
    missing from the form are left as-is and unrecognized fields are ignored.
    """
    form = await request.form()
    submitted = {k.value: str(form[k.value]) for k in SettingKey if k.value in form}
    try:
        body = SettingsUpdate(**submitted)
    except ValidationError:
        return RedirectResponse(
            url="/admin/settings?error=Invalid+settings+value", status_code=303
        )

    update_settings(db, body.to_updates(), cache=cache)
    logger.info("Settings saved by %s", user.username)
    return RedirectResponse(url="/admin/settings?success=Settings+saved", status_code=303)


@router.get("/admin/cache", response_class=HTMLResponse)
def cache_page(
    request: Request,
    user: User = Depends(require_ui_admin),
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Render cache management page."""
    app_settings = get_settings()
    return templates.TemplateResponse(
        request,
        "admin/cache.html",
        {
            "site": resolve_site_settings(cache),
            "user": user,
            "kv_backend": app_settings.kv_backend,
            "ttl_days": app_settings.settings_cache_ttl / 86400,
            "success": request.query_params.get("success") == "true",
            "error": request.query_params.get("error") == "true",
        },
    )


@router.post("/admin/cache/clear-all")
def cache_clear_all(
    user: User = Depends(require_ui_admin),
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Clear the settings cache and redirect back."""
    try:
        cache.invalidate()
    except Exception as e:
        # SettingsCache.invalidate never raises; other providers may
        logger.error("Error clearing cache: %s", e)
        return RedirectResponse(url="/admin/cache?error=true", status_code=303)
    logger.info("Settings cache cleared by %s", user.username)
    return RedirectResponse(url="/admin/cache?success=true", status_code=303)
