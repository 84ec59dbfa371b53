"""HTML-serving view routes: home page and login."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from church_directory.api.deps import (
    clear_auth_cookie,
    get_db,
    get_settings_cache,
    set_auth_cookie,
)
from church_directory.services.auth import authenticate_user, create_access_token
from church_directory.services.settings_cache import SettingsProvider
from church_directory.services.site_settings import resolve_site_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Front page: site title, tagline and logo from settings."""
    site = resolve_site_settings(cache)
    return templates.TemplateResponse(request, "index.html", {"site": site})


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    cache: SettingsProvider = Depends(get_settings_cache),
):
    """Render login form."""
    site = resolve_site_settings(cache)
    return templates.TemplateResponse(request, "login.html", {"site": site})


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    db: Session = Depends(get_db),
    cache: SettingsProvider = Depends(get_settings_cache),
    username: str = Form(""),
    password: str = Form(""),
):
    """Handle login form submission."""
    user = authenticate_user(db, username, password)
    if user is None:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"site": resolve_site_settings(cache), "error": "Invalid username or password"},
            status_code=401,
        )
    token = create_access_token(data={"sub": user.username})
    resp = RedirectResponse(url="/admin/settings", status_code=302)
    set_auth_cookie(resp, token)
    return resp


@router.get("/logout")
def logout():
    """Clear auth cookie and redirect to login."""
    resp = RedirectResponse(url="/login", status_code=302)
    clear_auth_cookie(resp)
    return resp
