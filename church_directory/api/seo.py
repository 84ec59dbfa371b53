"""robots.txt and llms.txt, built from site settings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from church_directory.api.deps import get_settings_cache
from church_directory.services.settings_cache import SettingsProvider
from church_directory.services.site_settings import get_site_domain, resolve_site_settings

router = APIRouter()

# 24 hours
_TEXT_CACHE_HEADERS = {"Cache-Control": "public, max-age=86400"}


def render_robots_txt(site_domain: str) -> str:
    return f"""User-agent: *
Allow: /

# Block admin pages
Disallow: /admin/

# Block authentication pages
Disallow: /login
Disallow: /logout
Disallow: /api/auth/

# API endpoints
Disallow: /api/

Sitemap: https://{site_domain}/sitemap.xml
"""


def render_llms_txt(site_title: str, region_name: str, site_domain: str) -> str:
    return f"""# {site_title}

This is a directory of Christian churches in {region_name}, United States.

## What We Are
A directory listing churches across all counties in {region_name}. Our goal is to help
people find local churches and provide accurate information about service times,
locations, and affiliations.

## Key URLs
- Homepage: https://{site_domain}/
- Interactive Map: https://{site_domain}/map
- Church Networks: https://{site_domain}/networks
- Data Export: https://{site_domain}/data

## Usage Guidelines
- Data is provided for informational purposes
- Church information is community-maintained
- Verify service times directly with churches

For more information, visit https://{site_domain}/
"""


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots_txt(
    request: Request,
    cache: SettingsProvider = Depends(get_settings_cache),
) -> PlainTextResponse:
    """robots.txt pointing crawlers at the sitemap on the configured domain."""
    site_domain = get_site_domain(cache, request.headers.get("host"))
    return PlainTextResponse(render_robots_txt(site_domain), headers=_TEXT_CACHE_HEADERS)


@router.get("/llms.txt", response_class=PlainTextResponse)
def llms_txt(
    request: Request,
    cache: SettingsProvider = Depends(get_settings_cache),
) -> PlainTextResponse:
    """Plain-text site description for LLM crawlers."""
    site = resolve_site_settings(cache)
    site_domain = site.site_domain or request.headers.get("host") or "example.com"
    body = render_llms_txt(site.site_title, site.region_name, site_domain)
    return PlainTextResponse(body, headers=_TEXT_CACHE_HEADERS)
