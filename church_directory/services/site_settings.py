"""Site settings resolver: typed view of the settings snapshot with central defaults.

Page handlers read site-wide values (title, tagline, logo, favicon, domain) through
``resolve_site_settings`` instead of looking up raw keys, so every default lives
here. Blank values in the table count as unset.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, fields

from church_directory.services.settings_cache import SettingsProvider, SettingsSnapshot

logger = logging.getLogger(__name__)

DEFAULT_SITE_TITLE = "Utah Churches"
DEFAULT_TAGLINE = "A directory of evangelical churches"
DEFAULT_FRONT_PAGE_TITLE = "Christian Churches in Utah"
DEFAULT_SITE_REGION = "UT"

_REGION_NAMES = {"UT": "Utah"}


class SettingKey(str, enum.Enum):
    """Recognized keys in the settings table."""

    SITE_DOMAIN = "site_domain"
    SITE_REGION = "site_region"
    R2_IMAGE_DOMAIN = "r2_image_domain"
    FAVICON_URL = "favicon_url"
    LOGO_URL = "logo_url"
    SITE_TITLE = "site_title"
    TAGLINE = "tagline"
    FRONT_PAGE_TITLE = "front_page_title"
    IMAGE_PREFIX = "image_prefix"


@dataclass(frozen=True)
class SiteSettings:
    """Resolved site settings. Field names match SettingKey values."""

    site_title: str = DEFAULT_SITE_TITLE
    tagline: str = DEFAULT_TAGLINE
    front_page_title: str = DEFAULT_FRONT_PAGE_TITLE
    site_region: str = DEFAULT_SITE_REGION
    site_domain: str | None = None
    r2_image_domain: str | None = None
    favicon_url: str | None = None
    logo_url: str | None = None
    image_prefix: str | None = None

    @property
    def region_name(self) -> str:
        """Display name for the region ("UT" -> "Utah")."""
        return _REGION_NAMES.get(self.site_region.upper(), self.site_region)

    @classmethod
    def from_snapshot(cls, snapshot: SettingsSnapshot) -> SiteSettings:
        """Build from a raw snapshot. Unknown keys are ignored."""
        values: dict[str, str] = {}
        for f in fields(cls):
            raw = snapshot.get(f.name)
            if raw is None:
                continue
            v = str(raw).strip()
            if v:
                values[f.name] = v
        return cls(**values)


def resolve_site_settings(provider: SettingsProvider) -> SiteSettings:
    """Resolve site settings, falling back to all defaults if settings can't be read."""
    try:
        snapshot = provider.get_all_settings()
    except Exception as e:
        logger.error("Error fetching site settings, using defaults: %s", e)
        return SiteSettings()
    return SiteSettings.from_snapshot(snapshot)


def get_site_domain(provider: SettingsProvider, host: str | None = None) -> str:
    """site_domain setting, else the request host, else example.com."""
    try:
        domain = provider.get_setting(SettingKey.SITE_DOMAIN.value)
    except Exception as e:
        logger.error("Error fetching site domain: %s", e)
        domain = None
    if domain and domain.strip():
        return domain.strip()
    return host or "example.com"
