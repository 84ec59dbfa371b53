"""Site settings schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from church_directory.services.settings_cache import CacheOutcome


class SettingsUpdate(BaseModel):
    """Schema for updating site settings. Unknown keys are rejected.

    Omitted fields are left untouched; an empty string clears the value.
    """

    model_config = ConfigDict(extra="forbid")

    site_title: str | None = Field(None, max_length=255)
    tagline: str | None = Field(None, max_length=500)
    front_page_title: str | None = Field(None, max_length=255)
    site_domain: str | None = Field(None, max_length=255, description="Public host, e.g. utahchurches.org")
    site_region: str | None = Field(None, max_length=64, description="Region code, e.g. UT")
    r2_image_domain: str | None = Field(None, max_length=255)
    favicon_url: str | None = Field(None, max_length=2048)
    logo_url: str | None = Field(None, max_length=2048)
    image_prefix: str | None = Field(None, max_length=255)

    def to_updates(self) -> dict[str, str | None]:
        """Fields the client actually sent; blank strings stored as NULL."""
        updates: dict[str, str | None] = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if isinstance(value, str):
                value = value.strip() or None
            updates[key] = value
        return updates


class SiteSettingsRead(BaseModel):
    """Resolved site settings with defaults applied (response)."""

    model_config = ConfigDict(from_attributes=True)

    site_title: str
    tagline: str
    front_page_title: str
    site_region: str
    region_name: str
    site_domain: str | None = None
    r2_image_domain: str | None = None
    favicon_url: str | None = None
    logo_url: str | None = None
    image_prefix: str | None = None


class SettingsRead(BaseModel):
    """Raw settings table contents (response)."""

    settings: dict[str, str | None]


class SettingsSnapshotRead(SettingsRead):
    """Raw settings plus which cache path served them."""

    cache_outcome: CacheOutcome


class CacheInvalidateResponse(BaseModel):
    detail: str = "Settings cache invalidated"
