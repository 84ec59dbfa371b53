"""Settings table service functions (source of truth for the settings cache)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from church_directory.models.setting import Setting

if TYPE_CHECKING:
    from church_directory.services.settings_cache import SettingsProvider

logger = logging.getLogger(__name__)


def get_settings_from_db(db: Session) -> dict[str, str | None]:
    """Load all Setting rows and return as a dict.

    Returns a dict mapping key -> value for every row in the settings table.
    Database errors propagate.
    """
    rows = db.query(Setting.key, Setting.value).all()
    return {row.key: row.value for row in rows}


def update_settings(
    db: Session,
    updates: dict[str, str | None],
    cache: SettingsProvider | None = None,
) -> dict[str, str | None]:
    """Upsert key-value pairs into the settings table.

    For each key in *updates*, creates or updates the corresponding row, then
    invalidates *cache* so the next read sees the new values.
    Returns the full settings dict after the update.
    """
    if not updates:
        return get_settings_from_db(db)

    now = datetime.now(UTC)
    for key, value in updates.items():
        row = db.query(Setting).filter(Setting.key == key).first()
        if row is None:
            db.add(Setting(key=key, value=value, created_at=now, updated_at=now))
        else:
            row.value = value
            row.updated_at = now
    db.commit()
    logger.info("Updated settings: %s", ", ".join(sorted(updates)))

    if cache is not None:
        cache.invalidate()
    return get_settings_from_db(db)


def delete_setting(db: Session, key: str, cache: SettingsProvider | None = None) -> bool:
    """Remove a setting row. Returns False if the key did not exist."""
    row = db.query(Setting).filter(Setting.key == key).first()
    if row is None:
        return False
    db.delete(row)
    db.commit()
    logger.info("Deleted setting %s", key)

    if cache is not None:
        cache.invalidate()
    return True
