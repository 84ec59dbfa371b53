"""Read-through cache for the settings table.

The whole table is cached as one JSON snapshot under ``settings:all``. Reads try
the KV store first and fall back to the database; a miss repopulates the KV
store with a TTL. Every KV failure degrades to "treat as miss" (reads) or "log
and continue" (writes, deletes). Only database errors reach the caller.

There is no locking: two requests missing at once both query the database and
both write the same snapshot back.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from church_directory.config import DEFAULT_SETTINGS_CACHE_TTL
from church_directory.services.kv_store import KVStore
from church_directory.services.settings_service import get_settings_from_db

logger = logging.getLogger(__name__)

SETTINGS_CACHE_KEY = "settings:all"

SettingsSnapshot = dict[str, str | None]


class CacheOutcome(str, enum.Enum):
    """Which path a settings load took."""

    HIT = "hit"
    # KV had nothing; loaded from the database and written back
    MISS_RECOVERED = "miss_recovered"
    # KV read, decode, shape check or write-back failed; loaded from the database anyway
    MISS_FAILED = "miss_failed"


@dataclass(frozen=True)
class SettingsLoad:
    snapshot: SettingsSnapshot
    outcome: CacheOutcome


class SettingsProvider(Protocol):
    """What page handlers depend on. Tests pass fakes."""

    def load(self) -> SettingsLoad: ...

    def get_all_settings(self) -> SettingsSnapshot: ...

    def get_setting(self, key: str) -> str | None: ...

    def invalidate(self) -> None: ...


class SettingsCache:
    """Request-scoped cache-aside view of the settings table."""

    def __init__(
        self,
        kv: KVStore,
        db: Session,
        ttl: int = DEFAULT_SETTINGS_CACHE_TTL,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        self._kv = kv
        self._db = db
        self._ttl = ttl

    @property
    def ttl(self) -> int:
        return self._ttl

    def _read_cached(self) -> tuple[SettingsSnapshot | None, bool]:
        """Return (snapshot or None, cache_failed)."""
        try:
            cached = self._kv.get_json(SETTINGS_CACHE_KEY)
        except Exception as e:
            logger.warning("KV cache read failed, falling back to database: %s", e)
            return None, True
        if cached is None:
            return None, False
        if not isinstance(cached, dict):
            logger.warning(
                "Ignoring cached settings snapshot of type %s", type(cached).__name__
            )
            return None, True
        bad_keys = sorted(k for k, v in cached.items() if v is not None and not isinstance(v, str))
        if bad_keys:
            logger.warning(
                "Ignoring cached settings snapshot with non-string values for: %s",
                ", ".join(bad_keys),
            )
            return None, True
        return cached, False

    def _write_cached(self, snapshot: SettingsSnapshot) -> bool:
        """Write the snapshot back. Returns False if the KV store refused it."""
        try:
            self._kv.put(
                SETTINGS_CACHE_KEY,
                json.dumps(snapshot),
                expiration_ttl=self._ttl,
            )
        except Exception as e:
            logger.warning("KV cache write failed: %s", e)
            return False
        return True

    def load(self) -> SettingsLoad:
        """Load the full snapshot and report which path was taken."""
        cached, read_failed = self._read_cached()
        if cached is not None:
            return SettingsLoad(snapshot=cached, outcome=CacheOutcome.HIT)

        snapshot = get_settings_from_db(self._db)
        written = self._write_cached(snapshot)

        if read_failed or not written:
            outcome = CacheOutcome.MISS_FAILED
        else:
            outcome = CacheOutcome.MISS_RECOVERED
        logger.debug("Settings loaded from database (%s, %d keys)", outcome.value, len(snapshot))
        return SettingsLoad(snapshot=snapshot, outcome=outcome)

    def get_all_settings(self) -> SettingsSnapshot:
        """All settings as a dict. Fails only if the database read fails."""
        return self.load().snapshot

    def get_setting(self, key: str) -> str | None:
        """One setting, or None when absent. Reads through the full snapshot."""
        return self.get_all_settings().get(key)

    def invalidate(self) -> None:
        """Best-effort delete of the cached snapshot. Never raises."""
        try:
            self._kv.delete(SETTINGS_CACHE_KEY)
        except Exception as e:
            logger.error("Failed to invalidate settings cache: %s", e)
