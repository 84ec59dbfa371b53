"""Key-value stores with per-entry TTL, used as the cache tier in front of the database.

Two backends:

- ``MemoryKVStore``: per-process cachetools cache. Each gunicorn worker has its own copy, so
  an invalidation only reaches the worker that handled it; entries in other
  workers live until their TTL runs out.
- ``DatabaseKVStore``: ``kv_entries`` table, shared by every worker.

Both are disposable projections. Callers must tolerate any operation raising.
"""

from __future__ import annotations

import json
import logging
import math
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from cachetools import TLRUCache
from sqlalchemy.orm import Session, sessionmaker

from church_directory.config import Settings
from church_directory.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class KVStore(Protocol):
    """get / put / delete with optional TTL (seconds)."""

    def get(self, key: str) -> str | None: ...

    def get_json(self, key: str) -> Any | None: ...

    def put(self, key: str, value: str, expiration_ttl: int | None = None) -> None: ...

    def delete(self, key: str) -> None: ...


def _validate_ttl(expiration_ttl: int | None) -> None:
    if expiration_ttl is not None and expiration_ttl <= 0:
        raise ValueError("expiration_ttl must be a positive number of seconds")


def _entry_expiry(key: str, entry: tuple[int | None, str], now: float) -> float:
    """TLRUCache ttu: entries stored without a TTL never expire."""
    ttl = entry[0]
    return now + ttl if ttl is not None else math.inf


def _decode_json(raw: str | None) -> Any | None:
    """Decode a stored value; malformed JSON raises json.JSONDecodeError."""
    if raw is None:
        return None
    return json.loads(raw)


class MemoryKVStore:
    """In-process store on a cachetools TLRUCache; each entry carries its own TTL."""

    def __init__(self, maxsize: int = 1024, clock: Callable[[], float] = time.monotonic) -> None:
        self._cache: TLRUCache[str, tuple[int | None, str]] = TLRUCache(
            maxsize=maxsize, ttu=_entry_expiry, timer=clock
        )
        # cachetools caches are not thread-safe; sync routes run in a threadpool
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._cache.get(key)
        return entry[1] if entry is not None else None

    def get_json(self, key: str) -> Any | None:
        return _decode_json(self.get(key))

    def put(self, key: str, value: str, expiration_ttl: int | None = None) -> None:
        _validate_ttl(expiration_ttl)
        with self._lock:
            self._cache[key] = (expiration_ttl, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)


def _utcnow() -> datetime:
    """Naive UTC now, matching how kv_entries.expires_at is stored."""
    return datetime.now(UTC).replace(tzinfo=None)


class DatabaseKVStore:
    """Store backed by the kv_entries table.

    Uses its own short-lived sessions so a failing cache write never leaves the
    caller's request session in a broken transaction.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._now = now

    def get(self, key: str) -> str | None:
        with self._session_factory() as db:
            row = db.get(KVEntry, key)
            if row is None:
                return None
            if row.expires_at is not None and self._now() >= row.expires_at:
                db.delete(row)
                db.commit()
                return None
            return row.value

    def get_json(self, key: str) -> Any | None:
        return _decode_json(self.get(key))

    def put(self, key: str, value: str, expiration_ttl: int | None = None) -> None:
        _validate_ttl(expiration_ttl)
        expires_at = (
            self._now() + timedelta(seconds=expiration_ttl)
            if expiration_ttl is not None
            else None
        )
        with self._session_factory() as db:
            db.merge(KVEntry(key=key, value=value, expires_at=expires_at))
            db.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as db:
            db.query(KVEntry).filter(KVEntry.key == key).delete(synchronize_session=False)
            db.commit()


def build_kv_store(settings: Settings, session_factory: sessionmaker[Session] | None = None) -> KVStore:
    """Create the KV store selected by KV_BACKEND."""
    if settings.kv_backend == "memory":
        return MemoryKVStore()
    if settings.kv_backend == "database":
        if session_factory is None:
            from church_directory.db.session import SessionLocal

            session_factory = SessionLocal
        return DatabaseKVStore(session_factory)
    raise ValueError(f"Unknown KV backend: {settings.kv_backend!r}")


_kv_store: KVStore | None = None


def get_kv_store() -> KVStore:
    """Process-wide KV store, created on first use."""
    global _kv_store
    if _kv_store is None:
        from church_directory.config import get_settings

        settings = get_settings()
        _kv_store = build_kv_store(settings)
        logger.info("Settings cache KV backend: %s", settings.kv_backend)
        if settings.kv_backend == "memory":
            logger.warning(
                "KV_BACKEND=memory: invalidations stay in this process; "
                "run a single worker or use KV_BACKEND=database"
            )
    return _kv_store


def reset_kv_store() -> None:
    """Drop the process-wide store (tests, config reload)."""
    global _kv_store
    _kv_store = None
