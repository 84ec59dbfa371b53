"""Tests for the settings read-through cache."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from church_directory.config import DEFAULT_SETTINGS_CACHE_TTL, Settings
from church_directory.models.setting import Setting
from church_directory.services.kv_store import DatabaseKVStore, MemoryKVStore, build_kv_store
from church_directory.services.settings_cache import (
    SETTINGS_CACHE_KEY,
    CacheOutcome,
    SettingsCache,
)
from church_directory.services.settings_service import update_settings
from tests.fakes import make_settings_db, make_unqueryable_db


def _failing_kv(**failures: Exception) -> MagicMock:
    """KV store mock whose named operations raise."""
    kv = MagicMock(spec=MemoryKVStore)
    kv.get_json.return_value = None
    for op, exc in failures.items():
        getattr(kv, op).side_effect = exc
    return kv


# ── get_all_settings ─────────────────────────────────────────────────


class TestGetAllSettings:
    def test_populates_empty_cache_and_is_idempotent(self) -> None:
        kv = MemoryKVStore()
        db = make_settings_db({"site_title": "Acme", "tagline": "Churches of Acme"})
        cache = SettingsCache(kv, db)

        first = cache.get_all_settings()
        second = cache.get_all_settings()

        assert first == second == {"site_title": "Acme", "tagline": "Churches of Acme"}
        assert kv.get_json(SETTINGS_CACHE_KEY) == first

    def test_second_call_served_from_cache(self) -> None:
        kv = MemoryKVStore()
        db = make_settings_db({"site_title": "Acme"})
        cache = SettingsCache(kv, db)

        cache.get_all_settings()
        cache.get_all_settings()

        assert db.query.call_count == 1

    def test_cache_hit_skips_database(self) -> None:
        kv = MemoryKVStore()
        cached = {"site_title": "Cached Title", "logo_url": None}
        kv.put(SETTINGS_CACHE_KEY, json.dumps(cached), expiration_ttl=60)

        cache = SettingsCache(kv, make_unqueryable_db())

        assert cache.get_all_settings() == cached

    def test_empty_cached_snapshot_is_a_hit(self) -> None:
        kv = MemoryKVStore()
        kv.put(SETTINGS_CACHE_KEY, "{}", expiration_ttl=60)

        cache = SettingsCache(kv, make_unqueryable_db())

        assert cache.get_all_settings() == {}

    def test_kv_read_failure_falls_back_to_database(self) -> None:
        kv = _failing_kv(get_json=ConnectionError("kv down"))
        db = make_settings_db({"site_title": "Acme"})

        assert SettingsCache(kv, db).get_all_settings() == {"site_title": "Acme"}

    def test_kv_write_failure_is_swallowed(self) -> None:
        kv = _failing_kv(put=TimeoutError("kv write timed out"))
        db = make_settings_db({"site_title": "Acme"})

        assert SettingsCache(kv, db).get_all_settings() == {"site_title": "Acme"}
        kv.put.assert_called_once()

    def test_undecodable_cached_value_falls_back_to_database(self) -> None:
        kv = MemoryKVStore()
        kv.put(SETTINGS_CACHE_KEY, "{not json", expiration_ttl=60)
        db = make_settings_db({"site_title": "Acme"})

        assert SettingsCache(kv, db).get_all_settings() == {"site_title": "Acme"}
        # Repaired on the way out
        assert kv.get_json(SETTINGS_CACHE_KEY) == {"site_title": "Acme"}

    def test_database_failure_propagates(self) -> None:
        kv = MemoryKVStore()
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(OperationalError):
            SettingsCache(kv, db).get_all_settings()

    def test_write_back_uses_ttl(self) -> None:
        kv = MagicMock(spec=MemoryKVStore)
        kv.get_json.return_value = None
        db = make_settings_db({"site_title": "Acme"})

        SettingsCache(kv, db, ttl=120).get_all_settings()

        kv.put.assert_called_once_with(
            SETTINGS_CACHE_KEY, json.dumps({"site_title": "Acme"}), expiration_ttl=120
        )

    def test_default_ttl_is_seven_days(self) -> None:
        assert SettingsCache(MemoryKVStore(), MagicMock()).ttl == DEFAULT_SETTINGS_CACHE_TTL == 604800

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError):
            SettingsCache(MemoryKVStore(), MagicMock(), ttl=0)

    def test_null_values_survive_round_trip(self) -> None:
        kv = MemoryKVStore()
        db = make_settings_db({"logo_url": "https://x/logo.png", "site_title": None})
        cache = SettingsCache(kv, db)

        expected = {"logo_url": "https://x/logo.png", "site_title": None}
        assert cache.get_all_settings() == expected
        assert cache.get_setting("logo_url") == "https://x/logo.png"
        # Now from the cache
        assert cache.get_all_settings() == expected
        assert db.query.call_count == 1


# ── load / CacheOutcome ──────────────────────────────────────────────


class TestLoadOutcome:
    def test_miss_recovered_then_hit(self) -> None:
        cache = SettingsCache(MemoryKVStore(), make_settings_db({"a": "1"}))

        assert cache.load().outcome is CacheOutcome.MISS_RECOVERED
        assert cache.load().outcome is CacheOutcome.HIT

    def test_read_failure_reports_miss_failed(self) -> None:
        kv = _failing_kv(get_json=ConnectionError("kv down"))
        result = SettingsCache(kv, make_settings_db({"a": "1"})).load()

        assert result.outcome is CacheOutcome.MISS_FAILED
        assert result.snapshot == {"a": "1"}

    def test_write_failure_reports_miss_failed(self) -> None:
        kv = _failing_kv(put=ConnectionError("kv down"))
        result = SettingsCache(kv, make_settings_db({"a": "1"})).load()

        assert result.outcome is CacheOutcome.MISS_FAILED

    def test_non_string_value_reports_miss_failed(self) -> None:
        kv = MemoryKVStore()
        kv.put(SETTINGS_CACHE_KEY, json.dumps({"site_domain": 5}), expiration_ttl=60)

        result = SettingsCache(kv, make_settings_db({"site_domain": "acme.example.org"})).load()

        assert result.outcome is CacheOutcome.MISS_FAILED
        assert result.snapshot == {"site_domain": "acme.example.org"}
        assert kv.get_json(SETTINGS_CACHE_KEY) == {"site_domain": "acme.example.org"}

    def test_nested_value_reports_miss_failed(self) -> None:
        kv = MemoryKVStore()
        kv.put(SETTINGS_CACHE_KEY, json.dumps({"logo_url": {"src": "x"}}), expiration_ttl=60)

        result = SettingsCache(kv, make_settings_db({})).load()

        assert result.outcome is CacheOutcome.MISS_FAILED
        assert result.snapshot == {}

    def test_non_object_snapshot_reports_miss_failed(self) -> None:
        kv = MemoryKVStore()
        kv.put(SETTINGS_CACHE_KEY, json.dumps(["not", "a", "dict"]), expiration_ttl=60)

        result = SettingsCache(kv, make_settings_db({"a": "1"})).load()

        assert result.outcome is CacheOutcome.MISS_FAILED
        assert result.snapshot == {"a": "1"}


# ── get_setting ──────────────────────────────────────────────────────


class TestGetSetting:
    def test_returns_value(self) -> None:
        cache = SettingsCache(MemoryKVStore(), make_settings_db({"site_title": "Acme"}))
        assert cache.get_setting("site_title") == "Acme"

    def test_missing_key_returns_none(self) -> None:
        cache = SettingsCache(MemoryKVStore(), make_settings_db({"site_title": "Acme"}))
        assert cache.get_setting("missing_key") is None

    def test_reads_through_full_snapshot(self) -> None:
        kv = MemoryKVStore()
        cache = SettingsCache(kv, make_settings_db({"site_title": "Acme", "tagline": "t"}))

        cache.get_setting("site_title")

        assert kv.get_json(SETTINGS_CACHE_KEY) == {"site_title": "Acme", "tagline": "t"}


# ── invalidate ───────────────────────────────────────────────────────


class TestInvalidate:
    def test_next_read_requeries_database(self) -> None:
        kv = MemoryKVStore()
        db = make_settings_db({"site_title": "Acme"})
        cache = SettingsCache(kv, db)

        cache.get_all_settings()
        cache.get_all_settings()
        assert db.query.call_count == 1

        cache.invalidate()
        cache.get_all_settings()

        assert db.query.call_count == 2

    def test_invalidate_observes_new_values(self) -> None:
        kv = MemoryKVStore()
        db = make_settings_db({"site_title": "Old"})
        cache = SettingsCache(kv, db)
        assert cache.get_setting("site_title") == "Old"

        db.query.return_value.all.return_value = make_settings_db(
            {"site_title": "New"}
        ).query.return_value.all.return_value
        assert cache.get_setting("site_title") == "Old"

        cache.invalidate()
        assert cache.get_setting("site_title") == "New"

    def test_invalidate_swallows_kv_errors(self) -> None:
        kv = _failing_kv(delete=ConnectionError("kv down"))

        SettingsCache(kv, MagicMock()).invalidate()

        kv.delete.assert_called_once_with(SETTINGS_CACHE_KEY)

    def test_invalidate_on_empty_cache(self) -> None:
        SettingsCache(MemoryKVStore(), MagicMock()).invalidate()


# ── With the database KV store and real rows ─────────────────────────


class TestWithDatabase:
    def test_concrete_scenario(self, db, session_factory) -> None:
        db.add_all(
            [
                Setting(key="logo_url", value="https://x/logo.png"),
                Setting(key="site_title", value=None),
            ]
        )
        db.commit()
        cache = SettingsCache(DatabaseKVStore(session_factory), db)

        assert cache.get_all_settings() == {"logo_url": "https://x/logo.png", "site_title": None}
        assert cache.get_setting("logo_url") == "https://x/logo.png"
        assert cache.load().outcome is CacheOutcome.HIT

    def test_invalidate_clears_shared_entry(self, db, session_factory) -> None:
        db.add(Setting(key="site_title", value="Acme"))
        db.commit()
        kv = DatabaseKVStore(session_factory)
        SettingsCache(kv, db).get_all_settings()
        assert kv.get(SETTINGS_CACHE_KEY) is not None

        # A second cache instance (another request) sees and clears the same entry
        SettingsCache(kv, db).invalidate()

        assert kv.get(SETTINGS_CACHE_KEY) is None

    def test_default_backend_invalidates_for_every_worker(
        self, monkeypatch: pytest.MonkeyPatch, db, session_factory
    ) -> None:
        monkeypatch.delenv("KV_BACKEND", raising=False)
        worker1 = build_kv_store(Settings(), session_factory=session_factory)
        worker2 = build_kv_store(Settings(), session_factory=session_factory)
        db.add(Setting(key="site_title", value="Old"))
        db.commit()
        assert SettingsCache(worker1, db).get_setting("site_title") == "Old"
        assert SettingsCache(worker2, db).get_setting("site_title") == "Old"

        update_settings(db, {"site_title": "New"}, cache=SettingsCache(worker1, db))

        assert SettingsCache(worker2, db).get_setting("site_title") == "New"
