"""Print site settings from the database and from the settings cache.

Usage:
    python -m church_directory.scripts.check_settings
    python -m church_directory.scripts.check_settings --key logo_url --key favicon_url
    python -m church_directory.scripts.check_settings --clear-cache

Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import sys

from church_directory.config import get_settings
from church_directory.db.session import SessionLocal
from church_directory.services.kv_store import get_kv_store
from church_directory.services.settings_cache import SettingsCache
from church_directory.services.settings_service import get_settings_from_db


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect site settings and the settings cache")
    parser.add_argument(
        "--key", action="append", default=[], help="Only show these keys (repeatable)"
    )
    parser.add_argument(
        "--clear-cache", action="store_true", help="Invalidate the cached settings snapshot"
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        cache = SettingsCache(get_kv_store(), db, ttl=get_settings().settings_cache_ttl)
        if args.clear_cache:
            cache.invalidate()
            print("Settings cache invalidated.")
            return 0

        from_db = get_settings_from_db(db)
        load = cache.load()
        keys = args.key or sorted(set(from_db) | set(load.snapshot))
        print(f"cache_outcome={load.outcome.value} keys={len(from_db)}")
        for key in keys:
            db_value = from_db.get(key)
            cached_value = load.snapshot.get(key)
            marker = "" if db_value == cached_value else "  (stale in cache)"
            print(f"{key}={db_value!r}{marker}")
        return 0
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
