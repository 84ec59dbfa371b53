"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache

# 7 * 24 * 60 * 60; settings change rarely on this site
DEFAULT_SETTINGS_CACHE_TTL = 604800

KV_BACKENDS = ("memory", "database")


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Church Directory"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:// URLs work for local dev)
    database_url: str = "postgresql+psycopg://localhost:5432/church_directory_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    secret_key: str = ""
    access_token_expire_hours: int = 24

    # Settings cache: KV tier in front of the settings table
    kv_backend: str = "database"
    settings_cache_ttl: int = DEFAULT_SETTINGS_CACHE_TTL

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'church_directory_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.secret_key = os.getenv("SECRET_KEY", "")
        self.access_token_expire_hours = int(
            os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", str(self.access_token_expire_hours))
        )

        self.kv_backend = os.getenv("KV_BACKEND", self.kv_backend).strip().lower()
        if self.kv_backend not in KV_BACKENDS:
            raise ValueError(
                f"KV_BACKEND must be one of {', '.join(KV_BACKENDS)}; got {self.kv_backend!r}"
            )
        self.settings_cache_ttl = int(
            os.getenv("SETTINGS_CACHE_TTL", str(self.settings_cache_ttl))
        )
        if self.settings_cache_ttl <= 0:
            raise ValueError("SETTINGS_CACHE_TTL must be a positive number of seconds")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")
