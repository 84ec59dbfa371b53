"""KVEntry model: backing table for the database KV store."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from church_directory.db.session import Base


class KVEntry(Base):
    """Cached value with optional expiry. Disposable: safe to truncate at any time."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    # Naive UTC; NULL = never expires
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
