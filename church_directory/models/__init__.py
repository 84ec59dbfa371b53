"""SQLAlchemy models."""

from church_directory.models.kv_entry import KVEntry
from church_directory.models.setting import Setting
from church_directory.models.user import User

__all__ = [
    "KVEntry",
    "Setting",
    "User",
]
