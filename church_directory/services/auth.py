"""Admin accounts: bcrypt-checked logins and the JWTs that carry them between requests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from church_directory.config import get_settings
from church_directory.models.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def token_lifetime() -> timedelta:
    """How long an issued token (and its cookie) stays valid."""
    return timedelta(hours=get_settings().access_token_expire_hours)


def create_user(db: Session, username: str, password: str, is_admin: bool = False) -> User:
    """Create a user. Raises ValueError if the username is taken."""
    if db.query(User).filter(User.username == username).first() is not None:
        raise ValueError(f"User '{username}' already exists")
    user = User(username=username, is_admin=is_admin)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s account %s", user.role, username)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """The user for these credentials, or None."""
    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.verify_password(password):
        logger.warning("Failed login for %r", username)
        return None
    return user


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign *data* with an ``exp`` claim (default lifetime: ``token_lifetime()``)."""
    to_encode = data.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + (expires_delta or token_lifetime())
    return jwt.encode(to_encode, get_settings().secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Payload of a valid, unexpired token; None otherwise."""
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_user_from_token(db: Session, token: str) -> User | None:
    payload = decode_access_token(token)
    username = payload.get("sub") if payload else None
    if not username:
        return None
    return db.query(User).filter(User.username == username).first()
