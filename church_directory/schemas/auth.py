"""Login request and token/user responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """JWT plus its lifetime; the same token is also set as a cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Seconds until the token expires")


class UserRead(BaseModel):
    """Current user; ``is_admin`` decides access to settings and cache controls."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    is_admin: bool
    role: str
