"""JSON login for API clients. Browser logins go through /login in views.py."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from church_directory.api.deps import clear_auth_cookie, get_db, require_auth, set_auth_cookie
from church_directory.models.user import User
from church_directory.schemas.auth import LoginRequest, TokenResponse, UserRead
from church_directory.services.auth import authenticate_user, create_access_token, token_lifetime

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Issue a bearer token and set the same token as a cookie."""
    user = authenticate_user(db, body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_access_token(data={"sub": user.username})
    set_auth_cookie(response, token)
    logger.info("API login for %s (%s)", user.username, user.role)
    return TokenResponse(
        access_token=token, expires_in=int(token_lifetime().total_seconds())
    )


@router.post("/logout")
def logout(response: Response) -> dict:
    clear_auth_cookie(response)
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(require_auth)) -> UserRead:
    return UserRead.model_validate(current_user)
