"""Shared FastAPI dependencies: clients, authentication, authorization and cooldowns."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.orm import Session

from app.auth.service import ACCESS_COOKIE_NAME, decode_access_token
from app.common.cache import RedisStore
from app.core.config import Settings, get_settings
from app.features.judge0.service import Judge0Client
from app.features.users.models import User, UserRole
from app.features.users.repository import user_repository

logger = logging.getLogger("auth.deps")


# ---- Clients (built at startup, see app.main) --------------------------------
def get_db(request: Request) -> Iterator[Session]:
    yield from request.app.state.db.session()


def get_store(request: Request) -> RedisStore:
    return request.app.state.store


def get_judge0_client(request: Request) -> Judge0Client:
    return request.app.state.judge0


# ---- Authentication ------------------------------------------------------------
def extract_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.removeprefix("Bearer ").strip()
    return request.cookies.get(ACCESS_COOKIE_NAME)


async def get_current_claims(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: RedisStore = Depends(get_store),
) -> Dict[str, Any]:
    token = extract_token(request)
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Authentication token is required")
    try:
        claims = decode_access_token(settings, token)
    except JWTError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    if await store.is_token_blocked(token):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token has expired, please login again")
    request.state.token = token
    return claims


def get_current_user(
    request: Request,
    claims: Dict[str, Any] = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> User:
    email_id = claims.get("email_id")
    if not email_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token: missing email")
    user = user_repository.get_by_email(db, email_id)
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User doesn't exist")
    logger.info(
        "auth_resolved user_id=%s role=%s request_id=%s path=%s",
        user.id,
        user.role.value,
        getattr(request.state, "request_id", None),
        request.url.path,
    )
    return user


async def require_admin(
    claims: Dict[str, Any] = Depends(get_current_claims),
    user: User = Depends(get_current_user),
) -> User:
    # both the token and the stored account must carry the admin role
    if claims.get("role") != UserRole.admin.value or user.role != UserRole.admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not authorized as admin")
    return user


# ---- Rate limiting -------------------------------------------------------------
async def enforce_submit_cooldown(
    user: User = Depends(get_current_user),
    store: RedisStore = Depends(get_store),
) -> User:
    try:
        acquired = await store.try_acquire_cooldown(user.id)
    except Exception as exc:  # noqa: BLE001
        logger.error("cooldown store unavailable: %s", exc)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error") from exc
    if not acquired:
        raise HTTPException(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "You are submitting too frequently. Please wait before trying again.",
        )
    return user
