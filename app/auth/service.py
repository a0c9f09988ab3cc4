from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Response
from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.config import Settings

ACCESS_COOKIE_NAME = "token"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(settings: Settings, *, email_id: str, role: str) -> str:
    now = int(time.time())
    claims = {
        "email_id": email_id,
        "role": role,
        "iat": now,
        "exp": now + settings.jwt_ttl_s,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Dict[str, Any]:
    """Verify signature and expiry. Raises JWTError."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def token_expiry(token: str) -> Optional[int]:
    try:
        exp = jwt.get_unverified_claims(token).get("exp")
    except JWTError:
        return None
    return int(exp) if isinstance(exp, (int, float)) else None


def set_auth_cookie(resp: Response, token: str, settings: Settings) -> None:
    resp.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        domain=settings.cookie_domain,
        max_age=settings.jwt_ttl_s,
        path="/",
    )


def clear_auth_cookie(resp: Response, settings: Settings) -> None:
    resp.delete_cookie(key=ACCESS_COOKIE_NAME, domain=settings.cookie_domain, path="/")
