from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Database
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./judge.db")
        # Redis (cooldowns, token blocklist)
        self.redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        # Judge0 / external
        self.judge0_api_url: str = os.getenv("JUDGE0_BASE_URL", "https://judge0-ce.p.rapidapi.com")
        self.judge0_api_key: str = os.getenv("JUDGE0_KEY", "")
        self.judge0_host: str = os.getenv("JUDGE0_HOST", "judge0-ce.p.rapidapi.com")
        self.judge0_timeout_s: float = _env_float("JUDGE0_TIMEOUT_S", 15.0)
        self.judge0_poll_interval_s: float = _env_float("JUDGE0_POLL_INTERVAL_S", 1.0)
        # 0 disables the bound and polls until every token is terminal
        max_attempts = _env_int("JUDGE0_MAX_POLL_ATTEMPTS", 120)
        self.judge0_max_poll_attempts: Optional[int] = max_attempts if max_attempts > 0 else None
        # Auth
        self.jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
        self.jwt_algorithm: str = "HS256"
        self.jwt_ttl_s: int = _env_int("JWT_TTL_S", 60 * 60)
        # Rate limiting
        self.submit_cooldown_s: int = _env_int("SUBMIT_COOLDOWN_S", 10)
        # App meta
        self.app_name: str = "Judge Backend"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        # Cookie/session configuration
        self.cookie_domain: str | None = os.getenv("COOKIE_DOMAIN") or None
        self.cookie_secure: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"
        self.cookie_samesite: str = os.getenv("COOKIE_SAMESITE", "lax").lower()  # lax|strict|none
        self.allow_origins: list[str] = [
            o.strip().rstrip("/")
            for o in os.getenv("ALLOW_ORIGINS", "http://localhost:5173").split(",")
            if o.strip()
        ]

    def get_database_url(self) -> str:
        return self.database_url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
