"""Session forge."""

from __future__ import annotations

import logging
import time
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base, import_models

logger = logging.getLogger("db.session")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    if not url:
        raise RuntimeError("DATABASE_URL not configured")
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=300,
        echo=echo,
    )


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.engine = build_engine(url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        import_models()
        Base.metadata.create_all(self.engine)

    def ping(self) -> float:
        """Round-trip a trivial query and return the latency in ms."""
        start = time.perf_counter()
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return round((time.perf_counter() - start) * 1000, 2)

    def session(self) -> Iterator[Session]:
        t0 = time.perf_counter()
        db = self.SessionLocal()
        acquire_ms = int((time.perf_counter() - t0) * 1000)
        if acquire_ms > 50:
            logger.warning("db_acquire_ms=%d", acquire_ms)
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
