"""FastAPI Heartbeat. Lean."""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.auth.routes import router as auth_router
from app.common.cache import RedisStore
from app.core.config import Settings, get_settings
from app.db.base import list_models
from app.db.session import Database
from app.features.judge0.service import Judge0Client
from app.features.problems.endpoints import router as problems_router
from app.features.submissions.endpoints import router as submissions_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.settings = settings
    app.state.started_at = datetime.now(timezone.utc)

    # ------------------------
    # CORS Setup
    # ------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------
    # Custom Middlewares
    # ------------------------
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
        req_id = incoming or str(uuid.uuid4())
        request.state.request_id = req_id
        logger = logging.getLogger("request")
        t0 = perf_counter()
        response = await call_next(request)
        response.headers["X-Request-Id"] = req_id
        logger.info(
            "%s %s %dms %s request_id=%s",
            request.method,
            request.url.path,
            int((perf_counter() - t0) * 1000),
            response.status_code,
            req_id,
        )
        return response

    # ------------------------
    # Routers
    # ------------------------
    app.include_router(auth_router)
    app.include_router(problems_router)
    app.include_router(submissions_router)

    # ------------------------
    # Client lifecycle
    # ------------------------
    @app.on_event("startup")
    async def _open_clients() -> None:
        logger = logging.getLogger("startup")
        # anything already attached (tests) is left alone
        if getattr(app.state, "db", None) is None:
            app.state.db = Database(settings.get_database_url(), echo=settings.debug)
            app.state.db.create_all()
        if getattr(app.state, "store", None) is None:
            app.state.store = RedisStore.from_url(settings.redis_url, cooldown_seconds=settings.submit_cooldown_s)
        if getattr(app.state, "judge0", None) is None:
            app.state.judge0 = Judge0Client.from_settings(settings)
        if not app.state.judge0.configured:
            logger.warning("JUDGE0_BASE_URL is empty; run and submit will fail")

    @app.on_event("shutdown")
    async def _close_clients() -> None:
        judge0 = getattr(app.state, "judge0", None)
        if judge0 is not None:
            await judge0.aclose()
        store = getattr(app.state, "store", None)
        if store is not None:
            await store.aclose()
        db = getattr(app.state, "db", None)
        if db is not None:
            db.dispose()

    # ------------------------
    # Meta endpoints
    # ------------------------
    @app.get("/", tags=["meta"], summary="API Root")
    async def root():
        return {
            "name": settings.app_name,
            "status": "ok",
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/healthz",
        }

    @app.get("/healthz", tags=["meta"], summary="Liveness / readiness probe")
    async def healthz() -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        db_status: str = "unknown"
        db_latency_ms: float | None = None
        try:
            db_latency_ms = app.state.db.ping()
            db_status = "ok"
        except SQLAlchemyError as e:
            db_status = f"error:{type(e).__name__}"

        judge0 = getattr(app.state, "judge0", None)
        judge0_ready = bool(judge0 is not None and judge0.configured)

        return {
            "status": "ok" if db_status == "ok" else "degraded",
            "time_utc": now.isoformat(),
            "uptime_seconds": round((now - app.state.started_at).total_seconds(), 2),
            "version": os.getenv("APP_VERSION", "dev"),
            "environment": "debug" if settings.debug else "prod",
            "components": {
                "database": (
                    {"status": db_status, "latency_ms": db_latency_ms}
                    if db_status == "ok"
                    else {"status": db_status}
                ),
                "judge0": "configured" if judge0_ready else "missing-config",
            },
            "counts": {"routes": len(app.routes), "models": len(list_models())},
        }

    return app


app = create_app()
