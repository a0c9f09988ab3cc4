"""Judge backend.

``app`` resolves to the FastAPI application lazily so alembic and scripts that
only need settings or models do not build the whole app."""

from __future__ import annotations

__all__ = ["app"]


def __getattr__(name: str):
    if name == "app":
        from .main import app as fastapi_app
        return fastapi_app
    raise AttributeError(f"module {__name__} has no attribute {name!r}")
