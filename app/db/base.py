"""ORM nexus."""

from __future__ import annotations

import importlib
import logging

from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base mold."""
    pass


_MODEL_MODULES = (
    "app.features.users.models",
    "app.features.problems.models",
    "app.features.submissions.models",
)


def import_models() -> None:
    """Import every feature model module so Base.metadata is complete."""
    for name in _MODEL_MODULES:
        importlib.import_module(name)
    logger.debug("Registered ORM models: %s", ", ".join(list_models()))


def list_models():  # pragma: no cover
    """List model names."""
    return [m.class_.__name__ for m in Base.registry.mappers]


__all__ = ["Base", "import_models", "list_models"]
