from __future__ import annotations

from typing import TYPE_CHECKING

from event_approval.repositories.base import Repository, UnitOfWork
from event_approval.repositories.memory import InMemoryRepository
from event_approval.repositories.sql import SqlRepository

if TYPE_CHECKING:
    from event_approval.config import Settings

__all__ = ["InMemoryRepository", "Repository", "SqlRepository", "UnitOfWork", "build_repository"]


def build_repository(settings: Settings) -> Repository:
    """Instantiate the store selected by ``settings.data_mode``."""
    if settings.data_mode == "database":
        return SqlRepository(settings.database_url, echo=settings.debug)
    return InMemoryRepository()
