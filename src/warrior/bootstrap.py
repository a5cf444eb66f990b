import logging
import os
from typing import Callable

from warrior.application.services.save_service import SaveService
from warrior.domain.repositories import DEFAULT_SAVE_SLOT, SaveRepository
from warrior.infrastructure.file_save_repo import FileSaveRepository
from warrior.infrastructure.inmemory.inmemory_save_repo import InMemorySaveRepository

logger = logging.getLogger(__name__)


def _build_sql_repository() -> SaveRepository:
    # connection.py reads WARRIOR_DATABASE_URL at import time.
    from warrior.infrastructure.db.sql.repos import SqlSaveRepository

    return SqlSaveRepository()


def create_save_repository() -> SaveRepository:
    database_url = os.getenv("WARRIOR_DATABASE_URL", "").strip()
    if database_url:
        try:
            return _build_sql_repository()
        except Exception as exc:  # pragma: no cover
            logger.warning("Database save store unavailable, falling back to in-memory. Reason: %s", exc)
            return InMemorySaveRepository()

    save_path = os.getenv("WARRIOR_SAVE_PATH", "").strip()
    if save_path:
        return FileSaveRepository(save_path)

    return InMemorySaveRepository()


def create_save_service(clock: Callable[[], int] | None = None) -> SaveService:
    slot = os.getenv("WARRIOR_SAVE_SLOT", "").strip() or DEFAULT_SAVE_SLOT
    return SaveService(create_save_repository(), clock, slot=slot)
