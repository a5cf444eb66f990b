import json
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from warrior.domain.repositories import DEFAULT_SAVE_SLOT, SaveRecord, SaveRepository, SaveStoreError
from .connection import SessionLocal

logger = logging.getLogger(__name__)

_CREATE_SAVE_SLOT = """
    CREATE TABLE IF NOT EXISTS save_slot (
        slot_key VARCHAR(64) NOT NULL PRIMARY KEY,
        version INTEGER NOT NULL,
        saved_at_ms BIGINT NOT NULL,
        state_json TEXT NOT NULL
    )
"""


def _dialect_name(session) -> str:
    return session.get_bind().dialect.name


def _ensure_schema(session) -> None:
    session.execute(text(_CREATE_SAVE_SLOT))


class SqlSaveRepository(SaveRepository):
    """Save slots in a single ``save_slot`` table; one transaction per call."""

    def load(self, slot: str = DEFAULT_SAVE_SLOT) -> Optional[SaveRecord]:
        try:
            with SessionLocal.begin() as session:
                _ensure_schema(session)
                row = session.execute(
                    text(
                        """
                        SELECT version, saved_at_ms, state_json
                        FROM save_slot
                        WHERE slot_key = :slot_key
                        """
                    ),
                    {"slot_key": str(slot)},
                ).first()
        except SQLAlchemyError as exc:
            raise SaveStoreError(f"Save slot {slot!r} could not be read") from exc

        if row is None:
            return None
        try:
            payload = json.loads(row.state_json or "{}")
        except ValueError as exc:
            raise SaveStoreError(f"Save slot {slot!r} holds malformed JSON") from exc
        return SaveRecord(
            version=int(row.version),
            saved_at_ms=int(row.saved_at_ms),
            state_payload=payload if isinstance(payload, dict) else {},
        )

    def save(self, record: SaveRecord, slot: str = DEFAULT_SAVE_SLOT) -> None:
        params = {
            "slot_key": str(slot),
            "version": int(record.version),
            "saved_at_ms": int(record.saved_at_ms),
            "state_json": json.dumps(record.state_payload, ensure_ascii=False),
        }
        try:
            with SessionLocal.begin() as session:
                _ensure_schema(session)
                if _dialect_name(session) == "mysql":
                    statement = text(
                        """
                        INSERT INTO save_slot (slot_key, version, saved_at_ms, state_json)
                        VALUES (:slot_key, :version, :saved_at_ms, :state_json)
                        ON DUPLICATE KEY UPDATE
                            version = VALUES(version),
                            saved_at_ms = VALUES(saved_at_ms),
                            state_json = VALUES(state_json)
                        """
                    )
                else:
                    statement = text(
                        """
                        INSERT INTO save_slot (slot_key, version, saved_at_ms, state_json)
                        VALUES (:slot_key, :version, :saved_at_ms, :state_json)
                        ON CONFLICT(slot_key) DO UPDATE SET
                            version = excluded.version,
                            saved_at_ms = excluded.saved_at_ms,
                            state_json = excluded.state_json
                        """
                    )
                session.execute(statement, params)
        except SQLAlchemyError as exc:
            raise SaveStoreError(f"Save slot {slot!r} could not be written") from exc
        logger.debug("Saved slot %s at %s", slot, record.saved_at_ms)

