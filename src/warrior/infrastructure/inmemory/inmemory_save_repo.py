from __future__ import annotations

import copy
from typing import Dict, Optional

from warrior.domain.repositories import DEFAULT_SAVE_SLOT, SaveRecord, SaveRepository


class InMemorySaveRepository(SaveRepository):
    def __init__(self) -> None:
        self._records: Dict[str, SaveRecord] = {}

    def load(self, slot: str = DEFAULT_SAVE_SLOT) -> Optional[SaveRecord]:
        record = self._records.get(slot)
        if record is None:
            return None
        return SaveRecord(
            version=record.version,
            saved_at_ms=record.saved_at_ms,
            state_payload=copy.deepcopy(record.state_payload),
        )

    def save(self, record: SaveRecord, slot: str = DEFAULT_SAVE_SLOT) -> None:
        self._records[slot] = SaveRecord(
            version=record.version,
            saved_at_ms=record.saved_at_ms,
            state_payload=copy.deepcopy(record.state_payload),
        )

    def exists(self, slot: str = DEFAULT_SAVE_SLOT) -> bool:
        return slot in self._records
