from __future__ import annotations

import logging
import time
from typing import Callable

from warrior.application.dtos import LoadResult
from warrior.application.services.offline_service import apply_offline_progress
from warrior.application.services.simulation_service import create_initial_state
from warrior.domain.models.config import GameConfig
from warrior.domain.models.state import SimulationState
from warrior.domain.repositories import (
    DEFAULT_SAVE_SLOT,
    SAVE_VERSION,
    SaveRecord,
    SaveRepository,
    SaveStoreError,
)
from warrior.infrastructure.state_codec import state_from_payload, state_to_payload

logger = logging.getLogger(__name__)

SOURCE_NEW = "new"
SOURCE_SAVE = "save"
SOURCE_ERROR = "error"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SaveService:
    """Load/save a session, applying offline catch-up for the time spent away."""

    def __init__(
        self,
        repository: SaveRepository,
        clock: Callable[[], int] | None = None,
        *,
        slot: str = DEFAULT_SAVE_SLOT,
    ) -> None:
        self.repository = repository
        self.clock = clock or _wall_clock_ms
        self.slot = slot

    def load_game(self, config: GameConfig) -> LoadResult:
        fallback = create_initial_state(config)
        try:
            record = self.repository.load(self.slot)
        except SaveStoreError:
            logger.exception("Save slot %s could not be loaded; starting fresh", self.slot)
            return LoadResult(state=fallback, source=SOURCE_ERROR)

        if record is None:
            return LoadResult(state=fallback, source=SOURCE_NEW)
        if record.version != SAVE_VERSION:
            logger.warning(
                "Save slot %s has version %s (expected %s); starting fresh",
                self.slot,
                record.version,
                SAVE_VERSION,
            )
            return LoadResult(state=fallback, source=SOURCE_NEW)

        try:
            hydrated = state_from_payload(record.state_payload, config)
        except (TypeError, ValueError, AttributeError):
            logger.exception("Save slot %s holds an unreadable state; starting fresh", self.slot)
            return LoadResult(state=fallback, source=SOURCE_ERROR)

        elapsed_ms = max(0, int(self.clock()) - int(record.saved_at_ms)) if record.saved_at_ms > 0 else 0
        offline = apply_offline_progress(hydrated, elapsed_ms, config)
        return LoadResult(
            state=offline.state,
            offline_report=offline.report,
            source=SOURCE_SAVE,
            offline_events=offline.events,
        )

    def save_game(self, state: SimulationState) -> SaveRecord:
        record = SaveRecord(
            version=SAVE_VERSION,
            saved_at_ms=int(self.clock()),
            state_payload=state_to_payload(state),
        )
        self.repository.save(record, self.slot)
        return record
