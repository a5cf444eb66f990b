from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


DEFAULT_SAVE_SLOT = "default"
SAVE_VERSION = 1


class SaveStoreError(RuntimeError):
    """Raised when a save store cannot be read or written."""


@dataclass(frozen=True)
class SaveRecord:
    version: int
    saved_at_ms: int
    state_payload: Dict[str, Any] = field(default_factory=dict)


class SaveRepository(ABC):
    @abstractmethod
    def load(self, slot: str = DEFAULT_SAVE_SLOT) -> Optional[SaveRecord]:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: SaveRecord, slot: str = DEFAULT_SAVE_SLOT) -> None:
        raise NotImplementedError

    def exists(self, slot: str = DEFAULT_SAVE_SLOT) -> bool:
        """Optional helper; default asks ``load`` and discards the record."""
        return self.load(slot) is not None
