import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from warrior.domain.repositories import DEFAULT_SAVE_SLOT, SaveRecord, SaveRepository, SaveStoreError

_SLOT_SAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class FileSaveRepository(SaveRepository):
    """One JSON envelope per slot, replaced atomically on every save.

    ``path`` may name a file (used for the default slot) or a directory.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _path_for_slot(self, slot: str) -> Path:
        if self.path.suffix == ".json":
            if slot == DEFAULT_SAVE_SLOT:
                return self.path
            return self.path.with_name(f"{self.path.stem}.{_SLOT_SAFE.sub('_', slot)}.json")
        return self.path / f"{_SLOT_SAFE.sub('_', slot) or DEFAULT_SAVE_SLOT}.json"

    def load(self, slot: str = DEFAULT_SAVE_SLOT) -> Optional[SaveRecord]:
        path = self._path_for_slot(slot)
        if not path.exists():
            return None
        try:
            envelope = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SaveStoreError(f"Save file {path} could not be read") from exc
        if not isinstance(envelope, dict):
            raise SaveStoreError(f"Save file {path} does not hold an object")
        return _record_from_envelope(envelope)

    def save(self, record: SaveRecord, slot: str = DEFAULT_SAVE_SLOT) -> None:
        path = self._path_for_slot(slot)
        envelope = {
            "version": int(record.version),
            "saved_at": int(record.saved_at_ms),
            "state": record.state_payload,
        }
        tmp_path = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(envelope, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            raise SaveStoreError(f"Save file {path} could not be written") from exc


def _record_from_envelope(envelope: dict[str, Any]) -> SaveRecord:
    version = envelope.get("version")
    saved_at = envelope.get("saved_at")
    state = envelope.get("state")
    return SaveRecord(
        version=int(version) if isinstance(version, int) and not isinstance(version, bool) else 0,
        saved_at_ms=int(saved_at) if isinstance(saved_at, int) and not isinstance(saved_at, bool) else 0,
        state_payload=state if isinstance(state, dict) else {},
    )
