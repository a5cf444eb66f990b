import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_save_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WARRIOR_DATABASE_URL", "WARRIOR_SAVE_PATH", "WARRIOR_SAVE_SLOT"):
        monkeypatch.delenv(name, raising=False)
