import io
import random
import sys
from pathlib import Path
import unittest

from rich.console import Console

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from warrior.application.dtos import OfflineReport
from warrior.application.services.balance_tables import DEFAULT_GAME_CONFIG
from warrior.application.services.save_service import SaveService
from warrior.infrastructure.inmemory.inmemory_save_repo import InMemorySaveRepository
from warrior.presentation.cli import render_offline_report, run_session


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=120, force_terminal=False, color_system=None), buffer


class CliSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = InMemorySaveRepository()
        self.service = SaveService(self.repository, clock=lambda: 5_000)

    def test_session_simulates_reports_and_saves(self) -> None:
        console, buffer = _console()

        state = run_session(
            self.service,
            DEFAULT_GAME_CONFIG,
            seconds=5,
            rng=random.Random(3),
            console=console,
        )

        transcript = buffer.getvalue()
        self.assertAlmostEqual(5_000, state.elapsed_ms)
        self.assertIn("Warrior", transcript)
        self.assertIn("Strength", transcript)
        self.assertIn("This session", transcript)
        self.assertTrue(self.repository.exists())

    def test_locked_cultivation_request_is_explained(self) -> None:
        console, buffer = _console()

        state = run_session(
            self.service,
            DEFAULT_GAME_CONFIG,
            seconds=1,
            mode="cultivation",
            rng=random.Random(3),
            save=False,
            console=console,
        )

        self.assertIn("Cultivation unlocks after the first defeat", buffer.getvalue())
        self.assertEqual("battle", state.activity_mode.value)
        self.assertFalse(self.repository.exists())

    def test_offline_report_panel(self) -> None:
        console, buffer = _console()

        render_offline_report(OfflineReport(away_seconds=600, passive_essence_gain=120, flow_essence_spent=0), console)
        render_offline_report(None, console)

        transcript = buffer.getvalue()
        self.assertIn("While you were away", transcript)
        self.assertIn("600s", transcript)
        self.assertIn("120", transcript)


if __name__ == "__main__":
    unittest.main()
