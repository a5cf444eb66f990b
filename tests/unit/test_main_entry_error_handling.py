import io
import os
import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import warrior.__main__ as runtime_main
from warrior.domain.repositories import SaveStoreError


class MainEntryErrorHandlingTests(unittest.TestCase):
    def test_main_handles_runtime_exceptions_without_traceback(self) -> None:
        output = io.StringIO()
        with mock.patch.object(runtime_main, "create_save_service", side_effect=RuntimeError("db unavailable")), mock.patch(
            "sys.stdout", output
        ):
            runtime_main.main([])

        text = output.getvalue()
        self.assertIn("An unexpected error occurred", text)
        self.assertIn("db unavailable", text)
        self.assertIn("Help:", text)
        self.assertNotIn("Traceback", text)

    def test_main_handles_keyboard_interrupt(self) -> None:
        output = io.StringIO()
        with mock.patch.object(runtime_main, "create_save_service", side_effect=KeyboardInterrupt), mock.patch(
            "sys.stdout", output
        ):
            runtime_main.main([])

        self.assertIn("Session ended", output.getvalue())

    def test_main_retries_inmemory_when_database_store_fails(self) -> None:
        output = io.StringIO()
        primary_service = object()
        fallback_service = object()

        def session_side_effect(service, *_args, **_kwargs):
            if service is primary_service:
                raise SaveStoreError("Save slot 'default' could not be written")
            return None

        with mock.patch.dict(os.environ, {"WARRIOR_DATABASE_URL": "sqlite:///unreachable.db"}, clear=False), mock.patch.object(
            runtime_main, "create_save_service", side_effect=[primary_service, fallback_service]
        ) as create_mock, mock.patch.object(runtime_main, "run_session", side_effect=session_side_effect), mock.patch(
            "sys.stdout", output
        ):
            runtime_main.main(["--seconds", "1"])

        text = output.getvalue()
        self.assertIn("retrying in-memory mode", text)
        self.assertEqual(2, create_mock.call_count)
        self.assertNotIn("An unexpected error occurred", text)

    def test_arguments_reach_the_session(self) -> None:
        with mock.patch.object(runtime_main, "create_save_service", return_value="service"), mock.patch.object(
            runtime_main, "run_session"
        ) as session_mock:
            runtime_main.main(["--seconds", "5", "--mode", "cultivation", "--flow", "1", "0", "2", "--seed", "3", "--no-save"])

        _, kwargs = session_mock.call_args
        self.assertEqual("service", session_mock.call_args.args[0])
        self.assertEqual(5.0, kwargs["seconds"])
        self.assertEqual("cultivation", kwargs["mode"])
        self.assertEqual([1.0, 0.0, 2.0], kwargs["flow"])
        self.assertFalse(kwargs["save"])
        self.assertIsNotNone(kwargs["rng"])


if __name__ == "__main__":
    unittest.main()
