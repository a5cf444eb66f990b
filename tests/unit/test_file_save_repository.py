import json
import sys
import tempfile
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from warrior.domain.repositories import SaveRecord, SaveStoreError
from warrior.infrastructure.file_save_repo import FileSaveRepository


class FileSaveRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_loads_as_none(self) -> None:
        repository = FileSaveRepository(self.root / "save.json")
        self.assertIsNone(repository.load())
        self.assertFalse(repository.exists())

    def test_save_writes_envelope_and_loads_it_back(self) -> None:
        path = self.root / "nested" / "save.json"
        repository = FileSaveRepository(path)

        repository.save(SaveRecord(version=1, saved_at_ms=1234, state_payload={"elapsed_ms": 5.0}))

        envelope = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual({"version": 1, "saved_at": 1234, "state": {"elapsed_ms": 5.0}}, envelope)
        self.assertEqual(SaveRecord(1, 1234, {"elapsed_ms": 5.0}), repository.load())
        self.assertFalse(path.with_suffix(".tmp").exists())

    def test_named_slots_sit_beside_default_file(self) -> None:
        repository = FileSaveRepository(self.root / "save.json")

        repository.save(SaveRecord(1, 1, {"a": 1}), slot="alt run")

        self.assertTrue((self.root / "save.alt_run.json").exists())
        self.assertIsNone(repository.load())
        self.assertEqual({"a": 1}, repository.load("alt run").state_payload)

    def test_directory_path_holds_one_file_per_slot(self) -> None:
        repository = FileSaveRepository(self.root / "slots")

        repository.save(SaveRecord(1, 1, {}))

        self.assertTrue((self.root / "slots" / "default.json").exists())

    def test_corrupt_file_raises_store_error(self) -> None:
        path = self.root / "save.json"
        path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(SaveStoreError):
            FileSaveRepository(path).load()

    def test_non_object_envelope_raises_store_error(self) -> None:
        path = self.root / "save.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with self.assertRaises(SaveStoreError):
            FileSaveRepository(path).load()

    def test_malformed_envelope_fields_degrade(self) -> None:
        path = self.root / "save.json"
        path.write_text(json.dumps({"version": "one", "saved_at": 1e400, "state": []}), encoding="utf-8")

        record = FileSaveRepository(path).load()

        self.assertEqual(SaveRecord(version=0, saved_at_ms=0, state_payload={}), record)


if __name__ == "__main__":
    unittest.main()
