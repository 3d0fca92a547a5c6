import json
import os
import tempfile
import unittest

from tracker.config import Settings
from tracker.dependencies import bootstrap_store
from tracker.persistence import (
    BackupHook,
    JsonFilePersistence,
    ensure_seeded,
    restore_from_backup,
)


def _read(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write(path, content):
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


class PersistenceTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.primary = os.path.join(self._tmp.name, "database.json")
        self.backup = os.path.join(self._tmp.name, "database-backup.json")

    def test_json_file_roundtrip_creates_directories(self):
        path = os.path.join(self._tmp.name, "nested", "dir", "db.json")
        persistence = JsonFilePersistence(path)
        persistence.save({"tasks": [{"id": "t1"}]})
        self.assertEqual(persistence.load(), {"tasks": [{"id": "t1"}]})
        with open(path, "r", encoding="utf-8") as f:
            self.assertIn('\n  "tasks"', f.read())

    def test_backup_overwrites_primary(self):
        _write(self.primary, json.dumps({"tasks": [{"id": "old"}]}))
        _write(self.backup, json.dumps({"tasks": [{"id": "new"}]}))
        self.assertTrue(restore_from_backup(self.primary, self.backup))
        self.assertEqual(_read(self.primary), {"tasks": [{"id": "new"}]})

    def test_no_backup_leaves_primary(self):
        _write(self.primary, json.dumps({"tasks": []}))
        self.assertFalse(restore_from_backup(self.primary, self.backup))
        self.assertEqual(_read(self.primary), {"tasks": []})

    def test_malformed_backup_is_logged_and_ignored(self):
        _write(self.primary, json.dumps({"tasks": [{"id": "keep"}]}))
        _write(self.backup, "{not json")
        with self.assertLogs("tracker.persistence", level="ERROR"):
            self.assertFalse(restore_from_backup(self.primary, self.backup))
        self.assertEqual(_read(self.primary), {"tasks": [{"id": "keep"}]})

    def test_seed_written_to_both_files_when_primary_missing(self):
        primary = os.path.join(self._tmp.name, "data", "database.json")
        self.assertTrue(ensure_seeded(primary, self.backup, {"users": []}))
        self.assertEqual(_read(primary), {"users": []})
        self.assertEqual(_read(self.backup), {"users": []})

    def test_corrupt_primary_is_not_reseeded(self):
        _write(self.primary, "{broken")
        self.assertFalse(ensure_seeded(self.primary, self.backup, {"users": []}))
        self.assertFalse(os.path.exists(self.backup))

    def test_backup_hook_writes_document(self):
        with self.assertLogs("tracker.persistence", level="INFO") as logs:
            BackupHook(self.backup)({"events": []})
        self.assertEqual(_read(self.backup), {"events": []})
        self.assertIn("Database backed up at", logs.output[0])


class BootstrapStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.settings = Settings(
            database_path=os.path.join(self._tmp.name, "database.json"),
            database_backup_path=os.path.join(self._tmp.name, "database-backup.json"),
        )

    def test_first_boot_seeds_and_hashes_passwords(self):
        store = bootstrap_store(self.settings)
        self.assertEqual(len(store.find_all("categories")), 7)
        self.assertEqual(len(store.find_all("users")), 3)
        for user in store.find_all("users"):
            self.assertTrue(user["password"].startswith("scrypt$"))
        self.assertEqual(
            _read(self.settings.database_path),
            _read(self.settings.database_backup_path),
        )

    def test_restored_backup_wins_over_primary(self):
        _write(self.settings.database_path, json.dumps({"tasks": [{"id": "stale"}]}))
        _write(
            self.settings.database_backup_path,
            json.dumps({"tasks": [{"id": "fresh"}]}),
        )
        store = bootstrap_store(self.settings)
        self.assertEqual(store.find_all("tasks"), [{"id": "fresh"}])

    def test_mutations_mirror_to_backup(self):
        store = bootstrap_store(self.settings)
        store.insert("tasks", {"id": "t003", "title": "Ship"})
        store.merge("tasks", "t001", {"status": "completed"})
        store.delete("events", "ev001")
        self.assertEqual(
            _read(self.settings.database_path),
            _read(self.settings.database_backup_path),
        )
        self.assertEqual(_read(self.settings.database_backup_path)["events"], [])


if __name__ == "__main__":
    unittest.main()
