# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from gymbro.errors import StorageError
from gymbro.store.backends import FileStorage, MemoryStorage
from gymbro.store.defaults import DEFAULT_DATA, deep_merge, get_defaults, merge_with_defaults
from gymbro.store.local import EXPORT_VERSION, STORAGE_KEY, LocalStore


def _fixed_clock() -> datetime:
    return datetime(2024, 3, 15, 12, 30, 0, tzinfo=timezone.utc)


class TestDefaultsMerge(unittest.TestCase):
    def test_merge_is_idempotent(self) -> None:
        doc = {
            "workoutHistory": [{"id": "1", "type": "Push"}],
            "preferences": {"theme": "dark"},
            "weightTracking": {"profile": {"height": 180}},
        }
        once = merge_with_defaults(doc)
        twice = merge_with_defaults(once)
        self.assertEqual(once, twice)

    def test_nested_objects_keep_missing_default_keys(self) -> None:
        merged = merge_with_defaults({"preferences": {"theme": "dark"}, "weightTracking": {"profile": {"height": 180}}})
        self.assertEqual(merged["preferences"]["theme"], "dark")
        self.assertEqual(merged["preferences"]["startWeekOn"], "monday")
        self.assertEqual(merged["weightTracking"]["profile"]["height"], 180)
        self.assertIsNone(merged["weightTracking"]["profile"]["targetWeight"])
        self.assertEqual(merged["weightTracking"]["history"], [])

    def test_lists_and_none_overwrite(self) -> None:
        merged = deep_merge({"a": [1, 2, 3], "b": {"c": 1}}, {"a": [9], "b": None})
        self.assertEqual(merged, {"a": [9], "b": None})

    def test_unknown_keys_survive(self) -> None:
        merged = merge_with_defaults({"someFutureKey": {"x": 1}})
        self.assertEqual(merged["someFutureKey"], {"x": 1})

    def test_defaults_are_copies(self) -> None:
        doc = get_defaults()
        doc["workoutHistory"].append({"id": "x"})
        self.assertEqual(DEFAULT_DATA["workoutHistory"], [])


class TestLocalStore(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = MemoryStorage()
        self.store = LocalStore(self.storage, clock=_fixed_clock)

    def test_empty_storage_returns_defaults(self) -> None:
        self.assertEqual(self.store.get(), get_defaults())

    def test_corrupt_document_yields_defaults(self) -> None:
        self.storage.set_item(STORAGE_KEY, "{not json")
        self.assertEqual(self.store.get(), get_defaults())

    def test_non_object_document_yields_defaults(self) -> None:
        self.storage.set_item(STORAGE_KEY, "[1, 2, 3]")
        self.assertEqual(self.store.get(), get_defaults())

    def test_save_stamps_last_updated(self) -> None:
        data = get_defaults()
        self.assertTrue(self.store.save(data))
        stored = json.loads(self.storage.get_item(STORAGE_KEY))
        self.assertEqual(stored["lastUpdated"], "2024-03-15T12:30:00.000Z")
        self.assertNotIn("lastUpdated", data)

    def test_quota_overflow_returns_false(self) -> None:
        store = LocalStore(MemoryStorage(quota_bytes=64), clock=_fixed_clock)
        self.assertFalse(store.save(get_defaults()))
        self.assertEqual(store.get(), get_defaults())

    def test_clear_removes_document(self) -> None:
        data = get_defaults()
        data["workoutHistory"] = [{"id": "1"}]
        self.store.save(data)
        self.assertTrue(self.store.clear())
        self.assertIsNone(self.storage.get_item(STORAGE_KEY))

    def test_export_import_round_trip(self) -> None:
        data = get_defaults()
        data["workoutHistory"] = [{"id": "1", "type": "Legs", "date": "2024-03-14", "duration": 50}]
        data["preferences"]["theme"] = "dark"
        self.store.save(data)

        exported = self.store.export()
        payload = json.loads(exported)
        self.assertEqual(payload["version"], EXPORT_VERSION)
        self.assertEqual(payload["exportDate"], "2024-03-15T12:30:00.000Z")

        other = LocalStore(MemoryStorage(), clock=_fixed_clock)
        self.assertTrue(other.import_(exported))
        self.assertEqual(other.get(), self.store.get())
        self.assertNotIn("exportDate", other.get())
        self.assertNotIn("version", other.get())

    def test_import_rejects_garbage(self) -> None:
        self.assertFalse(self.store.import_("not json"))
        self.assertFalse(self.store.import_('"a string"'))
        self.assertIsNone(self.storage.get_item(STORAGE_KEY))

    def test_storage_info(self) -> None:
        self.assertEqual(self.store.storage_info()["lastUpdated"], "Unknown")
        self.store.save(get_defaults())
        info = self.store.storage_info()
        self.assertGreater(info["sizeInBytes"], 0)
        self.assertEqual(info["lastUpdated"], "2024-03-15T12:30:00.000Z")


class TestFileStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="gymbro-test-"))
        self.storage = FileStorage(self._tmp / "local")

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_set_get_remove(self) -> None:
        self.assertIsNone(self.storage.get_item("gymbro_data"))
        self.storage.set_item("gymbro_data", '{"a": 1}')
        self.assertEqual(self.storage.get_item("gymbro_data"), '{"a": 1}')
        self.assertEqual(self.storage.keys(), ["gymbro_data"])
        self.storage.remove_item("gymbro_data")
        self.storage.remove_item("gymbro_data")
        self.assertIsNone(self.storage.get_item("gymbro_data"))

    def test_no_temp_files_left_behind(self) -> None:
        self.storage.set_item("auth_token", "abc")
        self.storage.set_item("auth_token", "def")
        leftovers = [p.name for p in (self._tmp / "local").iterdir() if p.suffix == ".tmp"]
        self.assertEqual(leftovers, [])

    def test_unsafe_key_rejected(self) -> None:
        with self.assertRaises(StorageError):
            self.storage.set_item("../escape", "x")

    def test_quota(self) -> None:
        storage = FileStorage(self._tmp / "small", quota_bytes=10)
        storage.set_item("a", "12345")
        with self.assertRaises(StorageError):
            storage.set_item("b", "1234567890")
        # Rewriting a key only counts its new size.
        storage.set_item("a", "1234567890")

    def test_local_store_on_files(self) -> None:
        store = LocalStore(self.storage, clock=_fixed_clock)
        data = get_defaults()
        data["mealHistory"] = [{"id": "1", "food": "Eggs"}]
        self.assertTrue(store.save(data))
        reopened = LocalStore(FileStorage(self._tmp / "local"))
        self.assertEqual(reopened.get()["mealHistory"], [{"id": "1", "food": "Eggs"}])


if __name__ == "__main__":
    unittest.main()
