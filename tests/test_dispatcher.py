# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import unittest
from datetime import datetime, timezone

from gymbro.store.backends import MemoryStorage
from gymbro.store.dispatcher import INTENT_KINDS, Dispatcher, Intent
from gymbro.store.local import STORAGE_KEY, LocalStore
from gymbro.store.manager import DataManager


def _fixed_clock() -> datetime:
    return datetime(2024, 3, 15, 9, 0, 0, tzinfo=timezone.utc)


class FakeSync:
    def __init__(self) -> None:
        self.pushes = 0

    def push_in_background(self) -> None:
        self.pushes += 1


class TestDispatcher(unittest.TestCase):
    def setUp(self) -> None:
        store = LocalStore(MemoryStorage(), clock=_fixed_clock)
        self.manager = DataManager(store, clock=_fixed_clock)
        self.sync = FakeSync()
        self.dispatcher = Dispatcher(self.manager, sync_client=self.sync)

    def test_change_set_lists_touched_keys(self) -> None:
        result = self.dispatcher.dispatch(Intent("log_workout", {"type": "Push", "date": "2024-03-15", "duration": "45"}))
        self.assertTrue(result.ok)
        self.assertEqual(result.changes, frozenset({"workoutHistory"}))
        self.assertEqual(result.record.duration, 45)
        self.assertEqual(result.state["workoutHistory"][0]["id"], result.record.id)
        self.assertEqual(self.sync.pushes, 1)

    def test_supplement_toggle_touches_two_keys(self) -> None:
        added = self.dispatcher.dispatch(Intent("add_supplement", {"name": "Creatine"}))
        result = self.dispatcher.dispatch(Intent("toggle_supplement", {"id": added.record.id, "taken": True}))
        self.assertEqual(result.changes, frozenset({"customSupplements", "supplementTracking"}))

    def test_weight_entry_touches_weight_tracking(self) -> None:
        result = self.dispatcher.dispatch(Intent("add_weight_entry", {"date": "2024-03-15", "weight": "80.5"}))
        self.assertEqual(result.changes, frozenset({"weightTracking"}))

        again = self.dispatcher.dispatch(Intent("add_weight_entry", {"date": "2024-03-15", "weight": "80.5"}))
        self.assertTrue(again.ok)
        self.assertEqual(again.changes, frozenset())
        self.assertEqual(self.sync.pushes, 1)

    def test_errors_are_captured(self) -> None:
        result = self.dispatcher.dispatch(Intent("update_workout", {"id": "missing", "patch": {"duration": "30"}}))
        self.assertFalse(result.ok)
        self.assertIn("missing", result.error)
        self.assertEqual(result.changes, frozenset())
        self.assertEqual(self.sync.pushes, 0)

    def test_toggle_supplement_stored_without_id(self) -> None:
        storage = MemoryStorage()
        storage.set_item(STORAGE_KEY, json.dumps({"customSupplements": [{"name": "Zinc"}]}))
        manager = DataManager(LocalStore(storage, clock=_fixed_clock), clock=_fixed_clock)
        dispatcher = Dispatcher(manager, sync_client=self.sync)

        result = dispatcher.dispatch(Intent("toggle_supplement", {"id": "Zinc", "taken": True}))
        self.assertTrue(result.ok, result.error)
        self.assertTrue(result.state["supplementTracking"]["2024-03-15"]["Zinc"])
        self.assertEqual(result.changes, frozenset({"customSupplements", "supplementTracking"}))

        result = self.dispatcher.dispatch(Intent("add_supplement", {"name": ""}))
        self.assertFalse(result.ok)

        result = self.dispatcher.dispatch(Intent("delete_workout", {}))
        self.assertFalse(result.ok)
        self.assertIn("id", result.error)

    def test_unknown_intent(self) -> None:
        result = self.dispatcher.dispatch(Intent("launch_rocket"))
        self.assertFalse(result.ok)
        self.assertIn("launch_rocket", result.error)

    def test_update_with_inline_fields(self) -> None:
        logged = self.dispatcher.dispatch(Intent("log_workout", {"type": "Push", "duration": 30}))
        result = self.dispatcher.dispatch(Intent("update_workout", {"id": logged.record.id, "duration": "55"}))
        self.assertTrue(result.ok)
        self.assertEqual(result.record.duration, 55)

    def test_planned_exercise_and_preferences(self) -> None:
        added = self.dispatcher.dispatch(
            Intent("add_planned_exercise", {"day": "Monday", "exercise": {"name": "Squat", "sets": 5}})
        )
        self.assertEqual(added.changes, frozenset({"plannedExercises"}))

        updated = self.dispatcher.dispatch(
            Intent("update_planned_exercise", {"day": "Monday", "id": added.record.id, "reps": 5})
        )
        self.assertEqual(updated.record.reps, 5)

        theme = self.dispatcher.dispatch(Intent("toggle_theme"))
        self.assertEqual(theme.changes, frozenset({"preferences"}))
        self.assertEqual(theme.record.theme, "dark")

    def test_state_is_a_snapshot(self) -> None:
        result = self.dispatcher.dispatch(Intent("log_meal", {"type": "Dinner", "date": "2024-03-15"}))
        result.state["mealHistory"].clear()
        self.assertEqual(len(self.manager.data["mealHistory"]), 1)

    def test_every_kind_is_handled_without_sync(self) -> None:
        dispatcher = Dispatcher(self.manager)
        self.assertIn("toggle_supplement_for_date", INTENT_KINDS)
        result = dispatcher.dispatch(Intent("update_workout_day", {"day": "Sunday", "focus": "Yoga"}))
        self.assertTrue(result.ok)
        self.assertEqual(result.changes, frozenset({"customWorkoutPlan"}))


if __name__ == "__main__":
    unittest.main()
